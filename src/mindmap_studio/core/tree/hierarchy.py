"""Pure edit operations on the hierarchical mindmap tree.

Every function returns a new tree and leaves its argument untouched. Unchanged
subtrees are shared between the input and the result. Walks use explicit
stacks, so tree depth is not bounded by the interpreter's recursion limit.
"""

from collections.abc import Callable, Iterator
from dataclasses import replace
from typing import Any, TypeVar

from mindmap_studio.models.node import HierarchicalNode

T = TypeVar("T")


def iter_nodes(tree: HierarchicalNode) -> Iterator[HierarchicalNode]:
    """Yield every node of the tree in pre-order."""
    stack = [tree]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def count_nodes(tree: HierarchicalNode) -> int:
    return sum(1 for _ in iter_nodes(tree))


def find_by_id(tree: HierarchicalNode, node_id: str) -> HierarchicalNode | None:
    """Depth-first search for a node, returning None if it is absent."""
    for node in iter_nodes(tree):
        if node.id == node_id:
            return node
    return None


def find_depth(tree: HierarchicalNode, node_id: str) -> int | None:
    """Return the number of ancestors of the first node matching ``node_id``."""
    stack = [(tree, 0)]
    while stack:
        node, depth = stack.pop()
        if node.id == node_id:
            return depth
        stack.extend((child, depth + 1) for child in reversed(node.children))
    return None


def fold_tree(tree: HierarchicalNode, combine: Callable[[HierarchicalNode, list[T]], T]) -> T:
    """Reduce the tree bottom-up.

    ``combine(node, child_results)`` is called once per node, after all of
    its children, with their results in stored order.
    """
    stack: list[tuple[HierarchicalNode, list[T]]] = [(tree, [])]
    while True:
        node, results = stack[-1]
        if len(results) < len(node.children):
            stack.append((node.children[len(results)], []))
            continue
        stack.pop()
        value = combine(node, results)
        if not stack:
            return value
        stack[-1][1].append(value)


def _rebuild(
    tree: HierarchicalNode, visit: Callable[[HierarchicalNode], HierarchicalNode]
) -> HierarchicalNode:
    """Rebuild the tree bottom-up, applying ``visit`` to every node.

    A node whose children all came back unchanged is reused as is before
    ``visit`` sees it.
    """

    def combine(node: HierarchicalNode, children: list[HierarchicalNode]) -> HierarchicalNode:
        if any(new is not old for new, old in zip(children, node.children, strict=True)):
            node = replace(node, children=tuple(children))
        return visit(node)

    return fold_tree(tree, combine)


def update_by_id(tree: HierarchicalNode, node_id: str, patch: dict[str, Any]) -> HierarchicalNode:
    """Return a copy of the tree with ``patch`` merged into the matching node.

    The whole tree is visited, so the patch applies wherever the id occurs.

    Raises:
        TypeError: If ``patch`` names a field HierarchicalNode does not have.
    """
    return _rebuild(tree, lambda node: replace(node, **patch) if node.id == node_id else node)


def insert_child(
    tree: HierarchicalNode, parent_id: str, new_node: HierarchicalNode
) -> HierarchicalNode:
    """Append ``new_node`` to the children of the first node matching ``parent_id``."""
    parent = find_by_id(tree, parent_id)
    if parent is None:
        return tree

    def attach(node: HierarchicalNode) -> HierarchicalNode:
        if node is parent:
            return replace(node, children=(*node.children, new_node))
        return node

    return _rebuild(tree, attach)


def remove_by_id(tree: HierarchicalNode, node_id: str) -> HierarchicalNode:
    """Drop the node matching ``node_id`` (with its subtree) from every children list.

    The tree's own root is never in a children list, so asking to remove it
    leaves the tree as it is. Guarding the root is the caller's concern.
    """

    def prune(node: HierarchicalNode) -> HierarchicalNode:
        if not any(child.id == node_id for child in node.children):
            return node
        return replace(node, children=tuple(c for c in node.children if c.id != node_id))

    return _rebuild(tree, prune)
