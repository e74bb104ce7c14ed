"""Hide the descendants of collapsed nodes."""

from collections.abc import Collection
from dataclasses import replace

from mindmap_studio.models.node import FlatEdge, FlatNode


def child_map(edges: list[FlatEdge]) -> dict[str, list[str]]:
    """Build a source -> [targets] adjacency map, keeping edge order."""
    children: dict[str, list[str]] = {}
    for edge in edges:
        children.setdefault(edge.source, []).append(edge.target)
    return children


def hidden_descendants(edges: list[FlatEdge], collapsed_ids: Collection[str]) -> set[str]:
    """Return ids of every node below any collapsed node."""
    children = child_map(edges)
    hidden: set[str] = set()
    todo = [child for node_id in collapsed_ids for child in children.get(node_id, [])]
    while todo:
        node_id = todo.pop()
        if node_id in hidden:
            continue
        hidden.add(node_id)
        todo.extend(children.get(node_id, []))
    return hidden


def filter_collapsed(
    nodes: list[FlatNode],
    edges: list[FlatEdge],
    collapsed_ids: Collection[str],
) -> tuple[list[FlatNode], list[FlatEdge]]:
    """Return the subgraph left visible by the collapse set.

    A collapsed node stays visible (marked ``is_expanded=False``); only its
    descendants are removed, along with every edge touching them.
    """
    if not collapsed_ids:
        return nodes, edges

    hidden = hidden_descendants(edges, collapsed_ids)

    visible_nodes = [
        replace(node, is_expanded=False) if node.id in collapsed_ids else node
        for node in nodes
        if node.id not in hidden
    ]
    visible_edges = [
        edge for edge in edges if edge.source not in hidden and edge.target not in hidden
    ]
    return visible_nodes, visible_edges
