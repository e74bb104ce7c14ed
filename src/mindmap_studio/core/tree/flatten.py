"""Flatten a hierarchical tree into parallel node and edge lists."""

from mindmap_studio.models.node import FlatEdge, FlatNode, HierarchicalNode


def edge_id(source: str, target: str) -> str:
    return f"e-{source}-{target}"


def flatten_hierarchy(
    root: HierarchicalNode,
    *,
    depth: int = 0,
    parent_id: str | None = None,
) -> tuple[list[FlatNode], list[FlatEdge]]:
    """Flatten ``root`` and its descendants in pre-order.

    Children are visited in stored order, which the tree layout relies on for
    reproducible output. Every node starts out expanded; collapse state is
    applied afterwards by the visibility filter.

    Args:
        root: Node to start from. A subtree may be passed to flatten it as a
            standalone mini-tree.
        depth: Depth assigned to ``root``.
        parent_id: If given, an edge ``parent_id -> root.id`` is emitted.

    Returns:
        Tuple of (nodes, edges); edges are in the order their targets appear.
    """
    nodes: list[FlatNode] = []
    edges: list[FlatEdge] = []

    todo: list[tuple[HierarchicalNode, int, str | None]] = [(root, depth, parent_id)]
    while todo:
        node, node_depth, node_parent = todo.pop()
        nodes.append(
            FlatNode(
                id=node.id,
                depth=node_depth,
                label=node.label,
                kind=node.kind,
                summary=node.summary,
                details=node.details,
                has_children=bool(node.children),
                child_count=len(node.children),
            )
        )
        if node_parent is not None:
            edges.append(
                FlatEdge(id=edge_id(node_parent, node.id), source=node_parent, target=node.id)
            )

        # Reversed so the first child is popped first (pre-order).
        for child in reversed(node.children):
            todo.append((child, node_depth + 1, node.id))

    return nodes, edges
