"""Deterministic radial layout: concentric rings around the root."""

import math
from dataclasses import replace

from mindmap_studio.config import DEFAULT_LAYOUT, LayoutConfig
from mindmap_studio.core.layout.common import top_left, trivial_layout
from mindmap_studio.core.tree.visibility import child_map
from mindmap_studio.models.node import FlatEdge, FlatNode


def calculate_radial_layout(
    nodes: list[FlatNode],
    edges: list[FlatEdge],
    *,
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> list[FlatNode]:
    """Place the root at the origin and each level on a ring of radius ``level * radial_step``.

    Each node's children split its angular sector evenly, in lexicographic id
    order. The root's children share the full circle. Angle 0 points up.
    Nodes not reachable from the root keep their current position.
    """
    trivial = trivial_layout(nodes, top_left(0.0, 0.0, config))
    if trivial is not None:
        return trivial

    root = next((node for node in nodes if node.depth == 0), nodes[0])
    children = child_map(edges)

    centers: dict[str, tuple[float, float]] = {root.id: (0.0, 0.0)}
    todo: list[tuple[str, float, float, int]] = [(root.id, 0.0, 2 * math.pi, 1)]
    while todo:
        parent_id, start, end, level = todo.pop()
        kids = sorted(kid for kid in children.get(parent_id, []) if kid not in centers)
        if not kids:
            continue

        sector = (end - start) / len(kids)
        radius = level * config.radial_step
        for i, kid in enumerate(kids):
            kid_start = start + i * sector
            angle = kid_start + sector / 2 - math.pi / 2
            centers[kid] = (radius * math.cos(angle), radius * math.sin(angle))
            todo.append((kid, kid_start, kid_start + sector, level + 1))

    return [
        replace(node, position=top_left(*centers[node.id], config))
        if node.id in centers
        else node
        for node in nodes
    ]
