"""Helpers shared by the layout engines."""

from dataclasses import replace

from mindmap_studio.config import LayoutConfig
from mindmap_studio.models.node import FlatNode, Position


def top_left(x: float, y: float, config: LayoutConfig) -> Position:
    """Convert a node center to the top-left corner the renderer expects."""
    return Position(x=x - config.node_width / 2, y=y - config.node_height / 2)


def trivial_layout(nodes: list[FlatNode], single: Position) -> list[FlatNode] | None:
    """Lay out graphs with fewer than two nodes, or return None.

    An empty list comes back unchanged; a single node is placed at ``single``.
    """
    if not nodes:
        return nodes
    if len(nodes) == 1:
        return [replace(nodes[0], position=single)]
    return None
