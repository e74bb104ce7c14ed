"""Dispatch between the layout engines by mode name."""

from typing import Protocol

from loguru import logger

from mindmap_studio.config import DEFAULT_LAYOUT, LayoutConfig
from mindmap_studio.core.layout.force import calculate_graph_layout
from mindmap_studio.core.layout.radial import calculate_radial_layout
from mindmap_studio.core.layout.tree import calculate_tree_layout
from mindmap_studio.models.node import FlatEdge, FlatNode, validate_layout_mode


class LayoutFunction(Protocol):
    """Positions a flat graph; returns the same nodes with new positions."""

    def __call__(
        self, nodes: list[FlatNode], edges: list[FlatEdge], *, config: LayoutConfig = ...
    ) -> list[FlatNode]: ...


LAYOUT_ENGINES: dict[str, LayoutFunction] = {
    "tree": calculate_tree_layout,
    "graph": calculate_graph_layout,
    "radial": calculate_radial_layout,
}


def calculate_layout(
    mode: str,
    nodes: list[FlatNode],
    edges: list[FlatEdge],
    *,
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> list[FlatNode]:
    """Lay out ``nodes`` with the engine registered for ``mode``."""
    engine = LAYOUT_ENGINES[validate_layout_mode(mode)]
    logger.debug("Layout {}: {} nodes, {} edges", mode, len(nodes), len(edges))
    return engine(nodes, edges, config=config)
