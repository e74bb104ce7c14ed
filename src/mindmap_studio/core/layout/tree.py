"""Layered top-to-bottom layout for the tree view.

Phases:
  1. Graph construction in node/edge insertion order (networkx keeps it).
  2. Rank assignment: each node's topological generation.
  3. Coordinate assignment: leaves take consecutive slots from left to right
     and every parent is centered over its first and last child.

Boxes in one rank are ``node_width + node_sep`` apart; ranks are
``node_height + rank_sep`` apart. The leftmost box starts at x=0 and the first
rank at y=0.
"""

from dataclasses import replace

import networkx as nx

from mindmap_studio.config import DEFAULT_LAYOUT, LayoutConfig
from mindmap_studio.core.layout.common import top_left, trivial_layout
from mindmap_studio.models.node import FlatEdge, FlatNode, Position


def build_graph(nodes: list[FlatNode], edges: list[FlatEdge]) -> nx.DiGraph:
    """Build a directed graph, skipping edges whose endpoints are not in ``nodes``."""
    graph: nx.DiGraph = nx.DiGraph()
    graph.add_nodes_from(node.id for node in nodes)
    graph.add_edges_from(
        (edge.source, edge.target)
        for edge in edges
        if edge.source in graph and edge.target in graph
    )
    return graph


def assign_ranks(graph: nx.DiGraph) -> dict[str, int]:
    """Rank every node by its topological generation (depth, for a tree)."""
    ranks: dict[str, int] = {}
    for rank, generation in enumerate(nx.topological_generations(graph)):
        for node_id in generation:
            ranks[node_id] = rank
    return ranks


def assign_slots(graph: nx.DiGraph) -> dict[str, float]:
    """Return horizontal slot numbers (possibly fractional) per node.

    Traverses from each source in insertion order. A node reachable from two
    parents is owned by whichever visits it first.
    """
    slots: dict[str, float] = {}
    owner: dict[str, str] = {}
    visited: set[str] = set()
    next_slot = 0

    sources = [node_id for node_id in graph.nodes if graph.in_degree(node_id) == 0]
    for source in sources:
        todo: list[tuple[str, bool]] = [(source, False)]
        while todo:
            node_id, children_done = todo.pop()
            kids = list(graph.successors(node_id))
            if children_done:
                owned = [kid for kid in kids if owner.get(kid) == node_id]
                if owned:
                    slots[node_id] = (slots[owned[0]] + slots[owned[-1]]) / 2
                else:
                    slots[node_id] = next_slot
                    next_slot += 1
                continue

            if node_id in visited:
                continue
            visited.add(node_id)
            todo.append((node_id, True))
            for kid in reversed(kids):
                if kid not in visited:
                    owner.setdefault(kid, node_id)
                    todo.append((kid, False))

    return slots


def calculate_tree_layout(
    nodes: list[FlatNode],
    edges: list[FlatEdge],
    *,
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> list[FlatNode]:
    """Position nodes in ranks from top to bottom.

    Output depends only on the order of ``nodes`` and ``edges``, so the same
    flattened input always yields the same positions.
    """
    trivial = trivial_layout(nodes, Position(0.0, 0.0))
    if trivial is not None:
        return trivial

    graph = build_graph(nodes, edges)
    ranks = assign_ranks(graph)
    slots = assign_slots(graph)

    x_step = config.node_width + config.node_sep
    y_step = config.node_height + config.rank_sep
    min_slot = min(slots.values())

    laid_out = []
    for node in nodes:
        center_x = (slots[node.id] - min_slot) * x_step + config.node_width / 2
        center_y = ranks[node.id] * y_step + config.node_height / 2
        laid_out.append(replace(node, position=top_left(center_x, center_y, config)))
    return laid_out
