"""Force-directed layout for the graph view.

A velocity-Verlet particle simulation with three forces applied every tick, in
this order: pairwise charge (repulsion), centering on the origin, and springs
along edges. The simulation runs for a fixed number of ticks while ``alpha``
cools from 1 towards ``ALPHA_MIN``; there is no convergence check.

Initial positions follow a phyllotaxis spiral and coincident particles are
separated with a seeded jiggle, so identical input yields identical output.
"""

import math
from dataclasses import replace

import numpy as np
from loguru import logger

from mindmap_studio.config import DEFAULT_LAYOUT, LayoutConfig
from mindmap_studio.core.layout.common import top_left, trivial_layout
from mindmap_studio.models.node import FlatEdge, FlatNode

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))
ALPHA_MIN = 0.001
VELOCITY_DECAY = 0.4
# Squared distance below which charge stops growing.
DISTANCE_MIN2 = 1.0


def initial_positions(count: int) -> np.ndarray:
    """Place ``count`` particles on a phyllotaxis spiral around the origin."""
    index = np.arange(count, dtype=float)
    radius = INITIAL_RADIUS * np.sqrt(0.5 + index)
    angle = index * INITIAL_ANGLE
    return np.column_stack((radius * np.cos(angle), radius * np.sin(angle)))


def _jiggle(rng: np.random.Generator, shape: tuple[int, ...]) -> np.ndarray:
    return (rng.random(shape) - 0.5) * 1e-6


def apply_charge(
    pos: np.ndarray, vel: np.ndarray, *, alpha: float, strength: float, rng: np.random.Generator
) -> None:
    """Add pairwise inverse-distance charge to ``vel`` (negative strength repels)."""
    # delta[i, j] points from particle i to particle j.
    delta = pos[np.newaxis, :, :] - pos[:, np.newaxis, :]
    dist2 = (delta**2).sum(axis=2)

    coincident = dist2 == 0
    np.fill_diagonal(coincident, False)
    if coincident.any():
        delta[coincident] = _jiggle(rng, (int(coincident.sum()), 2))
        dist2 = (delta**2).sum(axis=2)

    dist2 = np.where(dist2 < DISTANCE_MIN2, np.sqrt(DISTANCE_MIN2 * dist2), dist2)
    np.fill_diagonal(dist2, np.inf)
    vel += (delta * (strength * alpha / dist2)[:, :, np.newaxis]).sum(axis=1)


def apply_center(pos: np.ndarray) -> None:
    """Translate all particles so their mean sits on the origin."""
    pos -= pos.mean(axis=0)


def link_parameters(links: list[tuple[int, int]], count: int) -> tuple[np.ndarray, np.ndarray]:
    """Return per-link (strength, bias) derived from endpoint degrees.

    Strength is ``1 / min(degree)``; bias moves the lighter endpoint more.
    """
    degree = np.zeros(count)
    for source, target in links:
        degree[source] += 1
        degree[target] += 1
    strength = np.array([1 / min(degree[s], degree[t]) for s, t in links])
    bias = np.array([degree[s] / (degree[s] + degree[t]) for s, t in links])
    return strength, bias


def apply_links(
    pos: np.ndarray,
    vel: np.ndarray,
    links: list[tuple[int, int]],
    *,
    strength: np.ndarray,
    bias: np.ndarray,
    alpha: float,
    distance: float,
    rng: np.random.Generator,
) -> None:
    """Pull or push each linked pair towards ``distance`` apart."""
    for k, (source, target) in enumerate(links):
        delta = pos[target] + vel[target] - pos[source] - vel[source]
        if not delta.any():
            delta = _jiggle(rng, (2,))
        length = math.hypot(delta[0], delta[1])
        delta = delta * ((length - distance) / length * alpha * strength[k])
        vel[target] -= delta * bias[k]
        vel[source] += delta * (1 - bias[k])


def calculate_graph_layout(
    nodes: list[FlatNode],
    edges: list[FlatEdge],
    *,
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> list[FlatNode]:
    """Run the force simulation and return nodes with top-left positions."""
    trivial = trivial_layout(nodes, top_left(0.0, 0.0, config))
    if trivial is not None:
        return trivial

    index = {node.id: i for i, node in enumerate(nodes)}
    links = [
        (index[edge.source], index[edge.target])
        for edge in edges
        if edge.source in index and edge.target in index and edge.source != edge.target
    ]

    rng = np.random.default_rng(config.seed)
    pos = initial_positions(len(nodes))
    vel = np.zeros_like(pos)
    strength, bias = link_parameters(links, len(nodes))

    alpha = 1.0
    alpha_decay = 1 - ALPHA_MIN ** (1 / config.iterations)
    for _ in range(config.iterations):
        alpha -= alpha * alpha_decay
        apply_charge(pos, vel, alpha=alpha, strength=config.charge_strength, rng=rng)
        apply_center(pos)
        apply_links(
            pos,
            vel,
            links,
            strength=strength,
            bias=bias,
            alpha=alpha,
            distance=config.link_distance,
            rng=rng,
        )
        vel *= 1 - VELOCITY_DECAY
        pos += vel

    logger.debug(
        "Graph layout: {} nodes, {} links, {} ticks, final alpha {:.4f}",
        len(nodes), len(links), config.iterations, alpha,
    )

    return [
        replace(node, position=top_left(float(pos[i, 0]), float(pos[i, 1]), config))
        for i, node in enumerate(nodes)
    ]
