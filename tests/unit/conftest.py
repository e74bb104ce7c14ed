"""Shared test fixtures."""

import pytest

from mindmap_studio.controller import MindMapController
from mindmap_studio.models.node import HierarchicalNode
from tests.unit.fakes import FakeStorage


def make_tree() -> HierarchicalNode:
    """R -> [A, B], A -> [C]."""
    return HierarchicalNode(
        id="R",
        label="Root",
        kind="root",
        summary="root summary",
        children=(
            HierarchicalNode(
                id="A",
                label="Alpha",
                summary="alpha summary",
                details="alpha details",
                children=(HierarchicalNode(id="C", label="Gamma", kind="grandchild"),),
            ),
            HierarchicalNode(id="B", label="Beta"),
        ),
    )


def make_deep_tree() -> HierarchicalNode:
    """R -> [A, B], A -> [C, D], C -> [E]."""
    return HierarchicalNode(
        id="R",
        label="Root",
        kind="root",
        children=(
            HierarchicalNode(
                id="A",
                label="Alpha",
                children=(
                    HierarchicalNode(
                        id="C",
                        label="Gamma",
                        kind="grandchild",
                        children=(HierarchicalNode(id="E", label="Epsilon", kind="grandchild"),),
                    ),
                    HierarchicalNode(id="D", label="Delta", kind="grandchild"),
                ),
            ),
            HierarchicalNode(id="B", label="Beta"),
        ),
    )


def make_chain(length: int) -> HierarchicalNode:
    """n0 -> n1 -> ... -> n<length-1>, built bottom-up."""
    node = HierarchicalNode(id=f"n{length - 1}", label=f"Level {length - 1}", kind="grandchild")
    for i in range(length - 2, -1, -1):
        kind = "root" if i == 0 else "child" if i == 1 else "grandchild"
        node = HierarchicalNode(id=f"n{i}", label=f"Level {i}", kind=kind, children=(node,))
    return node


@pytest.fixture
def tree() -> HierarchicalNode:
    return make_tree()


@pytest.fixture
def deep_tree() -> HierarchicalNode:
    return make_deep_tree()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def controller(storage: FakeStorage, tree: HierarchicalNode) -> MindMapController:
    """Return a loaded controller whose active map holds the R/A/B/C tree."""
    ctrl = MindMapController(storage)
    ctrl.load()
    ctrl.initialize(tree)
    return ctrl
