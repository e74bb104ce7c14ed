"""Tests for pure tree edit operations."""

import pytest

from mindmap_studio.core.tree.hierarchy import (
    count_nodes,
    find_by_id,
    find_depth,
    fold_tree,
    insert_child,
    iter_nodes,
    remove_by_id,
    update_by_id,
)
from mindmap_studio.models.node import HierarchicalNode
from tests.unit.conftest import make_chain

CHAIN_LENGTH = 2001


def _nested_duplicate() -> HierarchicalNode:
    """R -> X(outer) -> X(inner): the same id at two levels."""
    inner = HierarchicalNode(id="X", label="inner")
    outer = HierarchicalNode(id="X", label="outer", children=(inner,))
    return HierarchicalNode(id="R", label="R", kind="root", children=(outer,))


def test_iter_nodes_is_pre_order(deep_tree: HierarchicalNode) -> None:
    assert [n.id for n in iter_nodes(deep_tree)] == ["R", "A", "C", "E", "D", "B"]


def test_count_nodes(deep_tree: HierarchicalNode) -> None:
    assert count_nodes(deep_tree) == 6


def test_find_by_id_finds_nested_node(tree: HierarchicalNode) -> None:
    found = find_by_id(tree, "C")
    assert found is not None
    assert found.label == "Gamma"


def test_find_by_id_returns_none_when_absent(tree: HierarchicalNode) -> None:
    assert find_by_id(tree, "missing") is None


def test_update_by_id_patches_only_matching_node(tree: HierarchicalNode) -> None:
    updated = update_by_id(tree, "C", {"label": "X", "summary": "new"})

    node = find_by_id(updated, "C")
    assert node is not None
    assert node.label == "X"
    assert node.summary == "new"
    # Argument is untouched
    assert find_by_id(tree, "C").label == "Gamma"  # type: ignore[union-attr]


def test_update_by_id_shares_untouched_subtrees(tree: HierarchicalNode) -> None:
    updated = update_by_id(tree, "C", {"label": "X"})
    assert updated.children[1] is tree.children[1]


def test_update_by_id_unknown_id_returns_equal_tree(tree: HierarchicalNode) -> None:
    assert update_by_id(tree, "missing", {"label": "X"}) == tree


def test_update_by_id_can_patch_root(tree: HierarchicalNode) -> None:
    assert update_by_id(tree, "R", {"label": "New root"}).label == "New root"


def test_update_by_id_rejects_unknown_field(tree: HierarchicalNode) -> None:
    with pytest.raises(TypeError):
        update_by_id(tree, "A", {"colour": "red"})


def test_insert_child_appends_to_parent(tree: HierarchicalNode) -> None:
    new = HierarchicalNode(id="N", label="New")
    updated = insert_child(tree, "A", new)

    parent = find_by_id(updated, "A")
    assert parent is not None
    assert [c.id for c in parent.children] == ["C", "N"]
    assert len(find_by_id(tree, "A").children) == 1  # type: ignore[union-attr]


def test_insert_child_creates_children_for_leaf(tree: HierarchicalNode) -> None:
    updated = insert_child(tree, "B", HierarchicalNode(id="N", label="New"))
    assert [c.id for c in find_by_id(updated, "B").children] == ["N"]  # type: ignore[union-attr]


def test_insert_child_unknown_parent_is_noop(tree: HierarchicalNode) -> None:
    assert insert_child(tree, "missing", HierarchicalNode(id="N", label="New")) == tree


def test_remove_by_id_drops_whole_subtree(tree: HierarchicalNode) -> None:
    updated = remove_by_id(tree, "A")

    assert find_by_id(updated, "A") is None
    assert find_by_id(updated, "C") is None
    assert [c.id for c in updated.children] == ["B"]
    # Pure: the input still has A
    assert find_by_id(tree, "A") is not None


def test_remove_by_id_root_id_leaves_tree_unchanged(tree: HierarchicalNode) -> None:
    assert remove_by_id(tree, "R") is tree


def test_remove_by_id_unknown_id_returns_same_tree(tree: HierarchicalNode) -> None:
    assert remove_by_id(tree, "missing") is tree


def test_update_by_id_patches_every_node_with_the_id() -> None:
    updated = update_by_id(_nested_duplicate(), "X", {"label": "patched"})

    outer = updated.children[0]
    assert outer.label == "patched"
    assert outer.children[0].label == "patched"


def test_insert_child_uses_first_match_only() -> None:
    updated = insert_child(_nested_duplicate(), "X", HierarchicalNode(id="N", label="New"))

    outer = updated.children[0]
    assert [c.id for c in outer.children] == ["X", "N"]
    assert outer.children[0].children == ()


def test_remove_by_id_drops_the_id_at_every_level() -> None:
    tree = HierarchicalNode(
        id="R",
        label="R",
        kind="root",
        children=(
            HierarchicalNode(id="X", label="top"),
            HierarchicalNode(id="A", label="A", children=(HierarchicalNode(id="X", label="low"),)),
        ),
    )
    updated = remove_by_id(tree, "X")
    assert [n.id for n in iter_nodes(updated)] == ["R", "A"]


def test_find_depth(deep_tree: HierarchicalNode) -> None:
    assert find_depth(deep_tree, "R") == 0
    assert find_depth(deep_tree, "B") == 1
    assert find_depth(deep_tree, "E") == 3
    assert find_depth(deep_tree, "missing") is None


def test_fold_tree_sees_children_before_parent(deep_tree: HierarchicalNode) -> None:
    order: list[str] = []

    def visit(node: HierarchicalNode, child_sizes: list[int]) -> int:
        order.append(node.id)
        return 1 + sum(child_sizes)

    assert fold_tree(deep_tree, visit) == 6
    assert order == ["E", "C", "D", "A", "B", "R"]


# --- Trees deeper than the interpreter's recursion limit ---


def test_walks_handle_very_deep_tree() -> None:
    chain = make_chain(CHAIN_LENGTH)
    last = f"n{CHAIN_LENGTH - 1}"

    assert count_nodes(chain) == CHAIN_LENGTH
    assert find_depth(chain, last) == CHAIN_LENGTH - 1
    found = find_by_id(chain, last)
    assert found is not None
    assert found.children == ()


def test_edits_handle_very_deep_tree() -> None:
    chain = make_chain(CHAIN_LENGTH)
    last = f"n{CHAIN_LENGTH - 1}"

    updated = update_by_id(chain, last, {"label": "bottom"})
    assert find_by_id(updated, last).label == "bottom"  # type: ignore[union-attr]

    grown = insert_child(chain, last, HierarchicalNode(id="leaf", label="Leaf"))
    assert count_nodes(grown) == CHAIN_LENGTH + 1
    assert find_depth(grown, "leaf") == CHAIN_LENGTH

    pruned = remove_by_id(chain, "n1000")
    assert count_nodes(pruned) == 1000
    # Input is untouched
    assert count_nodes(chain) == CHAIN_LENGTH
