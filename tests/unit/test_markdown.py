"""Tests for markdown rendering of mindmap trees."""

from mindmap_studio.core.tree.markdown import render_tree_as_markdown
from mindmap_studio.models.node import HierarchicalNode


def test_render_full_tree(tree: HierarchicalNode) -> None:
    md = render_tree_as_markdown(tree)
    assert md == (
        "- Root\n"
        "  > root summary\n"
        "    - Alpha\n"
        "      > alpha summary\n"
        "        - Gamma\n"
        "    - Beta\n"
    )


def test_render_with_depth_limit_shows_truncation(tree: HierarchicalNode) -> None:
    md = render_tree_as_markdown(tree, max_depth=1)
    assert "Gamma" not in md
    assert "... (1 more child, id=A)" in md


def test_render_no_truncation_for_childless_nodes(tree: HierarchicalNode) -> None:
    md = render_tree_as_markdown(tree, max_depth=1)
    beta_idx = md.index("- Beta")
    assert "..." not in md[beta_idx:]


def test_render_plural_truncation(deep_tree: HierarchicalNode) -> None:
    md = render_tree_as_markdown(deep_tree, max_depth=0)
    assert md == "- Root\n    - ... (2 more children, id=R)\n"


def test_render_without_notes(tree: HierarchicalNode) -> None:
    md = render_tree_as_markdown(tree, include_notes=False)
    assert ">" not in md


def test_render_multiline_label() -> None:
    node = HierarchicalNode(id="x", label="First\nSecond", kind="root")
    assert render_tree_as_markdown(node) == "- First\n  Second\n"
