"""Render mindmap subtrees as markdown."""

import io

from mindmap_studio.models.node import HierarchicalNode


def render_tree_as_markdown(
    tree: HierarchicalNode,
    *,
    max_depth: int | None = None,
    include_notes: bool = True,
) -> str:
    """Render a node and its descendants as indented markdown.

    Args:
        tree: The node to start rendering from.
        max_depth: Max levels below the start node to include (None = unlimited).
        include_notes: Whether to include node summaries.

    Returns:
        Markdown string with bullet-list hierarchy.
    """
    out = io.StringIO()
    todo: list[tuple[HierarchicalNode, int]] = [(tree, 0)]
    while todo:
        node, depth = todo.pop()
        indent = "    " * depth

        lines = node.label.split("\n")
        out.write(f"{indent}- {lines[0]}\n")
        for line in lines[1:]:
            out.write(f"{indent}  {line}\n")

        if include_notes and node.summary:
            for note_line in node.summary.split("\n"):
                out.write(f"{indent}  > {note_line}\n")

        if max_depth is not None and depth == max_depth:
            # Truncation indicator when children are cut off by max_depth
            if node.children:
                count = len(node.children)
                noun = "child" if count == 1 else "children"
                out.write(f"{indent}    - ... ({count} more {noun}, id={node.id})\n")
            continue

        todo.extend((child, depth + 1) for child in reversed(node.children))

    return out.getvalue()
