"""Parse indented text or markdown lists into a tree.

Example input::

    Root Node
      Child 1
        Grandchild A
      Child 2

A tab counts as one level, two spaces as one level. Leading ``-`` or ``*`` list
markers are ignored.
"""

import re
from dataclasses import dataclass, field

from mindmap_studio.config import MAX_TREE_DEPTH
from mindmap_studio.models.node import HierarchicalNode, NodeKind

_LIST_MARKER = re.compile(r"^[\t ]*[-*][\t ]+")
_LEADING_WS = re.compile(r"^[\t ]*")


def indent_level(line: str) -> int:
    """Return the nesting level of a line, treating list markers as whitespace."""
    clean = _LIST_MARKER.sub(lambda m: " " * len(m.group(0)), line)
    whitespace = _LEADING_WS.match(clean).group(0)  # type: ignore[union-attr]
    return whitespace.count("\t") + whitespace.count(" ") // 2


def line_label(line: str) -> str:
    return re.sub(r"^[-*]\s+", "", line.strip()).strip()


@dataclass
class _Draft:
    """Mutable node used while the tree is being assembled."""

    id: str
    label: str
    kind: NodeKind
    children: list["_Draft"] = field(default_factory=list)


def _freeze(drafts: list[_Draft]) -> HierarchicalNode:
    """Freeze drafts given in creation order; the first one is the root."""
    frozen: dict[str, HierarchicalNode] = {}
    # Children are always created after their parent.
    for draft in reversed(drafts):
        frozen[draft.id] = HierarchicalNode(
            id=draft.id,
            label=draft.label,
            kind=draft.kind,
            children=tuple(frozen[child.id] for child in draft.children),
        )
    return frozen[drafts[0].id]


def parse_indented_text(content: str) -> HierarchicalNode:
    """Build a tree from indented lines; the first non-blank line is the root.

    Node ids are ``root`` and ``node-<n>`` where ``n`` counts non-blank lines.
    A line dedented to or past the root's level becomes a child of the root.

    Raises:
        ValueError: If there are no non-blank lines, or the outline nests
            deeper than ``MAX_TREE_DEPTH``.
    """
    lines = [line for line in content.split("\n") if line.strip()]
    if not lines:
        msg = "Content is empty"
        raise ValueError(msg)

    root = _Draft(id="root", label=line_label(lines[0]), kind="root")
    drafts = [root]
    stack: list[tuple[_Draft, int]] = [(root, 0)]

    for i, line in enumerate(lines[1:], start=1):
        level = indent_level(line)
        draft = _Draft(
            id=f"node-{i}",
            label=line_label(line),
            kind="child" if level == 1 else "grandchild",
        )

        while stack and stack[-1][1] >= level:
            stack.pop()

        if len(stack) > MAX_TREE_DEPTH:
            msg = f"Line {i + 1} is nested deeper than {MAX_TREE_DEPTH} levels"
            raise ValueError(msg)

        parent = stack[-1][0] if stack else root
        parent.children.append(draft)
        drafts.append(draft)
        stack.append((draft, level))

    return _freeze(drafts)
