"""Domain models for mindmaps."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, cast, get_args

NodeKind = Literal["root", "child", "grandchild"]
LayoutMode = Literal["tree", "graph", "radial"]

NODE_KINDS: tuple[str, ...] = get_args(NodeKind)
LAYOUT_MODES: tuple[str, ...] = get_args(LayoutMode)


def validate_layout_mode(mode: str) -> LayoutMode:
    """Return ``mode`` if it names a layout, else raise ValueError."""
    if mode not in LAYOUT_MODES:
        msg = f"Unknown layout mode {mode!r}, expected one of {', '.join(LAYOUT_MODES)}"
        raise ValueError(msg)
    return cast(LayoutMode, mode)


@dataclass(frozen=True)
class HierarchicalNode:
    """A node of the source-of-truth mindmap tree.

    Children are owned by their parent; ``kind`` is advisory only.
    """

    id: str
    label: str
    kind: NodeKind = "child"
    summary: str = ""
    details: str = ""
    children: tuple["HierarchicalNode", ...] = ()


@dataclass(frozen=True)
class Position:
    """Top-left corner of a rendered node."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class FlatNode:
    """A node of the flattened graph handed to the renderer."""

    id: str
    depth: int
    label: str
    kind: NodeKind
    summary: str
    details: str
    has_children: bool
    child_count: int
    is_expanded: bool = True
    position: Position = field(default_factory=Position)


@dataclass(frozen=True)
class FlatEdge:
    """A directed parent -> child edge."""

    id: str
    source: str
    target: str


@dataclass(frozen=True)
class MapRecord:
    """A named mindmap in the workspace."""

    id: str
    name: str
    created_at: datetime
    hierarchy: HierarchicalNode
    collapsed_node_ids: frozenset[str] = frozenset()
    layout_mode: LayoutMode = "tree"
