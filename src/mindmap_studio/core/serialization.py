"""Convert trees and map records to and from JSON-compatible dicts.

Trees use the interchange shape ``{id, label, type, summary, details,
children?}``. Map records store ``collapsedNodeIds`` as a sorted list since the
workspace is persisted as JSON.
"""

import json
from datetime import datetime
from typing import Any, cast

from mindmap_studio.config import MAX_TREE_DEPTH
from mindmap_studio.core.tree.hierarchy import fold_tree
from mindmap_studio.models.node import (
    NODE_KINDS,
    FlatEdge,
    FlatNode,
    HierarchicalNode,
    MapRecord,
    NodeKind,
    validate_layout_mode,
)


def _node_fields(node: HierarchicalNode, children: list[dict[str, Any]]) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": node.id,
        "label": node.label,
        "type": node.kind,
        "summary": node.summary,
        "details": node.details,
    }
    if children:
        data["children"] = children
    return data


def node_to_dict(node: HierarchicalNode) -> dict[str, Any]:
    """Serialize a tree; leaves carry no ``children`` key."""
    return fold_tree(node, _node_fields)


def _default_kind(depth: int) -> NodeKind:
    if depth == 0:
        return "root"
    return "child" if depth == 1 else "grandchild"


def _check_node(raw: Any, *, depth: int, where: str) -> list[Any]:
    """Validate one raw node and return its raw children."""
    if not isinstance(raw, dict):
        msg = f"Node at {where} must be an object, got {type(raw).__name__}"
        raise ValueError(msg)
    if not raw.get("id"):
        msg = f"Node at {where} is missing an \"id\" field"
        raise ValueError(msg)
    if depth > MAX_TREE_DEPTH:
        msg = f"Node {raw['id']!r} is nested deeper than {MAX_TREE_DEPTH} levels"
        raise ValueError(msg)

    kind = raw.get("type") or _default_kind(depth)
    if kind not in NODE_KINDS:
        msg = f"Node {raw['id']!r} has invalid type {kind!r}, expected one of {NODE_KINDS!r}"
        raise ValueError(msg)

    raw_children = raw.get("children") or []
    if not isinstance(raw_children, list):
        msg = f"Node {raw['id']!r} has non-list children"
        raise ValueError(msg)
    return raw_children


def _build_node(
    raw: dict[str, Any], depth: int, children: list[HierarchicalNode]
) -> HierarchicalNode:
    return HierarchicalNode(
        id=str(raw["id"]),
        label=str(raw.get("label", "")),
        kind=cast(NodeKind, raw.get("type") or _default_kind(depth)),
        summary=str(raw.get("summary", "")),
        details=str(raw.get("details", "")),
        children=tuple(children),
    )


# Raw node, depth, location, raw children, children built so far.
_Frame = tuple[dict[str, Any], int, str, list[Any], list[HierarchicalNode]]


def _read_tree(data: Any) -> HierarchicalNode:
    """Validate and build nodes in pre-order, so the first bad node is reported."""
    stack: list[_Frame] = [(data, 0, "root", _check_node(data, depth=0, where="root"), [])]
    while True:
        raw, depth, where, raw_children, built = stack[-1]
        if len(built) < len(raw_children):
            index = len(built)
            child = raw_children[index]
            child_where = f"{where}.children[{index}]"
            grandchildren = _check_node(child, depth=depth + 1, where=child_where)
            stack.append((child, depth + 1, child_where, grandchildren, []))
            continue
        stack.pop()
        node = _build_node(raw, depth, built)
        if not stack:
            return node
        stack[-1][4].append(node)


def node_from_dict(data: dict[str, Any]) -> HierarchicalNode:
    """Build a tree from its dict form.

    The root must carry ``id`` and ``label``; other nodes need an ``id``.
    Missing ``type`` defaults by depth (root, child, then grandchild). Trees
    nested deeper than ``MAX_TREE_DEPTH`` are rejected.

    Raises:
        ValueError: With a description of the first problem found.
    """
    if not isinstance(data, dict) or not data.get("id") or not data.get("label"):
        msg = 'Invalid JSON structure. Root node must have "id" and "label" fields.'
        raise ValueError(msg)
    return _read_tree(data)


def export_json(tree: HierarchicalNode) -> str:
    """Serialize a tree as indented JSON for download."""
    return json.dumps(node_to_dict(tree), indent=2, ensure_ascii=False) + "\n"


def flat_node_to_dict(node: FlatNode) -> dict[str, Any]:
    return {
        "id": node.id,
        "label": node.label,
        "type": node.kind,
        "depth": node.depth,
        "hasChildren": node.has_children,
        "childCount": node.child_count,
        "isExpanded": node.is_expanded,
        "position": {"x": node.position.x, "y": node.position.y},
    }


def view_to_dict(nodes: list[FlatNode], edges: list[FlatEdge]) -> dict[str, Any]:
    """Serialize a rendered view for renderers outside the process."""
    return {
        "nodes": [flat_node_to_dict(node) for node in nodes],
        "edges": [{"id": e.id, "source": e.source, "target": e.target} for e in edges],
    }


def map_to_dict(record: MapRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "name": record.name,
        "createdAt": record.created_at.isoformat(),
        "hierarchicalData": node_to_dict(record.hierarchy),
        "collapsedNodeIds": sorted(record.collapsed_node_ids),
        "layoutMode": record.layout_mode,
    }


def map_from_dict(data: dict[str, Any]) -> MapRecord:
    """Rebuild a map record, re-hydrating the collapse list into a set."""
    return MapRecord(
        id=data["id"],
        name=data["name"],
        created_at=datetime.fromisoformat(data["createdAt"]),
        hierarchy=node_from_dict(data["hierarchicalData"]),
        collapsed_node_ids=frozenset(data.get("collapsedNodeIds") or ()),
        layout_mode=validate_layout_mode(data.get("layoutMode") or "tree"),
    )


def workspace_to_dict(maps: list[MapRecord], active_map_id: str) -> dict[str, Any]:
    return {"maps": [map_to_dict(m) for m in maps], "activeMapId": active_map_id}


def workspace_from_dict(data: dict[str, Any]) -> tuple[list[MapRecord], str]:
    """Return (maps, active map id) from a stored workspace document."""
    maps = [map_from_dict(m) for m in data.get("maps", [])]
    return maps, data.get("activeMapId", "")
