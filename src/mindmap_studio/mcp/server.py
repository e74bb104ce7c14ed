"""MCP server exposing mindmap editing, navigation and layout tools."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from mindmap_studio.config import WORKSPACE_FILENAME, resolve_data_directory
from mindmap_studio.controller import MindMapController
from mindmap_studio.core.importer.json_reader import parse_json
from mindmap_studio.core.importer.text_reader import parse_indented_text
from mindmap_studio.core.serialization import export_json, view_to_dict
from mindmap_studio.core.tree.hierarchy import count_nodes
from mindmap_studio.core.tree.markdown import render_tree_as_markdown
from mindmap_studio.storage import JsonFileStorage


def _failure(controller: MindMapController, fallback: str = "Operation failed.") -> dict[str, Any]:
    error = controller.notices[-1] if controller.notices else fallback
    return {"success": False, "error": error}


def _view(controller: MindMapController) -> dict[str, Any]:
    return {
        "map_id": controller.active_map_id,
        "layout_mode": controller.layout_mode,
        "selected_node_id": controller.selected_node_id,
        "drill_target": controller.drill_target,
        "can_drill_up": controller.can_drill_up,
        "collapsed_node_ids": sorted(controller.collapsed_node_ids),
        **view_to_dict(controller.nodes, controller.edges),
    }


# --- Core functions (testable without MCP context) ---


def mindmap_list_maps(controller: MindMapController) -> dict[str, Any]:
    """List all maps in the workspace."""
    return {
        "maps": [
            {
                "id": m.id,
                "name": m.name,
                "created_at": m.created_at.isoformat(),
                "node_count": count_nodes(m.hierarchy),
                "layout_mode": m.layout_mode,
                "active": m.id == controller.active_map_id,
            }
            for m in controller.maps
        ],
        "count": len(controller.maps),
        "active_map_id": controller.active_map_id,
    }


def mindmap_switch_map(controller: MindMapController, *, map_id: str) -> dict[str, Any]:
    if not controller.switch_map(map_id):
        return _failure(controller)
    return {"success": True, **_view(controller)}


def mindmap_create_map(
    controller: MindMapController,
    *,
    name: str | None = None,
    content: str | None = None,
    content_format: str = "json",
) -> dict[str, Any]:
    """Create a map, either empty or from JSON / indented text content.

    Args:
        name: Map name (defaults to the root label, or "Map N").
        content: Optional tree as JSON or indented text.
        content_format: "json" or "text".
    """
    template = None
    if content is not None:
        if content_format not in ("json", "text"):
            return {"success": False, "error": f"Unknown content format '{content_format}'."}
        reader = parse_json if content_format == "json" else parse_indented_text
        try:
            template = reader(content)
        except ValueError as e:
            return {"success": False, "error": str(e)}

    record = controller.create_map(name or (template.label if template else None), template)
    return {"success": True, "map_id": record.id, "name": record.name}


def mindmap_get_view(controller: MindMapController) -> dict[str, Any]:
    """Return the laid-out nodes and edges of the active map."""
    return _view(controller)


def mindmap_add_node(
    controller: MindMapController,
    *,
    parent_id: str,
    label: str,
    summary: str | None = None,
    details: str | None = None,
) -> dict[str, Any]:
    new_id = controller.add_node(parent_id, label=label, summary=summary, details=details)
    if new_id is None:
        return _failure(controller)
    return {"success": True, "node_id": new_id, "node_count": len(controller.nodes)}


def mindmap_delete_node(controller: MindMapController, *, node_id: str) -> dict[str, Any]:
    if not controller.delete_node(node_id):
        return _failure(controller)
    return {"success": True, "node_id": node_id, "node_count": len(controller.nodes)}


def mindmap_update_node(
    controller: MindMapController,
    *,
    node_id: str,
    label: str | None = None,
    summary: str | None = None,
    details: str | None = None,
) -> dict[str, Any]:
    """Edit a node's label, summary or details."""
    updates = [
        (controller.update_label, label),
        (controller.update_summary, summary),
        (controller.update_details, details),
    ]
    if all(value is None for _, value in updates):
        return {"success": False, "error": "No fields to update."}

    for update, value in updates:
        if value is not None and not update(node_id, value):
            return _failure(controller)
    return {"success": True, "node_id": node_id}


def mindmap_toggle_node(controller: MindMapController, *, node_id: str) -> dict[str, Any]:
    controller.toggle_expansion(node_id)
    return {
        "success": True,
        "node_id": node_id,
        "collapsed": node_id in controller.collapsed_node_ids,
        "visible_nodes": len(controller.nodes),
    }


def mindmap_set_expansion(controller: MindMapController, *, expanded: bool) -> dict[str, Any]:
    """Expand or collapse every branch."""
    if expanded:
        controller.expand_all()
    else:
        controller.collapse_all()
    return {
        "success": True,
        "collapsed_node_ids": sorted(controller.collapsed_node_ids),
        "visible_nodes": len(controller.nodes),
    }


def mindmap_drill(
    controller: MindMapController,
    *,
    node_id: str | None = None,
    up: bool = False,
) -> dict[str, Any]:
    """Drill into a node's subtree, or back up one level when ``up`` is set."""
    ok = controller.drill_up() if up else controller.drill_down(node_id)
    if not ok:
        return _failure(controller)
    return {"success": True, **_view(controller)}


def mindmap_set_layout(controller: MindMapController, *, mode: str) -> dict[str, Any]:
    try:
        controller.set_layout_mode(mode)
    except ValueError as e:
        return {"success": False, "error": str(e)}
    return {"success": True, **_view(controller)}


def mindmap_export(
    controller: MindMapController,
    *,
    output_format: str = "json",
    max_depth: int | None = None,
) -> dict[str, Any]:
    """Export the active map's tree as JSON or markdown."""
    if controller.hierarchy is None:
        return {"error": "No active map."}
    if output_format == "json":
        content = export_json(controller.hierarchy)
    elif output_format == "markdown":
        content = render_tree_as_markdown(controller.hierarchy, max_depth=max_depth)
    else:
        return {"error": f"Unknown format '{output_format}', expected json or markdown."}
    return {"map_id": controller.active_map_id, "format": output_format, "content": content}


# --- Server lifecycle ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    controller: MindMapController
    data_dir: Path
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Load the workspace on startup."""
    data_dir = resolve_data_directory()
    controller = MindMapController(JsonFileStorage(data_dir / WORKSPACE_FILENAME))
    controller.load()
    logger.info("Loaded {} maps from {}", len(controller.maps), data_dir)
    try:
        yield ServerContext(controller=controller, data_dir=data_dir)
    finally:
        controller.save()


mcp_server = FastMCP(
    "mindmap-studio",
    instructions="""\
Mindmaps are trees of nodes (label, summary, details). Every edit re-lays out
the visible nodes and returns positions for a renderer.

## Typical flow

1. mindmap_list_maps_tool to find maps, mindmap_switch_map_tool to pick one.
2. mindmap_get_view_tool to see visible nodes with depth and positions.
3. Edit with mindmap_add_node_tool / mindmap_update_node_tool / mindmap_delete_node_tool.
4. Collapse branches with mindmap_toggle_node_tool, or focus on a subtree with
   mindmap_drill_tool (up=true to go back).

The root node cannot be deleted. Layout modes: tree, graph, radial.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def mindmap_list_maps_tool(ctx: Context) -> dict[str, Any]:
    """List all maps in the workspace with node counts and layout modes."""
    async with _ctx(ctx).lock:
        return mindmap_list_maps(_ctx(ctx).controller)


@mcp_server.tool()
async def mindmap_switch_map_tool(ctx: Context, map_id: str) -> dict[str, Any]:
    """Make a map active and return its view.

    Args:
        map_id: Map id from mindmap_list_maps_tool.
    """
    async with _ctx(ctx).lock:
        return mindmap_switch_map(_ctx(ctx).controller, map_id=map_id)


@mcp_server.tool()
async def mindmap_create_map_tool(
    ctx: Context,
    name: str | None = None,
    content: str | None = None,
    content_format: str = "json",
) -> dict[str, Any]:
    """Create a new map and make it active.

    Args:
        name: Map name.
        content: Optional tree, as JSON ({id, label, type, summary, details,
            children}) or as indented text (one node per line).
        content_format: "json" or "text".
    """
    async with _ctx(ctx).lock:
        return mindmap_create_map(
            _ctx(ctx).controller, name=name, content=content, content_format=content_format
        )


@mcp_server.tool()
async def mindmap_get_view_tool(ctx: Context) -> dict[str, Any]:
    """Return visible nodes (with depth and positions) and edges of the active map."""
    async with _ctx(ctx).lock:
        return mindmap_get_view(_ctx(ctx).controller)


@mcp_server.tool()
async def mindmap_add_node_tool(
    ctx: Context,
    parent_id: str,
    label: str,
    summary: str | None = None,
    details: str | None = None,
) -> dict[str, Any]:
    """Add a child node under a parent.

    Args:
        parent_id: Parent node id.
        label: Label of the new node.
        summary: Optional one-line summary.
        details: Optional longer details.
    """
    async with _ctx(ctx).lock:
        return mindmap_add_node(
            _ctx(ctx).controller,
            parent_id=parent_id,
            label=label,
            summary=summary,
            details=details,
        )


@mcp_server.tool()
async def mindmap_update_node_tool(
    ctx: Context,
    node_id: str,
    label: str | None = None,
    summary: str | None = None,
    details: str | None = None,
) -> dict[str, Any]:
    """Edit a node's label, summary or details.

    Args:
        node_id: Node id to edit.
        label: New label.
        summary: New summary.
        details: New details.
    """
    async with _ctx(ctx).lock:
        return mindmap_update_node(
            _ctx(ctx).controller, node_id=node_id, label=label, summary=summary, details=details
        )


@mcp_server.tool()
async def mindmap_delete_node_tool(ctx: Context, node_id: str) -> dict[str, Any]:
    """Delete a node and its whole subtree. The root cannot be deleted.

    Args:
        node_id: Node id to delete.
    """
    async with _ctx(ctx).lock:
        return mindmap_delete_node(_ctx(ctx).controller, node_id=node_id)


@mcp_server.tool()
async def mindmap_toggle_node_tool(ctx: Context, node_id: str) -> dict[str, Any]:
    """Collapse or expand a node. Collapsed nodes stay visible, their descendants do not.

    Args:
        node_id: Node id to toggle.
    """
    async with _ctx(ctx).lock:
        return mindmap_toggle_node(_ctx(ctx).controller, node_id=node_id)


@mcp_server.tool()
async def mindmap_set_expansion_tool(ctx: Context, expanded: bool) -> dict[str, Any]:
    """Expand all branches (expanded=true) or collapse all visible branches.

    Args:
        expanded: True to expand everything, False to collapse.
    """
    async with _ctx(ctx).lock:
        return mindmap_set_expansion(_ctx(ctx).controller, expanded=expanded)


@mcp_server.tool()
async def mindmap_drill_tool(
    ctx: Context,
    node_id: str | None = None,
    up: bool = False,
) -> dict[str, Any]:
    """Focus the view on a node's subtree, or go back up one level.

    Args:
        node_id: Node to drill into (must have children).
        up: Go back to the previous level instead.
    """
    async with _ctx(ctx).lock:
        return mindmap_drill(_ctx(ctx).controller, node_id=node_id, up=up)


@mcp_server.tool()
async def mindmap_set_layout_tool(ctx: Context, mode: str) -> dict[str, Any]:
    """Switch the layout: "tree" (layered), "graph" (force-directed) or "radial".

    Args:
        mode: Layout mode.
    """
    async with _ctx(ctx).lock:
        return mindmap_set_layout(_ctx(ctx).controller, mode=mode)


@mcp_server.tool()
async def mindmap_export_tool(
    ctx: Context,
    output_format: str = "json",
    max_depth: int | None = None,
) -> dict[str, Any]:
    """Export the active map as JSON or a markdown outline.

    Args:
        output_format: "json" or "markdown".
        max_depth: Max depth levels for markdown (None = unlimited).
    """
    async with _ctx(ctx).lock:
        return mindmap_export(
            _ctx(ctx).controller, output_format=output_format, max_depth=max_depth
        )


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from mindmap_studio.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
