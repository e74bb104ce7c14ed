"""CLI for mindmap-studio (import, edit, lay out, export, MCP server)."""

import json
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from loguru import logger

from mindmap_studio.config import WORKSPACE_FILENAME, resolve_data_directory
from mindmap_studio.controller import MindMapController
from mindmap_studio.core.importer.json_reader import parse_json
from mindmap_studio.core.importer.text_reader import parse_indented_text
from mindmap_studio.core.serialization import export_json, view_to_dict
from mindmap_studio.core.tree.hierarchy import count_nodes
from mindmap_studio.core.tree.markdown import render_tree_as_markdown
from mindmap_studio.logging_config import configure_logging
from mindmap_studio.storage import JsonFileStorage

app = typer.Typer(help="Mindmap studio: build, lay out and export mindmaps.")

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Workspace directory"),
]
MapOption = Annotated[
    str | None,
    typer.Option("--map", "-M", help="Map id to operate on (default: active map)"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _open_controller(data_dir: Path | None, map_id: str | None = None) -> MindMapController:
    """Load the workspace and optionally activate ``map_id``."""
    dst = data_dir or resolve_data_directory()
    controller = MindMapController(JsonFileStorage(dst / WORKSPACE_FILENAME))
    controller.load()
    if map_id and not controller.switch_map(map_id):
        typer.echo(f"Map '{map_id}' not found.")
        raise typer.Exit(1)
    return controller


def _fail_with_notice(controller: MindMapController) -> NoReturn:
    message = controller.notices[-1] if controller.notices else "Operation failed."
    typer.echo(message)
    raise typer.Exit(1)


def _echo_view(controller: MindMapController, *, output_json: bool) -> None:
    if output_json:
        typer.echo(json.dumps(view_to_dict(controller.nodes, controller.edges), indent=2))
        return
    typer.echo(
        f"{len(controller.nodes)} nodes, {len(controller.edges)} edges "
        f"({controller.layout_mode} layout)\n"
    )
    for node in controller.nodes:
        badge = f"  [{node.child_count} hidden]" if not node.is_expanded else ""
        typer.echo(
            f"{'  ' * node.depth}{node.label}  "
            f"({node.position.x:.0f}, {node.position.y:.0f})  id={node.id}{badge}"
        )


@app.command(name="import")
def import_cmd(
    path: Path = typer.Argument(..., help="JSON or indented text file"),
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="Map name (default: root label)"),
    ] = None,
    fmt: str = typer.Option("auto", "--format", "-f", help="auto, json or text"),
    data_dir: DataDirOption = None,
) -> None:
    """Import a file as a new map and make it active."""
    if not path.exists():
        logger.error("File not found: {}", path)
        raise typer.Exit(1)

    if fmt == "auto":
        fmt = "json" if path.suffix.lower() == ".json" else "text"
    content = path.read_text(encoding="utf-8")
    try:
        if fmt == "json":
            tree = parse_json(content)
        elif fmt == "text":
            tree = parse_indented_text(content)
        else:
            typer.echo(f"Unknown format '{fmt}', expected auto, json or text.")
            raise typer.Exit(1)
    except ValueError as e:
        typer.echo(str(e))
        raise typer.Exit(1) from e

    controller = _open_controller(data_dir)
    record = controller.create_map(name or tree.label, tree)
    typer.echo(f"Imported {count_nodes(tree)} nodes into map '{record.name}' [id={record.id}]")


@app.command()
def maps(data_dir: DataDirOption = None) -> None:
    """List all maps in the workspace."""
    controller = _open_controller(data_dir)
    typer.echo(f"{len(controller.maps)} maps:\n")
    for record in controller.maps:
        marker = "*" if record.id == controller.active_map_id else " "
        typer.echo(
            f" {marker} {record.name} - {count_nodes(record.hierarchy)} nodes, "
            f"{record.layout_mode} layout  [id={record.id}]"
        )


@app.command()
def show(
    map_id: MapOption = None,
    drill: Annotated[
        str | None,
        typer.Option("--drill", help="Show only the subtree below this node"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    data_dir: DataDirOption = None,
) -> None:
    """Show the laid-out view of a map."""
    controller = _open_controller(data_dir, map_id)
    if drill and not controller.drill_down(drill):
        _fail_with_notice(controller)
    _echo_view(controller, output_json=output_json)


@app.command()
def add(
    parent_id: str = typer.Argument(..., help="Parent node id"),
    label: str = typer.Argument(..., help="Label of the new node"),
    summary: Annotated[str | None, typer.Option("--summary", "-s")] = None,
    details: Annotated[str | None, typer.Option("--details")] = None,
    map_id: MapOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Add a child node."""
    controller = _open_controller(data_dir, map_id)
    new_id = controller.add_node(parent_id, label=label, summary=summary, details=details)
    if new_id is None:
        _fail_with_notice(controller)
    typer.echo(f"Added node {new_id}")


@app.command()
def delete(
    node_id: str = typer.Argument(..., help="Node id to delete (with its subtree)"),
    map_id: MapOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Delete a node and everything below it."""
    controller = _open_controller(data_dir, map_id)
    if not controller.delete_node(node_id):
        _fail_with_notice(controller)
    typer.echo(f"Deleted node {node_id}")


@app.command()
def rename(
    node_id: str = typer.Argument(..., help="Node id"),
    label: str = typer.Argument(..., help="New label"),
    map_id: MapOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Change a node's label."""
    controller = _open_controller(data_dir, map_id)
    if not controller.update_label(node_id, label):
        _fail_with_notice(controller)
    typer.echo(f"Renamed node {node_id}")


@app.command()
def toggle(
    node_id: str = typer.Argument(..., help="Node id to collapse or expand"),
    map_id: MapOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Collapse or expand a node."""
    controller = _open_controller(data_dir, map_id)
    controller.toggle_expansion(node_id)
    state = "collapsed" if node_id in controller.collapsed_node_ids else "expanded"
    typer.echo(f"Node {node_id} {state}")


@app.command(name="expand-all")
def expand_all(map_id: MapOption = None, data_dir: DataDirOption = None) -> None:
    """Expand every node."""
    controller = _open_controller(data_dir, map_id)
    controller.expand_all()
    typer.echo(f"{len(controller.nodes)} nodes visible")


@app.command(name="collapse-all")
def collapse_all(map_id: MapOption = None, data_dir: DataDirOption = None) -> None:
    """Collapse every visible branch below the root."""
    controller = _open_controller(data_dir, map_id)
    controller.collapse_all()
    typer.echo(f"{len(controller.nodes)} nodes visible")


@app.command()
def layout(
    mode: str = typer.Argument(..., help="tree, graph or radial"),
    map_id: MapOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Set a map's layout mode."""
    controller = _open_controller(data_dir, map_id)
    try:
        controller.set_layout_mode(mode)
    except ValueError as e:
        typer.echo(str(e))
        raise typer.Exit(1) from e
    typer.echo(f"Layout set to {mode}")


@app.command()
def export(
    map_id: MapOption = None,
    fmt: str = typer.Option("json", "--format", "-f", help="json or markdown"),
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels (markdown only)"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write to this file instead of stdout"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Export a map's tree as JSON or markdown."""
    controller = _open_controller(data_dir, map_id)
    if controller.hierarchy is None:
        typer.echo("No map to export.")
        raise typer.Exit(1)
    if fmt == "json":
        text = export_json(controller.hierarchy)
    elif fmt == "markdown":
        text = render_tree_as_markdown(controller.hierarchy, max_depth=max_depth)
    else:
        typer.echo(f"Unknown format '{fmt}', expected json or markdown.")
        raise typer.Exit(1)

    if output is None:
        typer.echo(text, nl=False)
    else:
        output.write_text(text, encoding="utf-8")
        typer.echo(f"Wrote {output}")


@app.command(name="delete-map")
def delete_map(
    map_id: str = typer.Argument(..., help="Map id to delete"),
    data_dir: DataDirOption = None,
) -> None:
    """Delete a map (the last map cannot be deleted)."""
    controller = _open_controller(data_dir)
    if not controller.delete_map(map_id):
        _fail_with_notice(controller)
    typer.echo(f"Deleted map {map_id}")


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from mindmap_studio.mcp.server import run_mcp_server

    run_mcp_server()
