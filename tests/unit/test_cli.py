"""Tests for the mindmap CLI."""

import json
from pathlib import Path

from typer.testing import CliRunner

from mindmap_studio.cli import app

runner = CliRunner()

OUTLINE = """\
Launch plan
  Research
    Interviews
  Build
"""


def _import(tmp_path: Path, name: str = "plan.txt", content: str = OUTLINE) -> Path:
    """Helper: write an outline, import it, return the data dir."""
    data = tmp_path / "data"
    source = tmp_path / name
    source.write_text(content)
    result = runner.invoke(app, ["import", str(source), "--data-dir", str(data)])
    assert result.exit_code == 0, result.output
    return data


def _show_json(data: Path, *extra: str) -> dict:
    result = runner.invoke(app, ["show", "--json", "--data-dir", str(data), *extra])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def test_import_text_creates_map(tmp_path: Path) -> None:
    data = _import(tmp_path)
    assert (data / "maps.json").exists()

    result = runner.invoke(app, ["maps", "--data-dir", str(data)])
    assert result.exit_code == 0, result.output
    assert "Launch plan - 4 nodes" in result.output
    assert "Map 1" in result.output


def test_import_json_file(tmp_path: Path) -> None:
    tree = {"id": "r", "label": "From JSON", "children": [{"id": "a", "label": "A"}]}
    data = _import(tmp_path, "tree.json", json.dumps(tree))
    view = _show_json(data)
    assert [n["id"] for n in view["nodes"]] == ["r", "a"]


def test_import_invalid_json_fails(tmp_path: Path) -> None:
    source = tmp_path / "bad.json"
    source.write_text('{"label": "no id"}')
    result = runner.invoke(app, ["import", str(source), "--data-dir", str(tmp_path / "data")])
    assert result.exit_code == 1
    assert "Root node must have" in result.output


def test_import_missing_file_fails(tmp_path: Path) -> None:
    result = runner.invoke(app, ["import", str(tmp_path / "nope.txt")])
    assert result.exit_code == 1


def test_show_lists_laid_out_nodes(tmp_path: Path) -> None:
    data = _import(tmp_path)
    result = runner.invoke(app, ["show", "--data-dir", str(data)])
    assert result.exit_code == 0, result.output
    assert "4 nodes, 3 edges (tree layout)" in result.output
    assert "Interviews" in result.output


def test_show_json_has_positions(tmp_path: Path) -> None:
    view = _show_json(_import(tmp_path))
    root = view["nodes"][0]
    assert root["id"] == "root"
    assert root["depth"] == 0
    assert set(root["position"]) == {"x", "y"}
    assert {(e["source"], e["target"]) for e in view["edges"]} == {
        ("root", "node-1"),
        ("node-1", "node-2"),
        ("root", "node-3"),
    }


def test_show_drill(tmp_path: Path) -> None:
    view = _show_json(_import(tmp_path), "--drill", "node-1")
    assert [(n["id"], n["depth"]) for n in view["nodes"]] == [("node-1", 0), ("node-2", 1)]


def test_show_drill_into_leaf_fails(tmp_path: Path) -> None:
    data = _import(tmp_path)
    result = runner.invoke(app, ["show", "--drill", "node-3", "--data-dir", str(data)])
    assert result.exit_code == 1
    assert "no children" in result.output


def test_add_rename_delete(tmp_path: Path) -> None:
    data = _import(tmp_path)

    result = runner.invoke(app, ["add", "root", "Launch", "--data-dir", str(data)])
    assert result.exit_code == 0, result.output
    new_id = result.stdout.strip().removeprefix("Added node ")

    result = runner.invoke(app, ["rename", new_id, "Go live", "--data-dir", str(data)])
    assert result.exit_code == 0, result.output
    labels = {n["id"]: n["label"] for n in _show_json(data)["nodes"]}
    assert labels[new_id] == "Go live"

    result = runner.invoke(app, ["delete", "node-1", "--data-dir", str(data)])
    assert result.exit_code == 0, result.output
    ids = {n["id"] for n in _show_json(data)["nodes"]}
    assert ids == {"root", "node-3", new_id}


def test_delete_root_fails(tmp_path: Path) -> None:
    data = _import(tmp_path)
    result = runner.invoke(app, ["delete", "root", "--data-dir", str(data)])
    assert result.exit_code == 1
    assert "cannot be deleted" in result.output


def test_add_under_unknown_parent_fails(tmp_path: Path) -> None:
    data = _import(tmp_path)
    result = runner.invoke(app, ["add", "ghost", "Boo", "--data-dir", str(data)])
    assert result.exit_code == 1


def test_toggle_and_expand_collapse(tmp_path: Path) -> None:
    data = _import(tmp_path)

    result = runner.invoke(app, ["toggle", "node-1", "--data-dir", str(data)])
    assert result.exit_code == 0, result.output
    assert "collapsed" in result.output
    assert {n["id"] for n in _show_json(data)["nodes"]} == {"root", "node-1", "node-3"}

    result = runner.invoke(app, ["expand-all", "--data-dir", str(data)])
    assert "4 nodes visible" in result.output

    result = runner.invoke(app, ["collapse-all", "--data-dir", str(data)])
    assert "3 nodes visible" in result.output


def test_layout_command_persists_mode(tmp_path: Path) -> None:
    data = _import(tmp_path)
    result = runner.invoke(app, ["layout", "radial", "--data-dir", str(data)])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["show", "--data-dir", str(data)])
    assert "(radial layout)" in result.output


def test_layout_command_rejects_unknown_mode(tmp_path: Path) -> None:
    data = _import(tmp_path)
    result = runner.invoke(app, ["layout", "spiral", "--data-dir", str(data)])
    assert result.exit_code == 1
    assert "Unknown layout mode" in result.output


def test_export_json_and_markdown(tmp_path: Path) -> None:
    data = _import(tmp_path)

    result = runner.invoke(app, ["export", "--data-dir", str(data)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["label"] == "Launch plan"

    out = tmp_path / "plan.md"
    result = runner.invoke(
        app,
        ["export", "--format", "markdown", "--max-depth", "1", "-o", str(out),
         "--data-dir", str(data)],
    )
    assert result.exit_code == 0, result.output
    text = out.read_text()
    assert text.startswith("- Launch plan\n")
    assert "... (1 more child, id=node-1)" in text


def test_map_option_targets_other_map(tmp_path: Path) -> None:
    data = _import(tmp_path)
    second = tmp_path / "second.txt"
    second.write_text("Second\n  Only child\n")
    runner.invoke(app, ["import", str(second), "--data-dir", str(data)])

    stored = json.loads((data / "maps.json").read_text())
    plan_id = next(m["id"] for m in stored["maps"] if m["name"] == "Launch plan")

    view = _show_json(data, "--map", plan_id)
    assert len(view["nodes"]) == 4

    result = runner.invoke(app, ["show", "--map", "map-missing", "--data-dir", str(data)])
    assert result.exit_code == 1


def test_delete_map_command(tmp_path: Path) -> None:
    data = _import(tmp_path)
    stored = json.loads((data / "maps.json").read_text())
    default_id = next(m["id"] for m in stored["maps"] if m["name"] == "Map 1")

    result = runner.invoke(app, ["delete-map", default_id, "--data-dir", str(data)])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["maps", "--data-dir", str(data)])
    assert "1 maps" in result.output
    assert "Map 1" not in result.output


def test_delete_last_map_fails(tmp_path: Path) -> None:
    data = tmp_path / "data"
    runner.invoke(app, ["maps", "--data-dir", str(data)])
    stored = json.loads((data / "maps.json").read_text())

    result = runner.invoke(app, ["delete-map", stored["maps"][0]["id"], "--data-dir", str(data)])
    assert result.exit_code == 1
    assert "last map" in result.output


def test_serve_command_shows_help() -> None:
    result = runner.invoke(app, ["serve", "--help"])
    assert result.exit_code == 0, result.output
    assert "MCP" in result.output
