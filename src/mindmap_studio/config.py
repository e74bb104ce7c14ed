"""Configuration constants for mindmap-studio."""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class LayoutConfig:
    """Geometry and simulation constants shared by the layout engines."""

    node_width: float = 250.0
    node_height: float = 80.0
    # Tree layout: gap between boxes in the same rank, and between ranks.
    node_sep: float = 200.0
    rank_sep: float = 200.0
    # Radial layout: distance added per depth level.
    radial_step: float = 350.0
    # Graph layout.
    charge_strength: float = -2000.0
    link_distance: float = 250.0
    iterations: int = 300
    seed: int = 0


DEFAULT_LAYOUT = LayoutConfig()

# Deepest nesting accepted from imports and edits. Stored JSON nests two levels
# per tree level and the json module parses recursively.
MAX_TREE_DEPTH = 256

# Directory with workspace data. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/mindmap-studio").expanduser(),
    Path("~/.mindmap-studio").expanduser(),
    Path("~/.config/mindmap-studio").expanduser(),
]

DATA_DIR_ENV = "MINDMAP_DATA_DIR"

WORKSPACE_FILENAME = "maps.json"

DEFAULT_MAP_SUMMARY = "New mindmap"
DEFAULT_MAP_DETAILS = "Click nodes to expand and explore"


def resolve_data_directory() -> Path:
    """Return the data directory: env override, else first existing candidate."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]
