"""Mindmap editing core: hierarchy, flattening, layout and view control."""

from mindmap_studio.config import LayoutConfig
from mindmap_studio.controller import MindMapController
from mindmap_studio.models.node import FlatEdge, FlatNode, HierarchicalNode, MapRecord, Position
from mindmap_studio.protocols import StorageProtocol
from mindmap_studio.storage import JsonFileStorage

__all__ = [
    "FlatEdge",
    "FlatNode",
    "HierarchicalNode",
    "JsonFileStorage",
    "LayoutConfig",
    "MapRecord",
    "MindMapController",
    "Position",
    "StorageProtocol",
]
