"""Parse JSON mindmap files into trees."""

import json

from mindmap_studio.core.serialization import node_from_dict
from mindmap_studio.models.node import HierarchicalNode


def parse_json(content: str) -> HierarchicalNode:
    """Validate and parse a JSON document into a tree.

    Raises:
        ValueError: If the text is not JSON, the root lacks ``id``/``label``,
            or the tree nests too deeply.
    """
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, RecursionError) as e:
        msg = f"Failed to parse JSON: {e}"
        raise ValueError(msg) from e
    try:
        return node_from_dict(data)
    except ValueError as e:
        msg = f"Failed to parse JSON: {e}"
        raise ValueError(msg) from e
