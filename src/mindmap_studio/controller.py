"""View controller: the single owner of mindmap state.

Every mutating operation runs the same pipeline: mutate the hierarchy (or
navigate), flatten the whole tree or the drilled subtree, hide collapsed
branches (whole-tree view only), lay out with the current mode, commit the
rendered ``nodes``/``edges``, then write the hierarchy back into the active map
record and persist the collection.

Operations never raise for bad targets. They log a warning, append a message to
``notices``, leave state untouched and return a falsy value.
"""

import uuid
from dataclasses import replace
from datetime import UTC, datetime

from loguru import logger

from mindmap_studio.config import (
    DEFAULT_LAYOUT,
    DEFAULT_MAP_DETAILS,
    DEFAULT_MAP_SUMMARY,
    MAX_TREE_DEPTH,
    LayoutConfig,
)
from mindmap_studio.core.layout.engine import calculate_layout
from mindmap_studio.core.serialization import workspace_from_dict, workspace_to_dict
from mindmap_studio.core.tree.flatten import flatten_hierarchy
from mindmap_studio.core.tree.hierarchy import (
    find_by_id,
    find_depth,
    insert_child,
    remove_by_id,
    update_by_id,
)
from mindmap_studio.core.tree.visibility import filter_collapsed
from mindmap_studio.models.node import (
    FlatEdge,
    FlatNode,
    HierarchicalNode,
    LayoutMode,
    MapRecord,
    NodeKind,
    Position,
    validate_layout_mode,
)
from mindmap_studio.protocols import StorageProtocol


def default_template(name: str) -> HierarchicalNode:
    """Return the single-root tree a new map starts with."""
    return HierarchicalNode(
        id="root",
        label=name,
        kind="root",
        summary=DEFAULT_MAP_SUMMARY,
        details=DEFAULT_MAP_DETAILS,
    )


class MindMapController:
    """Owns the map collection and the rendered view of the active map."""

    def __init__(
        self,
        storage: StorageProtocol | None = None,
        *,
        config: LayoutConfig = DEFAULT_LAYOUT,
    ) -> None:
        self.storage = storage
        self.config = config

        self.maps: list[MapRecord] = []
        self.active_map_id = ""

        self.hierarchy: HierarchicalNode | None = None
        self.nodes: list[FlatNode] = []
        self.edges: list[FlatEdge] = []
        self.selected_node_id: str | None = None
        self.collapsed_node_ids: set[str] = set()
        self.layout_mode: LayoutMode = "tree"

        # Ancestors to return to on drill_up; top of stack is the last entry.
        self.drill_stack: list[str] = []
        self.drill_target: str | None = None

        self.notices: list[str] = []

    # --- Lifecycle ---

    def load(self) -> None:
        """Load the collection from storage, creating a first map if there is none."""
        data = self.storage.load() if self.storage is not None else None
        maps, active_map_id = workspace_from_dict(data) if data else ([], "")
        self.maps = maps
        if not self.maps:
            logger.info("No stored maps, creating a default map")
            self.create_map()
            return
        if not any(m.id == active_map_id for m in self.maps):
            active_map_id = self.maps[0].id
        self.switch_map(active_map_id)
        logger.debug("Loaded {} maps, active {!r}", len(self.maps), active_map_id)

    def save(self) -> None:
        """Persist the map collection; failures are logged, never raised."""
        if self.storage is None:
            return
        try:
            self.storage.save(workspace_to_dict(self.maps, self.active_map_id))
        except Exception:
            logger.exception("Failed to persist {} maps", len(self.maps))

    # --- Map collection ---

    @property
    def active_map(self) -> MapRecord | None:
        return next((m for m in self.maps if m.id == self.active_map_id), None)

    def create_map(
        self, name: str | None = None, template: HierarchicalNode | None = None
    ) -> MapRecord:
        """Add a map, make it active and render it."""
        map_name = name or f"Map {len(self.maps) + 1}"
        record = MapRecord(
            id=f"map-{uuid.uuid4().hex[:12]}",
            name=map_name,
            created_at=datetime.now(UTC),
            hierarchy=template or default_template(map_name),
        )
        self.maps.append(record)
        logger.info("Created map {!r} ({})", record.name, record.id)
        self.switch_map(record.id)
        return record

    def switch_map(self, map_id: str) -> bool:
        """Make ``map_id`` active, restoring its tree, collapse set and layout mode."""
        record = next((m for m in self.maps if m.id == map_id), None)
        if record is None:
            self._notify(f"Map {map_id!r} not found")
            return False

        self.active_map_id = record.id
        self.hierarchy = record.hierarchy
        self.collapsed_node_ids = set(record.collapsed_node_ids)
        self.layout_mode = record.layout_mode
        self.selected_node_id = None
        self._reset_drill()
        self._refresh()
        self.save()
        logger.debug("Switched to map {!r}", record.name)
        return True

    def delete_map(self, map_id: str) -> bool:
        """Remove a map; the last remaining map cannot be deleted."""
        if len(self.maps) <= 1:
            self._notify("Cannot delete the last map")
            return False
        if not any(m.id == map_id for m in self.maps):
            self._notify(f"Map {map_id!r} not found")
            return False

        self.maps = [m for m in self.maps if m.id != map_id]
        logger.info("Deleted map {}", map_id)
        if self.active_map_id == map_id:
            self.switch_map(self.maps[0].id)
        else:
            self.save()
        return True

    # --- View operations ---

    def initialize(self, tree: HierarchicalNode) -> None:
        """Replace the active hierarchy and render it from scratch."""
        self.hierarchy = tree
        self.selected_node_id = None
        self._reset_drill()
        self._refresh()
        self._commit()

    def select_node(self, node_id: str | None) -> None:
        self.selected_node_id = node_id

    def toggle_expansion(self, node_id: str) -> None:
        """Flip ``node_id`` in the collapse set and re-render the whole tree."""
        if self.hierarchy is None:
            return
        if node_id in self.collapsed_node_ids:
            self.collapsed_node_ids.discard(node_id)
        else:
            self.collapsed_node_ids.add(node_id)
        self._reset_drill()
        self._refresh()
        self._commit()

    def expand_all(self) -> None:
        if self.hierarchy is None:
            return
        self.collapsed_node_ids = set()
        self._reset_drill()
        self._refresh()
        self._commit()

    def collapse_all(self) -> None:
        """Collapse every currently rendered node with children except the tree root.

        While drilled, this includes the drill target.

        Nodes already hidden by an earlier collapse are not considered, so
        they drop out of the collapse set.
        """
        if self.hierarchy is None:
            return
        self.collapsed_node_ids = {
            node.id for node in self.nodes if node.id != self.hierarchy.id and node.has_children
        }
        self._reset_drill()
        self._refresh()
        self._commit()

    def add_node(
        self,
        parent_id: str,
        *,
        label: str | None = None,
        summary: str | None = None,
        details: str | None = None,
        kind: NodeKind | None = None,
        node_id: str | None = None,
        parent_depth: int | None = None,
    ) -> str | None:
        """Append a new child under ``parent_id`` and return its id.

        Without an explicit ``kind``, the node is a ``child`` when the parent's
        depth is 0 and a ``grandchild`` otherwise. The depth comes from
        ``parent_depth`` or, failing that, from the rendered node.
        """
        if self.hierarchy is None:
            return None
        tree_depth = find_depth(self.hierarchy, parent_id)
        if tree_depth is None:
            self._notify(f"Parent node {parent_id!r} not found")
            return None
        if tree_depth >= MAX_TREE_DEPTH:
            self._notify(f"Cannot nest deeper than {MAX_TREE_DEPTH} levels")
            return None

        # Rendered depth is relative to the drill target while drilled.
        if parent_depth is None:
            parent_depth = next((n.depth for n in self.nodes if n.id == parent_id), None)

        new_node = HierarchicalNode(
            id=node_id or f"node-{uuid.uuid4().hex[:12]}",
            label=label or "New Node",
            kind=kind or ("child" if parent_depth == 0 else "grandchild"),
            summary=summary or "New node summary",
            details=details or "New node details",
        )
        self.hierarchy = insert_child(self.hierarchy, parent_id, new_node)
        self._refresh()
        self._commit()
        return new_node.id

    def delete_node(self, node_id: str) -> bool:
        """Remove a node and its subtree. The root is never removed."""
        if self.hierarchy is None:
            return False
        if node_id == self.hierarchy.id:
            self._notify("The root node cannot be deleted")
            return False
        if find_by_id(self.hierarchy, node_id) is None:
            self._notify(f"Node {node_id!r} not found")
            return False

        self.hierarchy = remove_by_id(self.hierarchy, node_id)
        if self.selected_node_id == node_id:
            self.selected_node_id = None
        self._refresh()
        self._commit()
        return True

    def update_label(self, node_id: str, value: str) -> bool:
        return self._update_text(node_id, "label", value)

    def update_summary(self, node_id: str, value: str) -> bool:
        return self._update_text(node_id, "summary", value)

    def update_details(self, node_id: str, value: str) -> bool:
        return self._update_text(node_id, "details", value)

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        """Overwrite a rendered node's position, as after a drag. No re-layout."""
        if not any(node.id == node_id for node in self.nodes):
            return False
        self.nodes = [
            replace(node, position=Position(x=x, y=y)) if node.id == node_id else node
            for node in self.nodes
        ]
        return True

    def reset_layout(self) -> None:
        """Recompute positions for the rendered nodes, discarding manual moves."""
        self.nodes = calculate_layout(self.layout_mode, self.nodes, self.edges, config=self.config)

    def set_layout_mode(self, mode: str) -> None:
        """Switch layout engine and re-lay out the rendered nodes.

        Raises:
            ValueError: If ``mode`` is not a known layout.
        """
        self.layout_mode = validate_layout_mode(mode)
        self.reset_layout()
        self._commit()

    # --- Drill navigation ---

    @property
    def can_drill_up(self) -> bool:
        return self.drill_target is not None

    def drill_down(self, node_id: str | None = None) -> bool:
        """Show only the subtree below ``node_id`` (default: the selection)."""
        target_id = node_id or self.selected_node_id
        if target_id is None:
            self._notify("Select a node to drill down into")
            return False
        if self.hierarchy is None:
            return False

        target = find_by_id(self.hierarchy, target_id)
        if target is None:
            self._notify(f"Node {target_id!r} not found")
            return False
        if not target.children:
            self._notify(f"Node {target.label!r} has no children to drill into")
            return False

        if self.drill_target is not None:
            self.drill_stack.append(self.drill_target)
        self.drill_target = target_id
        self.selected_node_id = None
        self._refresh()
        logger.debug("Drilled into {!r}, stack depth {}", target_id, len(self.drill_stack))
        return True

    def drill_up(self) -> bool:
        """Return to the previous drill level, or to the whole tree."""
        if self.drill_target is None:
            self._notify("Already at the top level")
            return False
        self.drill_target = self.drill_stack.pop() if self.drill_stack else None
        self.selected_node_id = None
        self._refresh()
        return True

    # --- Internals ---

    def _notify(self, message: str) -> None:
        logger.warning(message)
        self.notices.append(message)

    def _reset_drill(self) -> None:
        self.drill_stack = []
        self.drill_target = None

    def _update_text(self, node_id: str, field_name: str, value: str) -> bool:
        if self.hierarchy is None:
            return False
        if find_by_id(self.hierarchy, node_id) is None:
            self._notify(f"Node {node_id!r} not found")
            return False

        self.hierarchy = update_by_id(self.hierarchy, node_id, {field_name: value})
        # Text edits cannot change structure, so patch the rendered node in place.
        self.nodes = [
            replace(node, **{field_name: value}) if node.id == node_id else node
            for node in self.nodes
        ]
        self._commit()
        return True

    def _refresh(self) -> None:
        """Flatten, filter and lay out the current context into ``nodes``/``edges``."""
        if self.hierarchy is None:
            self.nodes, self.edges = [], []
            return

        target = None
        if self.drill_target is not None:
            target = find_by_id(self.hierarchy, self.drill_target)
            if target is None:
                logger.info("Drill target {!r} is gone, back to full view", self.drill_target)
                self._reset_drill()

        if target is not None:
            nodes, edges = flatten_hierarchy(target)
        else:
            nodes, edges = flatten_hierarchy(self.hierarchy)
            nodes, edges = filter_collapsed(nodes, edges, self.collapsed_node_ids)

        self.nodes = calculate_layout(self.layout_mode, nodes, edges, config=self.config)
        self.edges = edges
        logger.debug(
            "Rendered {} nodes, {} edges ({} layout, drill {!r})",
            len(self.nodes), len(self.edges), self.layout_mode, self.drill_target,
        )

    def _commit(self) -> None:
        """Write the working state into the active map record and persist."""
        if self.hierarchy is None:
            return
        self.maps = [
            replace(
                m,
                hierarchy=self.hierarchy,
                collapsed_node_ids=frozenset(self.collapsed_node_ids),
                layout_mode=self.layout_mode,
            )
            if m.id == self.active_map_id
            else m
            for m in self.maps
        ]
        self.save()
