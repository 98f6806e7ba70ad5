"""
Worldmap generator - the module dependency graph for level selection.

Dependencies come from each module's unlock requirement and are limited
to modules on the map being generated. Roots sit in the left column and
dependents move right with their depth. When every module declares a
worldmap placement those positions are used as they are.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from progression.state.progression import ModuleProgressionState, ProgressionStore
from curriculum.modules.definition import ModuleDefinition, Position
from curriculum.modules.registry import ModuleRegistry
from curriculum.unlock.evaluator import extract_module_dependencies, extract_requirement_details
from curriculum.worldmap.types import Worldmap, WorldmapConnection, WorldmapIcon, WorldmapNode

logger = logging.getLogger(__name__)

ROOT_X = 15.0
FIRST_DEPENDENT_X = 40.0
DEPTH_STEP_X = 25.0
MAX_X = 90.0
ORPHAN_POSITION = (50.0, 50.0)


@dataclass
class _Entry:
    module: ModuleDefinition
    dependencies: list[str]

    @property
    def module_id(self) -> str:
        return self.module.id


class WorldmapGenerator:
    """Builds Worldmap views from registered modules and their progression."""

    def __init__(self, registry: ModuleRegistry, progression: ProgressionStore):
        self.registry = registry
        self.progression = progression

    def generate(self, module_ids: Sequence[str]) -> Worldmap:
        if not module_ids:
            return Worldmap(layout="linear", nodes=(), connections=())

        entries = self._resolve(module_ids)
        layout = "branching" if any(e.dependencies for e in entries) else "linear"

        if entries and all(e.module.config.worldmap is not None for e in entries):
            nodes = [self._declared_node(e) for e in entries]
        else:
            nodes = self._auto_nodes(entries)

        return Worldmap(
            layout=layout,
            nodes=tuple(nodes),
            connections=tuple(self._connections(entries)),
        )

    def _resolve(self, module_ids: Sequence[str]) -> list[_Entry]:
        modules: list[ModuleDefinition] = []
        for module_id in dict.fromkeys(module_ids):
            module = self.registry.get_module(module_id)
            if module is None:
                logger.debug("Worldmap skips unknown module %s", module_id)
                continue
            modules.append(module)

        present = {m.id for m in modules}
        entries = []
        for module in modules:
            dependencies = [
                dep for dep in extract_module_dependencies(module.unlock_requirement, self.registry)
                if dep in present and dep != module.id
            ]
            entries.append(_Entry(module=module, dependencies=dependencies))
        return entries

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def _node(self, entry: _Entry, x: float, y: float, shape: str, size: int) -> WorldmapNode:
        requirement = entry.module.unlock_requirement
        return WorldmapNode(
            module_id=entry.module_id,
            position=Position(x=x, y=y),
            icon=WorldmapIcon(shape=shape, size=size, icon_type="pin" if requirement is None else "lock"),
            summary=entry.module.config.manifest.summary,
            state=self.progression.get_state(entry.module_id),
            requirement_types=tuple(d.type for d in extract_requirement_details(requirement)),
            requirement_details=tuple(extract_requirement_details(requirement)),
        )

    def _declared_node(self, entry: _Entry) -> WorldmapNode:
        placement = entry.module.config.worldmap
        icon = placement.icon
        return self._node(
            entry,
            placement.position.x,
            placement.position.y,
            icon.shape if icon else "circle",
            icon.size if icon else 48,
        )

    def _auto_nodes(self, entries: list[_Entry]) -> list[WorldmapNode]:
        depths = _dependency_depths(entries)
        max_depth = max(depths.values(), default=0)
        placed: dict[str, WorldmapNode] = {}

        roots = [e for e in entries if depths.get(e.module_id) == 0]
        for index, entry in enumerate(roots):
            if len(roots) == 1:
                placed[entry.module_id] = self._node(entry, ROOT_X, 50.0, "circle", 56)
            else:
                y = (index + 1) * 100.0 / (len(roots) + 1)
                placed[entry.module_id] = self._node(entry, ROOT_X, y, "circle", 48)

        for depth in range(1, max_depth + 1):
            level = [e for e in entries if depths.get(e.module_id) == depth]
            x = _column_x(depth, max_depth)
            by_count: dict[int, list[_Entry]] = {}
            for entry in level:
                by_count.setdefault(len(entry.dependencies), []).append(entry)

            for entry in level:
                count = len(entry.dependencies)
                siblings = by_count[count]
                offset = siblings.index(entry) - (len(siblings) - 1) / 2
                avg_y = sum(placed[d].position.y for d in entry.dependencies) / count
                y = max(15.0, min(85.0, avg_y + offset * 15))
                shape = "diamond" if count > 1 else "square"
                placed[entry.module_id] = self._node(entry, x, y, shape, 52 if count > 1 else 48)

        nodes = []
        for entry in entries:
            node = placed.get(entry.module_id)
            if node is None:
                # Part of a dependency cycle
                node = self._node(entry, *ORPHAN_POSITION, "circle", 44)
            nodes.append(node)
        return nodes

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def _connections(self, entries: list[_Entry]) -> list[WorldmapConnection]:
        connections = []
        for entry in entries:
            if not entry.dependencies:
                continue
            to_state = self.progression.get_state(entry.module_id)
            details = tuple(extract_requirement_details(entry.module.unlock_requirement))
            for dep in entry.dependencies:
                connections.append(WorldmapConnection(
                    from_module=dep,
                    to=entry.module_id,
                    locked=to_state is ModuleProgressionState.LOCKED,
                    style="solid" if len(entry.dependencies) == 1 else "dashed",
                    from_state=self.progression.get_state(dep),
                    to_state=to_state,
                    requirement_details=details,
                ))
        return connections


def _dependency_depths(entries: list[_Entry]) -> dict[str, int]:
    """
    Longest dependency chain below each module. Modules caught in a cycle
    get no depth.
    """
    depths: dict[str, int] = {}
    pending = list(entries)
    while pending:
        remaining = []
        for entry in pending:
            if all(dep in depths for dep in entry.dependencies):
                depths[entry.module_id] = 1 + max((depths[d] for d in entry.dependencies), default=-1)
            else:
                remaining.append(entry)
        if len(remaining) == len(pending):
            break
        pending = remaining
    return depths


def _column_x(depth: int, max_depth: int) -> float:
    """x for a dependent column; stays within the map for deep graphs."""
    if depth == 0:
        return ROOT_X
    step = DEPTH_STEP_X
    if max_depth > 1:
        step = min(DEPTH_STEP_X, (MAX_X - FIRST_DEPENDENT_X) / (max_depth - 1))
    return FIRST_DEPENDENT_X + (depth - 1) * step


def generate_worldmap(registry: ModuleRegistry, progression: ProgressionStore, module_ids: Optional[Sequence[str]] = None) -> Worldmap:
    """Generate a worldmap for the given modules, or every registered one."""
    ids = list(module_ids) if module_ids is not None else registry.get_registered_module_ids()
    return WorldmapGenerator(registry, progression).generate(ids)
