"""
Worldmap view records.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import ConfigDict, Field

from progression.core.model import ContentModel
from progression.state.progression import ModuleProgressionState
from curriculum.modules.definition import Position
from curriculum.unlock.evaluator import RequirementDetail

WorldmapLayout = Literal["linear", "branching"]


class WorldmapIcon(ContentModel):
    shape: Literal["circle", "square", "diamond"] = "circle"
    size: int = 48
    icon_type: Literal["pin", "lock"] = "pin"


class WorldmapNode(ContentModel):
    module_id: str
    position: Position
    icon: WorldmapIcon
    summary: str = ""
    state: ModuleProgressionState = ModuleProgressionState.LOCKED
    requirement_types: tuple[str, ...] = ()
    requirement_details: tuple[RequirementDetail, ...] = ()


class WorldmapConnection(ContentModel):
    """A dependency edge: ``from_module`` must be done before ``to``."""
    model_config = ConfigDict(populate_by_name=True)

    from_module: str = Field(alias="from")
    to: str
    locked: bool = True
    style: Literal["solid", "dashed"] = "solid"
    from_state: ModuleProgressionState = ModuleProgressionState.LOCKED
    to_state: ModuleProgressionState = ModuleProgressionState.LOCKED
    requirement_details: tuple[RequirementDetail, ...] = ()


class Worldmap(ContentModel):
    layout: WorldmapLayout = "linear"
    nodes: tuple[WorldmapNode, ...] = ()
    connections: tuple[WorldmapConnection, ...] = ()

    def get_node(self, module_id: str) -> Optional[WorldmapNode]:
        for node in self.nodes:
            if node.module_id == module_id:
                return node
        return None
