"""
Module definitions - the authored content of one learning module.

A module has a manifest, optional unlock requirement and worldmap
placement, a list of tasks, and interactables (NPCs and objects) placed
in its scene. NPCs may own tasks; those count as declared by the module.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field, model_validator

from progression.core.errors import InvalidStructureError
from progression.core.model import ContentModel
from curriculum.dialogue.tree import DialogueTree, Greeting
from curriculum.tasks.task import Task
from curriculum.unlock.requirements import UnlockRequirement


class Position(ContentModel):
    """Percentage coordinates (0-100)."""
    x: float = Field(ge=0, le=100)
    y: float = Field(ge=0, le=100)


class WorldmapIcon(ContentModel):
    shape: Literal["circle", "square", "diamond"] = "circle"
    size: int = 48


class WorldmapPlacement(ContentModel):
    position: Position
    icon: Optional[WorldmapIcon] = None


class Manifest(ContentModel):
    id: str
    name: str
    version: str = "1.0.0"
    summary: str = ""
    meta: dict[str, Any] = Field(default_factory=dict)


class ModuleConfig(ContentModel):
    """
    Module configuration.

    Attributes:
        manifest: Identity and display data
        welcome: Greeting shown before the first dialogue in the module
        unlock_requirement: Gate on the module (None = always unlockable)
        worldmap: Optional fixed placement on the worldmap
    """
    manifest: Manifest
    welcome: Optional[Greeting] = None
    unlock_requirement: Optional[UnlockRequirement] = None
    worldmap: Optional[WorldmapPlacement] = None


class ObjectInteraction(ContentModel):
    """What opens when an object is used (a named UI component and its props)."""
    component: str
    props: dict[str, Any] = Field(default_factory=dict)


class NPC(ContentModel):
    type: Literal["npc"] = "npc"
    id: str
    name: str
    position: Optional[Position] = None
    avatar: Optional[str] = None
    unlock_requirement: Optional[UnlockRequirement] = None
    tasks: tuple[Task, ...] = ()
    dialogue: Optional[DialogueTree] = None
    greeting: Optional[Greeting] = None


class WorldObject(ContentModel):
    type: Literal["object"] = "object"
    id: str
    name: str
    position: Optional[Position] = None
    avatar: Optional[str] = None
    unlock_requirement: Optional[UnlockRequirement] = None
    interaction: Optional[ObjectInteraction] = None


Interactable = Annotated[Union[NPC, WorldObject], Field(discriminator="type")]


class ModuleDefinition(ContentModel):
    """
    A complete module.

    ``declared_tasks`` is the module's task list followed by NPC-owned tasks
    not already listed, in declaration order. It is what completion counts.
    """
    id: str
    config: ModuleConfig
    tasks: tuple[Task, ...] = ()
    interactables: tuple[Interactable, ...] = ()

    @model_validator(mode="after")
    def _check_structure(self) -> ModuleDefinition:
        if self.config.manifest.id != self.id:
            raise InvalidStructureError(
                f"Module '{self.id}' has manifest id '{self.config.manifest.id}'",
                context={"module_id": self.id},
            )
        seen: set[str] = set()
        for interactable in self.interactables:
            if interactable.id in seen:
                raise InvalidStructureError(
                    f"Module '{self.id}' declares interactable '{interactable.id}' twice",
                    context={"module_id": self.id},
                )
            seen.add(interactable.id)
        return self

    @property
    def name(self) -> str:
        return self.config.manifest.name

    @property
    def unlock_requirement(self) -> Optional[UnlockRequirement]:
        return self.config.unlock_requirement

    @property
    def npcs(self) -> list[NPC]:
        return [i for i in self.interactables if isinstance(i, NPC)]

    @property
    def objects(self) -> list[WorldObject]:
        return [i for i in self.interactables if isinstance(i, WorldObject)]

    @property
    def declared_tasks(self) -> list[Task]:
        tasks = list(self.tasks)
        ids = {t.id for t in tasks}
        for npc in self.npcs:
            for task in npc.tasks:
                if task.id not in ids:
                    tasks.append(task)
                    ids.add(task.id)
        return tasks

    def get_task(self, task_id: str) -> Optional[Task]:
        for task in self.declared_tasks:
            if task.id == task_id:
                return task
        return None

    def get_npc(self, npc_id: str) -> Optional[NPC]:
        for npc in self.npcs:
            if npc.id == npc_id:
                return npc
        return None

    def get_interactable(self, interactable_id: str) -> Optional[Union[NPC, WorldObject]]:
        for interactable in self.interactables:
            if interactable.id == interactable_id:
                return interactable
        return None


def define_module(
    module_id: str,
    name: str,
    tasks: tuple[Task, ...] = (),
    interactables: tuple[Union[NPC, WorldObject], ...] = (),
    unlock_requirement: Optional[UnlockRequirement] = None,
    worldmap: Optional[WorldmapPlacement] = None,
    summary: str = "",
    welcome: Optional[Greeting] = None,
) -> ModuleDefinition:
    """Shorthand for building a module in code."""
    return ModuleDefinition(
        id=module_id,
        config=ModuleConfig(
            manifest=Manifest(id=module_id, name=name, summary=summary),
            welcome=welcome,
            unlock_requirement=unlock_requirement,
            worldmap=worldmap,
        ),
        tasks=tuple(tasks),
        interactables=tuple(interactables),
    )
