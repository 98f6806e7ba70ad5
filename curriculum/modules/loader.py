"""
Module loader - builds ModuleDefinitions from validated JSON documents.

Callables cannot live in JSON, so ``custom`` checks and ``call`` actions
name a handler id that must be registered in the HandlerRegistry.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from progression.core.errors import InvalidStructureError, ProgressionError, TaskNotFoundError
from progression.resources.database import ContentDatabase
from curriculum.dialogue.actions import (
    AcceptTask,
    CallHandler,
    CompleteTask,
    DialogueAction,
    OpenTaskSubmission,
    SetInteractableState,
    SetState,
)
from curriculum.dialogue.conditions import DialogueCondition
from curriculum.dialogue.tree import DialogueChoice, DialogueNode, DialogueTree, EntryCondition, EntryResolver, Greeting
from curriculum.modules.definition import (
    NPC,
    Manifest,
    ModuleConfig,
    ModuleDefinition,
    ObjectInteraction,
    Position,
    WorldmapPlacement,
    WorldObject,
)
from curriculum.modules.handlers import HandlerRegistry
from curriculum.modules.registry import ModuleRegistry
from curriculum.tasks.task import (
    SubmissionSpec,
    Task,
    TaskDialogues,
    TaskOverview,
    TaskValidator,
    choice_validator,
    combine_validators,
    keywords_validator,
    text_length_validator,
    word_count_validator,
)
from curriculum.unlock.requirements import UnlockRequirement

logger = logging.getLogger(__name__)

_requirement_adapter = TypeAdapter(UnlockRequirement)
_condition_adapter = TypeAdapter(DialogueCondition)


class ModuleLoader:
    """
    Converts raw module documents into content models.

    Usage:
        loader = ModuleLoader(handlers)
        loaded = loader.load_database(database, registry)
    """

    def __init__(self, handlers: Optional[HandlerRegistry] = None):
        self.handlers = handlers or HandlerRegistry()

    def load_database(self, database: ContentDatabase, registry: ModuleRegistry) -> list[str]:
        """
        Build and register every module in the database, in file-name order.

        Modules that fail to build are logged and skipped.

        Returns:
            Ids of the registered modules
        """
        loaded = []
        for module_id, data in database.modules.items():
            try:
                module = self.build_module(data)
            except (ProgressionError, ValidationError) as e:
                logger.error("Skipping module %s: %s", module_id, e)
                continue
            registry.register(module)
            loaded.append(module.id)
        return loaded

    def build_module(self, data: dict[str, Any]) -> ModuleDefinition:
        module_id = data["id"]
        manifest = data["manifest"]
        tasks = [self.build_task(t) for t in data.get("tasks", [])]
        tasks_by_id = {task.id: task for task in tasks}

        interactables = [
            self.build_interactable(module_id, item, tasks_by_id)
            for item in data.get("interactables", [])
        ]

        worldmap = data.get("worldmap")
        config = ModuleConfig(
            manifest=Manifest(id=module_id, **manifest),
            welcome=Greeting(**data["welcome"]) if data.get("welcome") else None,
            unlock_requirement=self.build_requirement(data.get("unlock_requirement")),
            worldmap=WorldmapPlacement(**worldmap) if worldmap else None,
        )
        return ModuleDefinition(
            id=module_id,
            config=config,
            tasks=tuple(tasks),
            interactables=tuple(interactables),
        )

    # ------------------------------------------------------------------
    # Requirements and conditions
    # ------------------------------------------------------------------

    def _bind_checks(self, data: dict[str, Any], children: str) -> dict[str, Any]:
        """Replace ``custom`` check ids with registered CustomCheck objects."""
        data = dict(data)
        if data["type"] == "custom":
            data["check"] = self.handlers.get_check(data["check"])
        elif data["type"] in ("and", "or"):
            data[children] = [self._bind_checks(child, children) for child in data.get(children, [])]
        elif data["type"] == "requirement":
            data["requirement"] = self._bind_checks(data["requirement"], "requirements")
        return data

    def build_requirement(self, data: Optional[dict[str, Any]]) -> Optional[UnlockRequirement]:
        if data is None:
            return None
        return _requirement_adapter.validate_python(self._bind_checks(data, "requirements"))

    def build_condition(self, data: Optional[dict[str, Any]]) -> Optional[DialogueCondition]:
        if data is None:
            return None
        return _condition_adapter.validate_python(self._bind_checks(data, "conditions"))

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def build_task(self, data: dict[str, Any]) -> Task:
        return Task(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            submission=SubmissionSpec(**data.get("submission", {})),
            validator=build_validator(data.get("validation")),
            overview=TaskOverview(**data["overview"]) if data.get("overview") else None,
            unlock_requirement=self.build_requirement(data.get("unlock_requirement")),
            dialogues=TaskDialogues(**data.get("dialogues", {})),
            order=data.get("order"),
            meta=data.get("meta", {}),
        )

    # ------------------------------------------------------------------
    # Interactables and dialogue
    # ------------------------------------------------------------------

    def build_interactable(
        self,
        module_id: str,
        data: dict[str, Any],
        tasks_by_id: dict[str, Task],
    ) -> NPC | WorldObject:
        position = Position(**data["position"]) if data.get("position") else None
        requirement = self.build_requirement(data.get("unlock_requirement"))

        if data["type"] == "object":
            interaction = data.get("interaction")
            return WorldObject(
                id=data["id"],
                name=data["name"],
                position=position,
                avatar=data.get("avatar"),
                unlock_requirement=requirement,
                interaction=ObjectInteraction(**interaction) if interaction else None,
            )

        tasks = []
        for task_id in data.get("tasks", []):
            if task_id not in tasks_by_id:
                raise TaskNotFoundError(task_id, module_id)
            tasks.append(tasks_by_id[task_id])

        dialogue = data.get("dialogue")
        greeting = data.get("greeting")
        return NPC(
            id=data["id"],
            name=data["name"],
            position=position,
            avatar=data.get("avatar"),
            unlock_requirement=requirement,
            tasks=tuple(tasks),
            dialogue=self.build_dialogue(dialogue) if dialogue else None,
            greeting=Greeting(**greeting) if greeting else None,
        )

    def build_dialogue(self, data: dict[str, Any]) -> DialogueTree:
        nodes = tuple(self.build_node(n) for n in data.get("nodes", []))
        entry = data.get("entry")
        if isinstance(entry, dict):
            if "default" not in entry:
                raise InvalidStructureError("Dialogue entry resolver has no default node")
            entry = EntryResolver(
                conditions=tuple(
                    EntryCondition(condition=self.build_condition(c["condition"]), node=c["node"])
                    for c in entry.get("conditions", [])
                ),
                default=entry["default"],
            )
        return DialogueTree(nodes=nodes, entry=entry)

    def build_node(self, data: dict[str, Any]) -> DialogueNode:
        choices = {
            key: DialogueChoice(
                text=choice["text"],
                next=choice.get("next"),
                actions=tuple(self.build_action(a) for a in choice.get("actions", [])),
                condition=self.build_condition(choice.get("condition")),
            )
            for key, choice in data.get("choices", {}).items()
        }
        return DialogueNode(
            id=data["id"],
            lines=tuple(data.get("lines", [])),
            task_id=data.get("task_id"),
            choices=choices,
            next=data.get("next"),
        )

    def build_action(self, data: dict[str, Any]) -> DialogueAction:
        kind = data["type"]
        if kind == "accept-task":
            return AcceptTask(data["task_id"])
        if kind == "complete-task":
            return CompleteTask(data["task_id"])
        if kind == "set-state":
            return SetState(data["key"], data.get("value"))
        if kind == "set-interactable-state":
            return SetInteractableState(data["interactable_id"], data["key"], data.get("value"))
        if kind == "open-task-submission":
            return OpenTaskSubmission(data.get("task_id"))
        if kind == "call":
            # Fail at load time rather than mid-conversation
            self.handlers.get_action(data["handler"])
            return CallHandler(data["handler"])
        raise InvalidStructureError(f"Unknown action type '{kind}'")


def build_validator(data: Optional[dict[str, Any]]) -> Optional[TaskValidator]:
    """Validator from a declarative ``validation`` block."""
    if not data:
        return None

    validators: list[TaskValidator] = []
    if "answer" in data:
        validators.append(choice_validator(data["answer"]))
    if "min_length" in data:
        validators.append(text_length_validator(data["min_length"]))
    if "min_words" in data:
        validators.append(word_count_validator(data["min_words"]))
    if data.get("keywords"):
        validators.append(keywords_validator(data["keywords"]))

    if not validators:
        return None
    if len(validators) == 1:
        return validators[0]
    return combine_validators(validators)


def load_content(
    data_path: str,
    registry: ModuleRegistry,
    handlers: Optional[HandlerRegistry] = None,
) -> list[str]:
    """Load ``<data_path>/modules/*.json`` into a registry."""
    database = ContentDatabase(data_path)
    database.load_all()
    return ModuleLoader(handlers).load_database(database, registry)
