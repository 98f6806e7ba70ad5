"""
Module context - what custom checks and dialogue actions see.

A context is bound to one module (and optionally to the interactable
being talked to). Its methods are synchronous reads and writes against
the progress store; lifecycle events are published when a bus is set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from progression.core.events import DialogueEvent, EventBus, ProgressionEvent
from progression.state.progress import ProgressStore
from curriculum.modules.definition import NPC, ModuleDefinition, WorldObject
from curriculum.modules.handlers import HandlerRegistry
from curriculum.tasks.task import Task, task_id_of
from curriculum.unlock.evaluator import RequirementEvaluator

logger = logging.getLogger(__name__)


@dataclass
class ModuleContext:
    """
    Mutation and query surface for one module.

    Attributes:
        module: The module definition
        progress: Progress store owned by the session
        evaluator: Requirement evaluator (``requirement`` / ``custom`` conditions)
        handlers: Named checks and actions
        events: Optional event bus
        interactable_id: The NPC or object currently interacted with
        submission_requests: Task ids whose submission view was requested
    """
    module: ModuleDefinition
    progress: ProgressStore
    evaluator: RequirementEvaluator
    handlers: HandlerRegistry = field(default_factory=HandlerRegistry)
    events: Optional[EventBus] = None
    interactable_id: Optional[str] = None
    submission_requests: list[str] = field(default_factory=list)

    @property
    def module_id(self) -> str:
        return self.module.id

    def _publish(self, event_type: Any, **data: Any) -> None:
        if self.events is not None:
            self.events.publish(event_type, module_id=self.module_id, **data)

    # Module state

    def get_state(self, key: str, default: Any = None) -> Any:
        return self.progress.get_state_field(self.module_id, key, default)

    def set_state(self, key: str, value: Any) -> None:
        self.progress.set_state_field(self.module_id, key, value)

    def get_interactable_state(self, interactable_id: str, key: str, default: Any = None) -> Any:
        return self.progress.get_interactable_field(self.module_id, interactable_id, key, default)

    def set_interactable_state(self, interactable_id: str, key: str, value: Any) -> None:
        self.progress.set_interactable_field(self.module_id, interactable_id, key, value)

    # Tasks

    def accept_task(self, task: Union[Task, str]) -> None:
        task_id = task_id_of(task)
        self.progress.accept_task(self.module_id, task_id)
        self._publish(ProgressionEvent.TASK_ACCEPTED, task_id=task_id)

    def complete_task(self, task: Union[Task, str]) -> None:
        task_id = task_id_of(task)
        self.progress.complete_task(self.module_id, task_id)
        self._publish(ProgressionEvent.TASK_COMPLETED, task_id=task_id)

    def is_task_completed(self, task: Union[Task, str]) -> bool:
        return self.progress.is_task_completed(self.module_id, task_id_of(task))

    def is_task_active(self, task: Union[Task, str]) -> bool:
        task_id = task_id_of(task)
        return (
            self.progress.get_current_task_id(self.module_id) == task_id
            and not self.progress.is_task_completed(self.module_id, task_id)
        )

    def get_current_task_id(self) -> Optional[str]:
        return self.progress.get_current_task_id(self.module_id)

    def get_current_task(self) -> Optional[Task]:
        task_id = self.get_current_task_id()
        return self.module.get_task(task_id) if task_id else None

    def open_task_submission(self, task: Union[Task, str]) -> None:
        """Ask the UI layer to show the submission view for a task."""
        task_id = task_id_of(task)
        self.submission_requests.append(task_id)
        logger.debug("Submission requested for %s in %s", task_id, self.module_id)
        self._publish(DialogueEvent.TASK_SUBMISSION_REQUESTED, task_id=task_id)

    # Interactables

    def get_interactable(self, interactable_id: str) -> Optional[Union[NPC, WorldObject]]:
        return self.module.get_interactable(interactable_id)
