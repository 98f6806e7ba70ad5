"""
Task service - accepting and submitting tasks.

Submitting a solved task completes it, clears the module's current task
and runs module completion, which may unlock further modules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from progression.core.errors import ErrorHandler, TaskNotFoundError, TaskUnavailableError, UnknownModuleError, report
from progression.core.events import EventBus, ProgressionEvent
from progression.state.progress import ProgressStore
from curriculum.tasks.availability import TaskAvailabilityService, TaskStatus
from curriculum.tasks.task import Task, TaskSolveResult, TaskSubmission
from curriculum.unlock.evaluator import UnlockContext

if TYPE_CHECKING:
    from curriculum.modules.progression import ModuleProgressionService
    from curriculum.modules.registry import ModuleRegistry

logger = logging.getLogger(__name__)


@dataclass
class SubmissionOutcome:
    """
    Result of a submission.

    Attributes:
        result: The validator's verdict
        module_completed: The submission completed the module
        unlocked_modules: Modules unlocked by the completion cascade
    """
    result: TaskSolveResult
    module_completed: bool = False
    unlocked_modules: list[str] = field(default_factory=list)

    @property
    def solved(self) -> bool:
        return self.result.solved


class TaskService:
    """Task lifecycle operations for registered modules."""

    def __init__(
        self,
        registry: ModuleRegistry,
        progress: ProgressStore,
        availability: TaskAvailabilityService,
        modules: Optional[ModuleProgressionService] = None,
        events: Optional[EventBus] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.registry = registry
        self.progress = progress
        self.availability = availability
        self.modules = modules
        self.events = events
        self.error_handler = error_handler

    def find_task(self, module_id: str, task_id: str) -> Optional[Task]:
        module = self.registry.get_module(module_id)
        return module.get_task(task_id) if module else None

    def _require_task(self, module_id: str, task_id: str) -> Task:
        module = self.registry.get_module(module_id)
        if module is None:
            raise UnknownModuleError(module_id)
        task = module.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id, module_id)
        return task

    async def task_status(self, module_id: str, task_id: str) -> Optional[TaskStatus]:
        """Derived status, or None if the task is unknown."""
        task = self.find_task(module_id, task_id)
        if task is None:
            return None
        return await self.availability.task_status(task, UnlockContext(module_id=module_id))

    async def accept_task(self, module_id: str, task_id: str) -> Task:
        """
        Make a task the module's current task.

        Raises:
            UnknownModuleError / TaskNotFoundError: unknown ids
            TaskUnavailableError: the task is completed or locked
        """
        task = self._require_task(module_id, task_id)
        status = await self.availability.task_status(task, UnlockContext(module_id=module_id))
        if status is TaskStatus.COMPLETED or status is TaskStatus.LOCKED:
            raise TaskUnavailableError(
                f"Task '{task_id}' is {status.value}",
                context={"module_id": module_id, "task_id": task_id},
            )

        self.progress.accept_task(module_id, task_id)
        if self.events is not None:
            self.events.publish(ProgressionEvent.TASK_ACCEPTED, module_id=module_id, task_id=task_id)
        return task

    async def submit_task(self, module_id: str, task_id: str, submission: TaskSubmission) -> SubmissionOutcome:
        """
        Validate a submission and complete the task when solved.

        Submitting a completed task is rejected with TaskUnavailableError.
        """
        task = self._require_task(module_id, task_id)
        if self.progress.is_task_completed(module_id, task_id):
            raise TaskUnavailableError(
                f"Task '{task_id}' is already completed",
                context={"module_id": module_id, "task_id": task_id},
            )

        result = task.validate_submission(submission)
        if not result.solved:
            logger.debug("Submission for %s rejected: %s", task_id, result.reason)
            if self.events is not None:
                self.events.publish(
                    ProgressionEvent.TASK_SUBMISSION_FAILED,
                    module_id=module_id, task_id=task_id, result=result,
                )
            return SubmissionOutcome(result=result)

        self.progress.complete_task(module_id, task_id)
        if self.events is not None:
            self.events.publish(ProgressionEvent.TASK_COMPLETED, module_id=module_id, task_id=task_id)

        outcome = SubmissionOutcome(result=result)
        if self.modules is not None:
            outcome.unlocked_modules = await self.modules.evaluate_module_completion(module_id)
            outcome.module_completed = self.modules.progression.is_completed(module_id)
        return outcome

    def next_sequential_task(self, module_id: str) -> Optional[Task]:
        module = self.registry.get_module(module_id)
        if module is None:
            report(UnknownModuleError(module_id), self.error_handler)
            return None
        return self.availability.next_sequential_task(module.declared_tasks, module_id)
