"""
Task availability - classifies an NPC's tasks against current progress.

    completed   recorded in the module's completed set
    active      the module's current task, not completed
    available   not completed, not active, unlock requirement met
    locked      everything else

Classification reads progress only. For a fixed snapshot the result is
stable and lists tasks in declaration order.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from progression.state.progress import ProgressStore
from curriculum.tasks.task import Task
from curriculum.unlock.evaluator import RequirementContext, RequirementEvaluator


class TaskStatus(Enum):
    """Derived runtime status of a task."""
    LOCKED = "locked"
    AVAILABLE = "available"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class TaskClassification:
    """Available and active tasks, in declaration order."""
    available: tuple[Task, ...] = ()
    active: tuple[Task, ...] = ()

    @property
    def available_ids(self) -> frozenset[str]:
        return frozenset(task.id for task in self.available)

    @property
    def active_ids(self) -> frozenset[str]:
        return frozenset(task.id for task in self.active)


class TaskAvailabilityService:
    """Classifies tasks using the requirement evaluator and module progress."""

    def __init__(self, evaluator: RequirementEvaluator, progress: ProgressStore):
        self.evaluator = evaluator
        self.progress = progress

    def is_active(self, task: Task, module_id: str) -> bool:
        return (
            self.progress.get_current_task_id(module_id) == task.id
            and not self.progress.is_task_completed(module_id, task.id)
        )

    async def classify(self, tasks: Sequence[Task], context: RequirementContext) -> TaskClassification:
        """Split tasks into available and active; completed tasks are in neither."""
        module_id = context.module_id or ""
        open_tasks = [t for t in tasks if not self.progress.is_task_completed(module_id, t.id)]

        active = [t for t in open_tasks if self.is_active(t, module_id)]
        active_ids = {t.id for t in active}
        candidates = [t for t in open_tasks if t.id not in active_ids]

        unlocked = await asyncio.gather(
            *(self.evaluator.evaluate(t.unlock_requirement, context) for t in candidates)
        )
        available = [t for t, ok in zip(candidates, unlocked) if ok]

        return TaskClassification(available=tuple(available), active=tuple(active))

    async def task_status(self, task: Task, context: RequirementContext) -> TaskStatus:
        module_id = context.module_id or ""
        if self.progress.is_task_completed(module_id, task.id):
            return TaskStatus.COMPLETED
        if self.is_active(task, module_id):
            return TaskStatus.ACTIVE
        if await self.evaluator.evaluate(task.unlock_requirement, context):
            return TaskStatus.AVAILABLE
        return TaskStatus.LOCKED

    def next_sequential_task(self, tasks: Sequence[Task], module_id: str) -> Optional[Task]:
        """
        First non-completed task in declared order.

        Tasks with an ``order`` hint come first, sorted by hint; ties and
        unhinted tasks keep declaration order.
        """
        for task in sequence_order(tasks):
            if not self.progress.is_task_completed(module_id, task.id):
                return task
        return None


def sequence_order(tasks: Sequence[Task]) -> list[Task]:
    """Stable sort by the optional ``order`` hint."""
    return sorted(tasks, key=lambda t: (t.order is None, t.order or 0))
