"""
Dialogue conditions - gate entry points and individual choices.

Conditions are evaluated against a ModuleContext. They mirror the unlock
requirement kinds but read the speaking module's own state, and add
``task-active`` and ``interactable-state``. The ``requirement`` kind
bridges to the requirement evaluator.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Annotated, Any, Callable, Literal, Optional, Union

from pydantic import Field, field_validator

from progression.core.model import ContentModel
from curriculum.tasks.task import Task, task_id_of
from curriculum.unlock.requirements import CustomCheck, UnlockRequirement, _as_check

if TYPE_CHECKING:
    from curriculum.modules.context import ModuleContext


class TaskCompleteCondition(ContentModel):
    type: Literal["task-complete"] = "task-complete"
    task_id: str


class TaskActiveCondition(ContentModel):
    type: Literal["task-active"] = "task-active"
    task_id: str


class StateCheckCondition(ContentModel):
    type: Literal["state-check"] = "state-check"
    key: str
    value: Any = None


class InteractableStateCondition(ContentModel):
    type: Literal["interactable-state"] = "interactable-state"
    interactable_id: str
    key: str
    value: Any = None


class RequirementCondition(ContentModel):
    """Holds when an unlock requirement is met."""
    type: Literal["requirement"] = "requirement"
    requirement: UnlockRequirement


class AndCondition(ContentModel):
    type: Literal["and"] = "and"
    conditions: tuple[DialogueCondition, ...] = ()


class OrCondition(ContentModel):
    type: Literal["or"] = "or"
    conditions: tuple[DialogueCondition, ...] = ()


class CustomCondition(ContentModel):
    type: Literal["custom"] = "custom"
    check: CustomCheck

    @field_validator("check", mode="before")
    @classmethod
    def _wrap_callable(cls, value: Any) -> Any:
        return _as_check(value)


DialogueCondition = Annotated[
    Union[
        TaskCompleteCondition,
        TaskActiveCondition,
        StateCheckCondition,
        InteractableStateCondition,
        RequirementCondition,
        AndCondition,
        OrCondition,
        CustomCondition,
    ],
    Field(discriminator="type"),
]

AndCondition.model_rebuild()
OrCondition.model_rebuild()


def _matches(value: Any, expected: Any) -> bool:
    return value is expected or value == expected


async def evaluate_condition(condition: Optional[DialogueCondition], context: ModuleContext) -> bool:
    """
    Evaluate a dialogue condition. A missing condition always holds.

    ``and`` / ``or`` evaluate every child, like unlock requirements.
    """
    if condition is None:
        return True

    if isinstance(condition, TaskCompleteCondition):
        return context.is_task_completed(condition.task_id)

    if isinstance(condition, TaskActiveCondition):
        return context.is_task_active(condition.task_id)

    if isinstance(condition, StateCheckCondition):
        return _matches(context.get_state(condition.key), condition.value)

    if isinstance(condition, InteractableStateCondition):
        value = context.get_interactable_state(condition.interactable_id, condition.key)
        return _matches(value, condition.value)

    if isinstance(condition, RequirementCondition):
        return await context.evaluator.evaluate(condition.requirement, context)

    if isinstance(condition, CustomCondition):
        return await context.evaluator.run_check(condition.check, context)

    if isinstance(condition, AndCondition):
        results = await asyncio.gather(*(evaluate_condition(c, context) for c in condition.conditions))
        return all(results)

    if isinstance(condition, OrCondition):
        results = await asyncio.gather(*(evaluate_condition(c, context) for c in condition.conditions))
        return any(results)

    raise TypeError(f"Unknown condition kind: {type(condition).__name__}")


# ----------------------------------------------------------------------
# Builders
# ----------------------------------------------------------------------

def task_completed(task: Union[Task, str]) -> TaskCompleteCondition:
    return TaskCompleteCondition(task_id=task_id_of(task))


def task_active(task: Union[Task, str]) -> TaskActiveCondition:
    return TaskActiveCondition(task_id=task_id_of(task))


def state_is(key: str, value: Any = True) -> StateCheckCondition:
    return StateCheckCondition(key=key, value=value)


def interactable_state_is(interactable_id: str, key: str, value: Any = True) -> InteractableStateCondition:
    return InteractableStateCondition(interactable_id=interactable_id, key=key, value=value)


def requirement_met(requirement: UnlockRequirement) -> RequirementCondition:
    return RequirementCondition(requirement=requirement)


def all_conditions(*conditions: DialogueCondition) -> AndCondition:
    return AndCondition(conditions=conditions)


def any_condition(*conditions: DialogueCondition) -> OrCondition:
    return OrCondition(conditions=conditions)


def check(predicate: Union[CustomCheck, Callable[[Any], Any]]) -> CustomCondition:
    """Wrap a predicate (sync or async) as a condition."""
    return CustomCondition(check=_as_check(predicate))
