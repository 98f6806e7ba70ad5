"""
Unlock requirements - boolean expressions gating tasks, NPCs, objects and modules.

A requirement is a closed tagged union discriminated on ``type``:

    password         needs interactive input, never auto-satisfied
    task-complete    a task (by id) has been completed
    module-complete  a module has reached the completed state
    state-check      a custom state field equals a value
    custom           an arbitrary (possibly async) predicate
    and / or         combinators, nest arbitrarily

Requirements must not reference themselves; this is an authoring rule,
there is no runtime cycle detection.

Usage:
    req = all_of(
        module_complete("intro"),
        any_of(task_complete(quiz), state_check("found_key", True)),
    )
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Annotated, Any, Awaitable, Callable, Literal, Optional, Union

from pydantic import Field, field_validator

from progression.core.model import ContentModel

if TYPE_CHECKING:
    from curriculum.tasks.task import Task


class CustomCheck(ABC):
    """
    Predicate interface for ``custom`` requirements and dialogue conditions.

    ``check`` may return a bool or an awaitable resolving to a bool.
    Implementations should be idempotent and cheap; results are not cached.
    """

    #: Registry id, when the check was registered by name
    check_id: Optional[str] = None

    @abstractmethod
    def check(self, context: Any) -> Union[bool, Awaitable[bool]]:
        """Evaluate the predicate against a module context."""

    async def evaluate(self, context: Any) -> bool:
        result = self.check(context)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)


class FunctionCheck(CustomCheck):
    """Adapts a plain (sync or async) callable to the CustomCheck interface."""

    def __init__(self, func: Callable[[Any], Any], check_id: Optional[str] = None):
        self.func = func
        self.check_id = check_id

    def check(self, context: Any) -> Union[bool, Awaitable[bool]]:
        return self.func(context)

    def __repr__(self) -> str:
        name = self.check_id or getattr(self.func, "__name__", "check")
        return f"FunctionCheck({name})"


def _as_check(value: Any) -> Any:
    if isinstance(value, CustomCheck) or not callable(value):
        return value
    return FunctionCheck(value)


class PasswordRequirement(ContentModel):
    """Requires the player to type a password."""
    type: Literal["password"] = "password"
    password: str
    hint: str = ""


class TaskCompleteRequirement(ContentModel):
    """Requires a task to be completed."""
    type: Literal["task-complete"] = "task-complete"
    task_id: str
    task_name: Optional[str] = None


class ModuleCompleteRequirement(ContentModel):
    """Requires another module to be completed."""
    type: Literal["module-complete"] = "module-complete"
    module_id: str


class StateCheckRequirement(ContentModel):
    """Requires a custom state field to equal a value."""
    type: Literal["state-check"] = "state-check"
    key: str
    value: Any = None


class CustomRequirement(ContentModel):
    """Arbitrary predicate over the module context."""
    type: Literal["custom"] = "custom"
    check: CustomCheck
    description: str = ""

    @field_validator("check", mode="before")
    @classmethod
    def _wrap_callable(cls, value: Any) -> Any:
        return _as_check(value)


class AndRequirement(ContentModel):
    """True iff every child requirement is met."""
    type: Literal["and"] = "and"
    requirements: tuple[UnlockRequirement, ...] = ()


class OrRequirement(ContentModel):
    """True iff any child requirement is met."""
    type: Literal["or"] = "or"
    requirements: tuple[UnlockRequirement, ...] = ()


UnlockRequirement = Annotated[
    Union[
        PasswordRequirement,
        TaskCompleteRequirement,
        ModuleCompleteRequirement,
        StateCheckRequirement,
        CustomRequirement,
        AndRequirement,
        OrRequirement,
    ],
    Field(discriminator="type"),
]

AndRequirement.model_rebuild()
OrRequirement.model_rebuild()

LEAF_REQUIREMENT_TYPES = ("password", "module-complete", "task-complete", "state-check", "custom")


# ----------------------------------------------------------------------
# Builders
# ----------------------------------------------------------------------

def password(secret: str, hint: str = "") -> PasswordRequirement:
    """Create a password requirement."""
    return PasswordRequirement(password=secret, hint=hint)


def task_complete(task: Union[Task, str]) -> TaskCompleteRequirement:
    """Create a task completion requirement from a Task or a task id."""
    if isinstance(task, str):
        return TaskCompleteRequirement(task_id=task)
    return TaskCompleteRequirement(task_id=task.id, task_name=task.name)


def module_complete(module_id: str) -> ModuleCompleteRequirement:
    """Create a module completion requirement."""
    return ModuleCompleteRequirement(module_id=module_id)


def state_check(key: str, value: Any = True) -> StateCheckRequirement:
    """Create a state equality requirement."""
    return StateCheckRequirement(key=key, value=value)


def custom(check: Union[CustomCheck, Callable[[Any], Any]], description: str = "") -> CustomRequirement:
    """Create a custom predicate requirement."""
    return CustomRequirement(check=_as_check(check), description=description)


def all_of(*requirements: UnlockRequirement) -> AndRequirement:
    """Combine requirements with AND."""
    return AndRequirement(requirements=requirements)


def any_of(*requirements: UnlockRequirement) -> OrRequirement:
    """Combine requirements with OR."""
    return OrRequirement(requirements=requirements)
