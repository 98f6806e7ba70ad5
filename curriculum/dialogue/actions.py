"""
Dialogue actions - side effects attached to choices.

An action is an object with a single ``execute(context)`` method that may
be sync or async. Actions run in declaration order when a choice is taken;
the dialogue core only sequences and awaits them.

Usage:
    choice = DialogueChoice(
        text="I'll help",
        actions=(set_state("met_guide", True), accept_task(intro_task)),
    )
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Optional, Union

from curriculum.tasks.task import Task, task_id_of

if TYPE_CHECKING:
    from curriculum.modules.context import ModuleContext


class DialogueAction(ABC):
    """Base interface for choice actions."""

    @abstractmethod
    def execute(self, context: ModuleContext) -> Optional[Awaitable[None]]:
        """Apply the action to the module context."""

    async def run(self, context: ModuleContext) -> None:
        result = self.execute(context)
        if inspect.isawaitable(result):
            await result


@dataclass(frozen=True)
class AcceptTask(DialogueAction):
    task_id: str

    def execute(self, context: ModuleContext) -> None:
        context.accept_task(self.task_id)


@dataclass(frozen=True)
class CompleteTask(DialogueAction):
    task_id: str

    def execute(self, context: ModuleContext) -> None:
        context.complete_task(self.task_id)


@dataclass(frozen=True)
class SetState(DialogueAction):
    key: str
    value: Any = None

    def execute(self, context: ModuleContext) -> None:
        context.set_state(self.key, self.value)


@dataclass(frozen=True)
class SetInteractableState(DialogueAction):
    interactable_id: str
    key: str
    value: Any = None

    def execute(self, context: ModuleContext) -> None:
        context.set_interactable_state(self.interactable_id, self.key, self.value)


@dataclass(frozen=True)
class OpenTaskSubmission(DialogueAction):
    """Ask the UI to open the submission view (defaults to the active task)."""
    task_id: Optional[str] = None

    def execute(self, context: ModuleContext) -> None:
        task_id = self.task_id or context.get_current_task_id()
        if task_id:
            context.open_task_submission(task_id)


@dataclass(frozen=True)
class CallHandler(DialogueAction):
    """Run an action registered by id in the module's handler registry."""
    handler_id: str

    async def execute(self, context: ModuleContext) -> None:
        action = context.handlers.get_action(self.handler_id)
        await action.run(context)


class FunctionAction(DialogueAction):
    """Adapts a plain (sync or async) callable taking the context."""

    def __init__(self, func: Callable[[ModuleContext], Any]):
        self.func = func

    def execute(self, context: ModuleContext) -> Any:
        return self.func(context)

    def __repr__(self) -> str:
        return f"FunctionAction({getattr(self.func, '__name__', 'func')})"


async def run_actions(actions: Iterable[DialogueAction], context: ModuleContext) -> None:
    """Execute actions sequentially, awaiting async ones."""
    for action in actions:
        await action.run(context)


def as_action(value: Union[DialogueAction, Callable[[Any], Any]]) -> DialogueAction:
    if isinstance(value, DialogueAction):
        return value
    if callable(value):
        return FunctionAction(value)
    raise TypeError(f"Not a dialogue action: {value!r}")


# ----------------------------------------------------------------------
# Builders
# ----------------------------------------------------------------------

def accept_task(task: Union[Task, str]) -> AcceptTask:
    return AcceptTask(task_id_of(task))


def complete_task(task: Union[Task, str]) -> CompleteTask:
    return CompleteTask(task_id_of(task))


def set_state(key: str, value: Any) -> SetState:
    return SetState(key, value)


def set_interactable_state(interactable_id: str, key: str, value: Any) -> SetInteractableState:
    return SetInteractableState(interactable_id, key, value)


def open_task_submission(task: Union[Task, str, None] = None) -> OpenTaskSubmission:
    return OpenTaskSubmission(task_id_of(task) if task is not None else None)


def call_handler(handler_id: str) -> CallHandler:
    return CallHandler(handler_id)


def call_function(func: Callable[[ModuleContext], Any]) -> FunctionAction:
    return FunctionAction(func)
