"""
Error taxonomy for the progression core.

Lookups return None for expected absence. The typed errors below are
raised (or handed to a caller-supplied ErrorHandler) when content is
referenced but missing, structurally invalid, or when a custom
predicate fails.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Optional


class ErrorCode(Enum):
    """Machine-readable error codes."""
    MODULE_NOT_FOUND = "MODULE_NOT_FOUND"
    MODULE_INVALID = "MODULE_INVALID"
    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    TASK_UNAVAILABLE = "TASK_UNAVAILABLE"
    DIALOGUE_NOT_FOUND = "DIALOGUE_NOT_FOUND"
    DIALOGUE_INVALID = "DIALOGUE_INVALID"
    DIALOGUE_NODE_NOT_FOUND = "DIALOGUE_NODE_NOT_FOUND"
    HANDLER_NOT_FOUND = "HANDLER_NOT_FOUND"
    EVALUATION_FAILED = "EVALUATION_FAILED"


class ProgressionError(Exception):
    """Base exception for the progression core."""

    code: ErrorCode = ErrorCode.MODULE_INVALID

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.context = context or {}


class NotFoundError(ProgressionError):
    """A referenced id is absent from the registry."""


class UnknownModuleError(NotFoundError):
    """Module id is not registered."""
    code = ErrorCode.MODULE_NOT_FOUND

    def __init__(self, module_id: str):
        super().__init__(f"Module '{module_id}' is not registered", context={"module_id": module_id})
        self.module_id = module_id


class TaskNotFoundError(NotFoundError):
    """Task id is not declared by the module."""
    code = ErrorCode.TASK_NOT_FOUND

    def __init__(self, task_id: str, module_id: Optional[str] = None):
        where = f" in module '{module_id}'" if module_id else ""
        super().__init__(
            f"Task '{task_id}' not found{where}",
            context={"task_id": task_id, "module_id": module_id},
        )
        self.task_id = task_id
        self.module_id = module_id


class DialogueNotFoundError(NotFoundError):
    """NPC or dialogue id is absent from the module."""
    code = ErrorCode.DIALOGUE_NOT_FOUND

    def __init__(self, dialogue_id: str, module_id: Optional[str] = None):
        super().__init__(
            f"Dialogue '{dialogue_id}' not found",
            context={"dialogue_id": dialogue_id, "module_id": module_id},
        )
        self.dialogue_id = dialogue_id
        self.module_id = module_id


class NodeNotFoundError(NotFoundError):
    """Dialogue node id is absent from the tree."""
    code = ErrorCode.DIALOGUE_NODE_NOT_FOUND

    def __init__(self, node_id: str, dialogue_id: Optional[str] = None):
        super().__init__(
            f"Dialogue node '{node_id}' not found",
            context={"node_id": node_id, "dialogue_id": dialogue_id},
        )
        self.node_id = node_id
        self.dialogue_id = dialogue_id


class HandlerNotFoundError(NotFoundError):
    """Content references a check or action id that was never registered."""
    code = ErrorCode.HANDLER_NOT_FOUND


class InvalidStructureError(ProgressionError):
    """Content is structurally invalid (missing default entry, bad config)."""
    code = ErrorCode.DIALOGUE_INVALID


class EvaluationFailure(ProgressionError):
    """A custom predicate raised or timed out."""
    code = ErrorCode.EVALUATION_FAILED


class TaskUnavailableError(ProgressionError):
    """A task cannot be accepted or submitted in the current state."""
    code = ErrorCode.TASK_UNAVAILABLE


# Caller-supplied sink for typed errors
ErrorHandler = Callable[[ProgressionError], None]


def report(error: ProgressionError, handler: Optional[ErrorHandler]) -> None:
    """
    Hand an error to the handler, or raise it when no handler is set.
    """
    if handler is None:
        raise error
    handler(error)
