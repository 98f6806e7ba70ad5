"""
Core module.

Exports:
- ContentModel: Immutable authored-content base
- EventBus, Event, ProgressionEvent, DialogueEvent: Event system
- EngineConfig: Shared configuration
- Error taxonomy (ProgressionError and subclasses)
"""

from progression.core.model import ContentModel
from progression.core.events import EventBus, Event, ProgressionEvent, DialogueEvent
from progression.core.config import EngineConfig
from progression.core.errors import (
    ErrorCode,
    ErrorHandler,
    ProgressionError,
    NotFoundError,
    UnknownModuleError,
    TaskNotFoundError,
    DialogueNotFoundError,
    NodeNotFoundError,
    HandlerNotFoundError,
    InvalidStructureError,
    EvaluationFailure,
    TaskUnavailableError,
    report,
)

__all__ = [
    # Content
    "ContentModel",
    # Events
    "EventBus",
    "Event",
    "ProgressionEvent",
    "DialogueEvent",
    # Config
    "EngineConfig",
    # Errors
    "ErrorCode",
    "ErrorHandler",
    "ProgressionError",
    "NotFoundError",
    "UnknownModuleError",
    "TaskNotFoundError",
    "DialogueNotFoundError",
    "NodeNotFoundError",
    "HandlerNotFoundError",
    "InvalidStructureError",
    "EvaluationFailure",
    "TaskUnavailableError",
    "report",
]
