"""
Progression core

Infrastructure shared by the curriculum runtime: immutable content models,
typed events, the error taxonomy, engine configuration, JSON content
loading and the session-owned progress stores.

Quick Start:
    from progression import EngineConfig, InMemoryProgressStore, ProgressionStore

    progress = InMemoryProgressStore()
    progression = ProgressionStore()
"""

__version__ = "0.1.0"

# Re-export core components for convenience
from progression.core import (
    ContentModel,
    EventBus,
    Event,
    ProgressionEvent,
    DialogueEvent,
    EngineConfig,
    ErrorHandler,
    ProgressionError,
    NotFoundError,
    InvalidStructureError,
    EvaluationFailure,
)

from progression.state import (
    InMemoryProgressStore,
    ModuleProgress,
    ModuleProgressionState,
    ProgressionStore,
    ProgressStore,
)

__all__ = [
    # Core
    "ContentModel",
    "EngineConfig",
    # Events
    "EventBus",
    "Event",
    "ProgressionEvent",
    "DialogueEvent",
    # Errors
    "ErrorHandler",
    "ProgressionError",
    "NotFoundError",
    "InvalidStructureError",
    "EvaluationFailure",
    # State
    "InMemoryProgressStore",
    "ModuleProgress",
    "ModuleProgressionState",
    "ProgressionStore",
    "ProgressStore",
]
