"""
State module - runtime progress owned by the active session.
"""

from progression.state.progress import ModuleProgress, ProgressStore, InMemoryProgressStore
from progression.state.progression import (
    ModuleProgressionState,
    ModuleProgressionRecord,
    ProgressionStore,
)

__all__ = [
    "ModuleProgress",
    "ProgressStore",
    "InMemoryProgressStore",
    "ModuleProgressionState",
    "ModuleProgressionRecord",
    "ProgressionStore",
]
