"""
Module progress - per-module task, greeting and custom state.

Provides:
- ModuleProgress: runtime progress record for one module
- ProgressStore: the synchronous store contract the core reads and writes
- InMemoryProgressStore: session-owned implementation with snapshot support

Durability is delegated: a persistence layer can round-trip the store
through snapshot() / restore().
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass
class ModuleProgress:
    """
    Progress for a single module.

    Attributes:
        completed_tasks: Ids of completed tasks
        current_task_id: The single accepted, not yet completed task
        seen_greetings: Greeting dialogue id -> seen flag
        custom_state: Free-form module state bag
        interactables: Interactable id -> free-form state bag
    """
    completed_tasks: set[str] = field(default_factory=set)
    current_task_id: Optional[str] = None
    seen_greetings: dict[str, bool] = field(default_factory=dict)
    custom_state: dict[str, Any] = field(default_factory=dict)
    interactables: dict[str, dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain JSON-compatible data."""
        return {
            "completed_tasks": sorted(self.completed_tasks),
            "current_task_id": self.current_task_id,
            "seen_greetings": dict(self.seen_greetings),
            "custom_state": copy.deepcopy(self.custom_state),
            "interactables": copy.deepcopy(self.interactables),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ModuleProgress:
        return cls(
            completed_tasks=set(data.get("completed_tasks", [])),
            current_task_id=data.get("current_task_id"),
            seen_greetings=dict(data.get("seen_greetings", {})),
            custom_state=copy.deepcopy(data.get("custom_state", {})),
            interactables=copy.deepcopy(data.get("interactables", {})),
        )


@runtime_checkable
class ProgressStore(Protocol):
    """
    Progress store contract.

    Must be synchronous and read-your-writes consistent within a session.
    """

    def get_progress(self, module_id: str) -> Optional[ModuleProgress]: ...

    def update_progress(self, module_id: str, **changes: Any) -> ModuleProgress: ...

    def is_task_completed(self, module_id: str, task_id: str) -> bool: ...

    def get_current_task_id(self, module_id: str) -> Optional[str]: ...

    def accept_task(self, module_id: str, task_id: str) -> None: ...

    def complete_task(self, module_id: str, task_id: str) -> None: ...

    def set_state_field(self, module_id: str, key: str, value: Any) -> None: ...

    def get_state_field(self, module_id: str, key: str, default: Any = None) -> Any: ...

    def set_interactable_field(self, module_id: str, interactable_id: str, key: str, value: Any) -> None: ...

    def get_interactable_field(self, module_id: str, interactable_id: str, key: str, default: Any = None) -> Any: ...

    def has_seen_greeting(self, module_id: str, dialogue_id: str) -> bool: ...

    def mark_greeting_seen(self, module_id: str, dialogue_id: str) -> None: ...


class InMemoryProgressStore:
    """
    Progress store owned by a single session.

    Usage:
        store = InMemoryProgressStore()
        store.accept_task("forest", "gather_wood")
        store.complete_task("forest", "gather_wood")
        store.is_task_completed("forest", "gather_wood")  # True
    """

    def __init__(self, initial: Optional[dict[str, ModuleProgress]] = None):
        self._progress: dict[str, ModuleProgress] = dict(initial or {})

    def _ensure(self, module_id: str) -> ModuleProgress:
        progress = self._progress.get(module_id)
        if progress is None:
            progress = ModuleProgress()
            self._progress[module_id] = progress
        return progress

    def get_progress(self, module_id: str) -> Optional[ModuleProgress]:
        """Get progress for a module, or None if nothing was recorded yet."""
        return self._progress.get(module_id)

    def update_progress(self, module_id: str, **changes: Any) -> ModuleProgress:
        """Apply a partial update to a module's progress."""
        progress = self._ensure(module_id)
        for key, value in changes.items():
            if not hasattr(progress, key):
                raise AttributeError(f"ModuleProgress has no field '{key}'")
            setattr(progress, key, value)
        return progress

    def is_task_completed(self, module_id: str, task_id: str) -> bool:
        progress = self._progress.get(module_id)
        return progress is not None and task_id in progress.completed_tasks

    def get_current_task_id(self, module_id: str) -> Optional[str]:
        progress = self._progress.get(module_id)
        return progress.current_task_id if progress else None

    def accept_task(self, module_id: str, task_id: str) -> None:
        """Mark a task as the module's active task."""
        self._ensure(module_id).current_task_id = task_id
        logger.debug("Accepted task %s in %s", task_id, module_id)

    def complete_task(self, module_id: str, task_id: str) -> None:
        """Record completion and clear the active task in the same transition."""
        progress = self._ensure(module_id)
        progress.completed_tasks.add(task_id)
        if progress.current_task_id == task_id:
            progress.current_task_id = None
        logger.debug("Completed task %s in %s", task_id, module_id)

    def set_state_field(self, module_id: str, key: str, value: Any) -> None:
        self._ensure(module_id).custom_state[key] = value

    def get_state_field(self, module_id: str, key: str, default: Any = None) -> Any:
        progress = self._progress.get(module_id)
        if progress is None:
            return default
        return progress.custom_state.get(key, default)

    def set_interactable_field(self, module_id: str, interactable_id: str, key: str, value: Any) -> None:
        state = self._ensure(module_id).interactables.setdefault(interactable_id, {})
        state[key] = value

    def get_interactable_field(self, module_id: str, interactable_id: str, key: str, default: Any = None) -> Any:
        progress = self._progress.get(module_id)
        if progress is None:
            return default
        return progress.interactables.get(interactable_id, {}).get(key, default)

    def has_seen_greeting(self, module_id: str, dialogue_id: str) -> bool:
        progress = self._progress.get(module_id)
        return bool(progress and progress.seen_greetings.get(dialogue_id, False))

    def mark_greeting_seen(self, module_id: str, dialogue_id: str) -> None:
        self._ensure(module_id).seen_greetings[dialogue_id] = True

    def reset(self, module_id: Optional[str] = None) -> None:
        """Forget progress for one module, or for all of them."""
        if module_id is None:
            self._progress.clear()
        else:
            self._progress.pop(module_id, None)

    def snapshot(self) -> dict[str, Any]:
        """Serialize every module's progress."""
        return {module_id: p.to_dict() for module_id, p in self._progress.items()}

    def restore(self, data: dict[str, Any]) -> None:
        """Replace all progress from a snapshot."""
        self._progress = {
            module_id: ModuleProgress.from_dict(entry)
            for module_id, entry in data.items()
        }
