"""
Module progression state - locked / unlocked / completed per module.

Timestamps are recorded once, the first time a state is entered,
and are never overwritten afterwards.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional


class ModuleProgressionState(Enum):
    """Progression state of a module."""
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    COMPLETED = "completed"


@dataclass
class ModuleProgressionRecord:
    """Progression record for one module."""
    module_id: str
    state: ModuleProgressionState = ModuleProgressionState.LOCKED
    unlocked_at: Optional[float] = None
    completed_at: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "module_id": self.module_id,
            "state": self.state.value,
            "unlocked_at": self.unlocked_at,
            "completed_at": self.completed_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ModuleProgressionRecord:
        return cls(
            module_id=data["module_id"],
            state=ModuleProgressionState(data.get("state", "locked")),
            unlocked_at=data.get("unlocked_at"),
            completed_at=data.get("completed_at"),
        )


class ProgressionStore:
    """
    Stores progression records.

    Unknown modules read as LOCKED.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._records: dict[str, ModuleProgressionRecord] = {}
        self._clock = clock

    def get_state(self, module_id: str) -> ModuleProgressionState:
        record = self._records.get(module_id)
        return record.state if record else ModuleProgressionState.LOCKED

    def get_record(self, module_id: str) -> Optional[ModuleProgressionRecord]:
        return self._records.get(module_id)

    def set_state(self, module_id: str, state: ModuleProgressionState) -> ModuleProgressionRecord:
        """Set a module's state, stamping first entry into unlocked/completed."""
        record = self._records.get(module_id)
        if record is None:
            record = ModuleProgressionRecord(module_id=module_id)
            self._records[module_id] = record

        record.state = state
        now = self._clock()
        if state is ModuleProgressionState.UNLOCKED and record.unlocked_at is None:
            record.unlocked_at = now
        if state is ModuleProgressionState.COMPLETED and record.completed_at is None:
            record.completed_at = now
        return record

    def is_completed(self, module_id: str) -> bool:
        return self.get_state(module_id) is ModuleProgressionState.COMPLETED

    def snapshot(self) -> dict[str, Any]:
        return {module_id: r.to_dict() for module_id, r in self._records.items()}

    def restore(self, data: dict[str, Any]) -> None:
        self._records = {
            module_id: ModuleProgressionRecord.from_dict(entry)
            for module_id, entry in data.items()
        }
