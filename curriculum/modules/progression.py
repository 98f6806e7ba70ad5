"""
Module progression - the locked -> unlocked -> completed state machine.

    locked --(requirement met)--> unlocked --(all declared tasks done)--> completed

Completed is sticky. Completing a module does not unlock dependents
directly: every registered module is re-evaluated against its own
requirement (pull-based propagation).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from progression.core.config import EngineConfig
from progression.core.events import EventBus, ProgressionEvent
from progression.state.progress import ProgressStore
from progression.state.progression import ModuleProgressionState, ProgressionStore
from curriculum.modules.definition import NPC, WorldObject
from curriculum.modules.registry import ModuleRegistry
from curriculum.unlock.evaluator import RequirementEvaluator, UnlockContext, requires_interaction
from curriculum.unlock.requirements import PasswordRequirement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnlockCheck:
    can_unlock: bool
    requires_interaction: bool = False


@dataclass(frozen=True)
class CompletionCheck:
    """Whether a module is fully completed and which modules now qualify."""
    is_completed: bool
    modules_to_unlock: tuple[str, ...] = ()


@dataclass(frozen=True)
class InitializationActions:
    to_unlock: tuple[str, ...] = ()
    to_lock: tuple[str, ...] = ()


@dataclass
class UnlockResult:
    success: bool
    requires_password: bool = False
    unlocked: list[str] = field(default_factory=list)


class ModuleProgressionService:
    """
    Drives module progression state.

    Usage:
        service = ModuleProgressionService(registry, progression, progress, evaluator)
        await service.initialize()
        await service.evaluate_module_completion("intro")
    """

    def __init__(
        self,
        registry: ModuleRegistry,
        progression: ProgressionStore,
        progress: ProgressStore,
        evaluator: RequirementEvaluator,
        config: Optional[EngineConfig] = None,
        events: Optional[EventBus] = None,
    ):
        self.registry = registry
        self.progression = progression
        self.progress = progress
        self.evaluator = evaluator
        self.config = config or EngineConfig()
        self.events = events

    def get_state(self, module_id: str) -> ModuleProgressionState:
        return self.progression.get_state(module_id)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def unlock(self, module_id: str) -> bool:
        """
        Force a module to unlocked. Completed modules never regress.

        Returns:
            True if the state changed
        """
        state = self.progression.get_state(module_id)
        if state is not ModuleProgressionState.LOCKED:
            return False
        self.progression.set_state(module_id, ModuleProgressionState.UNLOCKED)
        logger.debug("Module %s unlocked", module_id)
        self._publish(ProgressionEvent.MODULE_UNLOCKED, module_id)
        return True

    def complete(self, module_id: str) -> bool:
        if self.progression.get_state(module_id) is ModuleProgressionState.COMPLETED:
            return False
        self.progression.set_state(module_id, ModuleProgressionState.COMPLETED)
        logger.debug("Module %s completed", module_id)
        self._publish(ProgressionEvent.MODULE_COMPLETED, module_id)
        return True

    def lock(self, module_id: str) -> bool:
        """Lock a module unless it is completed."""
        state = self.progression.get_state(module_id)
        if state is ModuleProgressionState.COMPLETED:
            return False
        if self.progression.get_record(module_id) is not None and state is ModuleProgressionState.LOCKED:
            return False
        self.progression.set_state(module_id, ModuleProgressionState.LOCKED)
        self._publish(ProgressionEvent.MODULE_LOCKED, module_id)
        return True

    def _publish(self, event_type: ProgressionEvent, module_id: str) -> None:
        if self.events is not None:
            self.events.publish(event_type, module_id=module_id)

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    async def check_unlock_status(self, module_id: str) -> bool:
        """
        Whether a locked module should transition to unlocked.

        Already unlocked or completed modules report False. Unknown modules
        report False. A module without a requirement is always unlockable.
        """
        if self.progression.get_state(module_id) is not ModuleProgressionState.LOCKED:
            return False
        module = self.registry.get_module(module_id)
        if module is None:
            return False
        return await self.evaluator.evaluate(module.unlock_requirement, UnlockContext(module_id=module_id))

    async def can_unlock(self, module_id: str, password: Optional[str] = None) -> UnlockCheck:
        """
        Check unlockability, accepting a password for top-level password gates.

        ``requires_interaction`` is only reported while the requirement is unmet.
        """
        module = self.registry.get_module(module_id)
        if module is None or self.progression.get_state(module_id) is not ModuleProgressionState.LOCKED:
            return UnlockCheck(can_unlock=False)

        requirement = module.unlock_requirement
        if requirement is None:
            return UnlockCheck(can_unlock=True)

        if isinstance(requirement, PasswordRequirement):
            if not password:
                return UnlockCheck(can_unlock=False, requires_interaction=True)
            return UnlockCheck(can_unlock=password == requirement.password, requires_interaction=True)

        met = await self.evaluator.evaluate(requirement, UnlockContext(module_id=module_id))
        return UnlockCheck(can_unlock=met, requires_interaction=requires_interaction(requirement) and not met)

    async def try_unlock(self, module_id: str, password: Optional[str] = None) -> UnlockResult:
        """Unlock a module if allowed, asking for a password when needed."""
        check = await self.can_unlock(module_id, password)
        if check.requires_interaction and not password:
            return UnlockResult(success=False, requires_password=True)
        if check.can_unlock:
            self.unlock(module_id)
            return UnlockResult(success=True, unlocked=[module_id])
        return UnlockResult(success=False)

    def is_fully_completed(self, module_id: str) -> bool:
        """All declared tasks completed, and at least one task declared."""
        module = self.registry.get_module(module_id)
        if module is None:
            return False
        declared = [task.id for task in module.declared_tasks]
        if not declared:
            return False
        return all(self.progress.is_task_completed(module_id, task_id) for task_id in declared)

    async def check_completion_status(self, module_id: str) -> CompletionCheck:
        """
        Report completion and the registered modules that currently qualify
        for unlocking. Nothing is applied.
        """
        if not self.is_fully_completed(module_id):
            return CompletionCheck(is_completed=False)

        to_unlock = [
            other for other in self.registry.get_registered_module_ids()
            if await self.check_unlock_status(other)
        ]
        return CompletionCheck(is_completed=True, modules_to_unlock=tuple(to_unlock))

    async def evaluate_module_completion(self, module_id: str) -> list[str]:
        """
        Complete the module if all its tasks are done, then unlock every
        module that now qualifies.

        Returns:
            Ids of modules unlocked by the cascade
        """
        if not self.is_fully_completed(module_id):
            return []

        self.complete(module_id)
        status = await self.check_completion_status(module_id)
        unlocked = [other for other in status.modules_to_unlock if self.unlock(other)]
        if unlocked:
            logger.debug("Completing %s unlocked %s", module_id, unlocked)
        return unlocked

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    async def initialization_actions(self, module_ids: Optional[Sequence[str]] = None) -> InitializationActions:
        """
        Which modules to unlock and lock at startup.

        Uses the configured allow-list when set, otherwise the first
        ``default_unlocked_count`` modules. Completed modules are left alone.
        """
        ids = list(module_ids) if module_ids else self.registry.get_registered_module_ids()
        allowed = set(self.config.initially_unlocked or ())
        to_unlock: list[str] = []
        to_lock: list[str] = []

        for index, module_id in enumerate(ids):
            state = self.progression.get_state(module_id)
            if state is ModuleProgressionState.COMPLETED:
                continue

            if self.config.uses_manual_unlock:
                initially_open = module_id in allowed
            else:
                initially_open = index < self.config.default_unlocked_count

            if not initially_open:
                to_lock.append(module_id)
                continue

            should_unlock = await self.check_unlock_status(module_id)
            if should_unlock or state is not ModuleProgressionState.UNLOCKED:
                to_unlock.append(module_id)

        return InitializationActions(to_unlock=tuple(to_unlock), to_lock=tuple(to_lock))

    async def initialize(self, module_ids: Optional[Sequence[str]] = None) -> InitializationActions:
        actions = await self.initialization_actions(module_ids)
        for module_id in actions.to_unlock:
            self.unlock(module_id)
        for module_id in actions.to_lock:
            self.lock(module_id)
        logger.debug("Initialized progression: unlocked=%s locked=%s", actions.to_unlock, actions.to_lock)
        return actions

    # ------------------------------------------------------------------
    # Interactables
    # ------------------------------------------------------------------

    async def is_interactable_unlocked(self, module_id: str, interactable: Union[NPC, WorldObject]) -> bool:
        """Evaluate an NPC's or object's unlock requirement."""
        return await self.evaluator.evaluate(interactable.unlock_requirement, UnlockContext(module_id=module_id))
