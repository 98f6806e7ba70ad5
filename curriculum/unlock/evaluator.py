"""
Requirement evaluator - recursive evaluation of unlock requirements.

Evaluation is asynchronous only because ``custom`` predicates may await I/O.
It reads the progress and progression stores and never writes to them.

Companion pure functions walk the same tree without evaluating it:
- requires_interaction: is a password node reachable?
- extract_module_dependencies: which modules does this requirement reference?
- extract_requirement_types / extract_requirement_details: flattened display lists
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Protocol

from progression.core.config import EngineConfig
from progression.core.errors import ErrorHandler, EvaluationFailure, report
from progression.state.progress import ProgressStore
from progression.state.progression import ProgressionStore
from curriculum.unlock.requirements import (
    AndRequirement,
    CustomCheck,
    CustomRequirement,
    ModuleCompleteRequirement,
    OrRequirement,
    PasswordRequirement,
    StateCheckRequirement,
    TaskCompleteRequirement,
    UnlockRequirement,
)

if TYPE_CHECKING:
    from curriculum.modules.registry import TaskOwnershipResolver

logger = logging.getLogger(__name__)


class RequirementContext(Protocol):
    """Anything carrying the module the evaluation runs on behalf of."""
    module_id: Optional[str]


@dataclass
class UnlockContext:
    """Minimal evaluation context (module selection screens, worldmap)."""
    module_id: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RequirementDetail:
    """One leaf of a requirement tree, prepared for hint/tooltip display."""
    type: str
    module_id: Optional[str] = None
    task_id: Optional[str] = None
    task_name: Optional[str] = None
    hint: Optional[str] = None
    key: Optional[str] = None
    description: Optional[str] = None


class RequirementEvaluator:
    """
    Evaluates unlock requirements against the progress snapshot.

    ``and`` / ``or`` await every child concurrently and never short-circuit;
    predicates with side effects must not rely on evaluation order.
    """

    def __init__(
        self,
        progress: ProgressStore,
        progression: ProgressionStore,
        ownership: Optional[TaskOwnershipResolver] = None,
        config: Optional[EngineConfig] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.progress = progress
        self.progression = progression
        self.ownership = ownership
        self.config = config or EngineConfig()
        self.error_handler = error_handler

    async def evaluate(
        self,
        requirement: Optional[UnlockRequirement],
        context: Optional[RequirementContext] = None,
    ) -> bool:
        """
        Check whether a requirement is met.

        A missing requirement (None) is always met.
        """
        if requirement is None:
            return True

        context = context if context is not None else UnlockContext()

        if isinstance(requirement, PasswordRequirement):
            # Only satisfiable through interactive input
            return False

        if isinstance(requirement, TaskCompleteRequirement):
            module_id = self._owning_module(requirement.task_id) or getattr(context, "module_id", None)
            if not module_id:
                return False
            return self.progress.is_task_completed(module_id, requirement.task_id)

        if isinstance(requirement, ModuleCompleteRequirement):
            return self.progression.is_completed(requirement.module_id)

        if isinstance(requirement, StateCheckRequirement):
            module_id = getattr(context, "module_id", None) or ""
            missing = object()
            value = self.progress.get_state_field(module_id, requirement.key, missing)
            if value is missing:
                return False
            return value is requirement.value or value == requirement.value

        if isinstance(requirement, CustomRequirement):
            return await self.run_check(requirement.check, context)

        if isinstance(requirement, AndRequirement):
            results = await asyncio.gather(
                *(self.evaluate(child, context) for child in requirement.requirements)
            )
            return all(results)

        if isinstance(requirement, OrRequirement):
            results = await asyncio.gather(
                *(self.evaluate(child, context) for child in requirement.requirements)
            )
            return any(results)

        raise TypeError(f"Unknown requirement kind: {type(requirement).__name__}")

    def _owning_module(self, task_id: str) -> Optional[str]:
        if self.ownership is None:
            return None
        return self.ownership.find_task_module(task_id)

    async def run_check(self, check: CustomCheck, context: Any) -> bool:
        """
        Run a custom predicate under the configured timeout.

        Timeouts and exceptions become EvaluationFailure; when the error
        handler accepts the failure the check counts as unmet.
        """
        timeout = self.config.custom_check_timeout
        try:
            if timeout is None:
                return await check.evaluate(context)
            return await asyncio.wait_for(check.evaluate(context), timeout)
        except asyncio.TimeoutError:
            failure = EvaluationFailure(
                f"Custom check {check!r} timed out after {timeout}s",
                context={"module_id": getattr(context, "module_id", None)},
            )
        except Exception as exc:
            failure = EvaluationFailure(
                f"Custom check {check!r} raised: {exc}",
                context={"module_id": getattr(context, "module_id", None), "error": exc},
            )
            failure.__cause__ = exc

        logger.debug("Custom check failed: %s", failure.message)
        report(failure, self.error_handler)
        return False


def requires_interaction(requirement: Optional[UnlockRequirement]) -> bool:
    """True iff a password node is reachable anywhere in the tree."""
    if requirement is None:
        return False
    if isinstance(requirement, PasswordRequirement):
        return True
    if isinstance(requirement, (AndRequirement, OrRequirement)):
        return any(requires_interaction(child) for child in requirement.requirements)
    return False


def extract_module_dependencies(
    requirement: Optional[UnlockRequirement],
    ownership: Optional[TaskOwnershipResolver] = None,
) -> list[str]:
    """
    Collect module ids referenced by the requirement.

    ``module-complete`` contributes its module id; ``task-complete`` contributes
    the module owning the task when it can be resolved. Order follows the tree,
    duplicates are dropped.
    """
    dependencies: list[str] = []

    def walk(node: UnlockRequirement) -> None:
        if isinstance(node, ModuleCompleteRequirement):
            found = node.module_id
        elif isinstance(node, TaskCompleteRequirement):
            found = ownership.find_task_module(node.task_id) if ownership else None
        elif isinstance(node, (AndRequirement, OrRequirement)):
            for child in node.requirements:
                walk(child)
            return
        else:
            return
        if found and found not in dependencies:
            dependencies.append(found)

    if requirement is not None:
        walk(requirement)
    return dependencies


def extract_requirement_types(requirement: Optional[UnlockRequirement]) -> list[str]:
    """Flatten the tree into its leaf type names, in order."""
    return [detail.type for detail in extract_requirement_details(requirement)]


def extract_requirement_details(requirement: Optional[UnlockRequirement]) -> list[RequirementDetail]:
    """
    Flatten the tree into display entries.

    ``and`` / ``or`` are expanded so each leaf appears individually,
    preserving declaration order.
    """
    if requirement is None:
        return []

    if isinstance(requirement, PasswordRequirement):
        return [RequirementDetail(type=requirement.type, hint=requirement.hint or None)]
    if isinstance(requirement, ModuleCompleteRequirement):
        return [RequirementDetail(type=requirement.type, module_id=requirement.module_id)]
    if isinstance(requirement, TaskCompleteRequirement):
        return [RequirementDetail(
            type=requirement.type,
            task_id=requirement.task_id,
            task_name=requirement.task_name or requirement.task_id,
        )]
    if isinstance(requirement, StateCheckRequirement):
        return [RequirementDetail(type=requirement.type, key=requirement.key)]
    if isinstance(requirement, CustomRequirement):
        return [RequirementDetail(type=requirement.type, description=requirement.description or None)]
    if isinstance(requirement, (AndRequirement, OrRequirement)):
        details: list[RequirementDetail] = []
        for child in requirement.requirements:
            details.extend(extract_requirement_details(child))
        return details

    raise TypeError(f"Unknown requirement kind: {type(requirement).__name__}")
