"""
Unlock module - requirement trees and their evaluation.
"""

from curriculum.unlock.requirements import (
    CustomCheck,
    FunctionCheck,
    UnlockRequirement,
    PasswordRequirement,
    TaskCompleteRequirement,
    ModuleCompleteRequirement,
    StateCheckRequirement,
    CustomRequirement,
    AndRequirement,
    OrRequirement,
    password,
    task_complete,
    module_complete,
    state_check,
    custom,
    all_of,
    any_of,
)
from curriculum.unlock.evaluator import (
    RequirementEvaluator,
    RequirementDetail,
    UnlockContext,
    requires_interaction,
    extract_module_dependencies,
    extract_requirement_types,
    extract_requirement_details,
)

__all__ = [
    "CustomCheck",
    "FunctionCheck",
    "UnlockRequirement",
    "PasswordRequirement",
    "TaskCompleteRequirement",
    "ModuleCompleteRequirement",
    "StateCheckRequirement",
    "CustomRequirement",
    "AndRequirement",
    "OrRequirement",
    "password",
    "task_complete",
    "module_complete",
    "state_check",
    "custom",
    "all_of",
    "any_of",
    "RequirementEvaluator",
    "RequirementDetail",
    "UnlockContext",
    "requires_interaction",
    "extract_module_dependencies",
    "extract_requirement_types",
    "extract_requirement_details",
]
