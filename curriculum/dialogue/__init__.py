"""
Dialogue module - trees, conditions, actions and the runtime session.
"""

from curriculum.dialogue.conditions import (
    DialogueCondition,
    evaluate_condition,
    task_completed,
    task_active,
    state_is,
    interactable_state_is,
    requirement_met,
    all_conditions,
    any_condition,
    check,
)
from curriculum.dialogue.actions import (
    DialogueAction,
    AcceptTask,
    CompleteTask,
    SetState,
    SetInteractableState,
    OpenTaskSubmission,
    CallHandler,
    FunctionAction,
    accept_task,
    complete_task,
    set_state,
    set_interactable_state,
    open_task_submission,
    call_handler,
    call_function,
)
from curriculum.dialogue.tree import (
    DialogueChoice,
    DialogueNode,
    DialogueEdge,
    DialogueTree,
    EntryCondition,
    EntryResolver,
    Greeting,
)
from curriculum.dialogue.navigation import resolve_entry, available_choices, available_edges
from curriculum.dialogue.root import generate_root_node, synthesize_root_edges, format_task_choice
from curriculum.dialogue.resolver import DialogueResolver, ResolvedDialogue, default_task_dialogue
from curriculum.dialogue.session import DialogueSession

__all__ = [
    # Conditions
    "DialogueCondition",
    "evaluate_condition",
    "task_completed",
    "task_active",
    "state_is",
    "interactable_state_is",
    "requirement_met",
    "all_conditions",
    "any_condition",
    "check",
    # Actions
    "DialogueAction",
    "AcceptTask",
    "CompleteTask",
    "SetState",
    "SetInteractableState",
    "OpenTaskSubmission",
    "CallHandler",
    "FunctionAction",
    "accept_task",
    "complete_task",
    "set_state",
    "set_interactable_state",
    "open_task_submission",
    "call_handler",
    "call_function",
    # Tree
    "DialogueChoice",
    "DialogueNode",
    "DialogueEdge",
    "DialogueTree",
    "EntryCondition",
    "EntryResolver",
    "Greeting",
    # Runtime
    "resolve_entry",
    "available_choices",
    "available_edges",
    "generate_root_node",
    "synthesize_root_edges",
    "format_task_choice",
    "DialogueResolver",
    "ResolvedDialogue",
    "default_task_dialogue",
    "DialogueSession",
]
