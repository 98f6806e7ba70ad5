"""
Dialogue resolver - decides which node an NPC shows right now.

Resolution order:
1. An unseen greeting with content (NPC greeting, then module welcome)
2. The generated root menu, when the NPC has active tasks
3. The authored entry of the NPC's dialogue tree

Resolving never mutates progress. The session marks greetings seen and
runs choice actions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from progression.core.config import EngineConfig
from progression.core.errors import ErrorHandler, NodeNotFoundError, report
from curriculum.dialogue.actions import OpenTaskSubmission
from curriculum.dialogue.navigation import resolve_entry
from curriculum.dialogue.root import generate_root_node, synthesize_root_edges
from curriculum.dialogue.tree import DialogueChoice, DialogueEdge, DialogueNode, Greeting
from curriculum.tasks.availability import TaskAvailabilityService
from curriculum.tasks.task import Task

if TYPE_CHECKING:
    from curriculum.modules.context import ModuleContext
    from curriculum.modules.definition import NPC, ModuleDefinition

logger = logging.getLogger(__name__)

DEFAULT_READY_LINE = "Are you ready to submit your task?"
DEFAULT_REVIEW_LINE = "Take your time if you need to review it."


@dataclass(frozen=True)
class ResolvedDialogue:
    """
    A node ready for display plus the edges leaving it.

    Attributes:
        node: The node to show
        edges: Outgoing edges, one per choice key
        greeting: The greeting being shown, if this is a greeting node
    """
    node: DialogueNode
    edges: tuple[DialogueEdge, ...] = ()
    greeting: Optional[Greeting] = None

    def edge(self, choice_key: str) -> Optional[DialogueEdge]:
        for edge in self.edges:
            if edge.choice_key == choice_key:
                return edge
        return None


class DialogueResolver:
    """Computes the current dialogue node for an NPC."""

    def __init__(
        self,
        availability: TaskAvailabilityService,
        config: Optional[EngineConfig] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.availability = availability
        self.config = config or EngineConfig()
        self.error_handler = error_handler

    def pending_greeting(
        self,
        npc: NPC,
        module: ModuleDefinition,
        context: ModuleContext,
    ) -> Optional[Greeting]:
        """The first unseen greeting with content, if any."""
        for greeting in (npc.greeting, module.config.welcome):
            if greeting is None or not greeting.has_content:
                continue
            if not context.progress.has_seen_greeting(context.module_id, greeting.id):
                return greeting
        return None

    async def resolve(
        self,
        npc: NPC,
        module: ModuleDefinition,
        context: ModuleContext,
    ) -> Optional[ResolvedDialogue]:
        """Resolve the node to show plus its outgoing edges."""
        greeting = self.pending_greeting(npc, module, context)
        if greeting is not None:
            return ResolvedDialogue(node=greeting.as_node(), greeting=greeting)

        if npc.tasks:
            classification = await self.availability.classify(npc.tasks, context)
            root = generate_root_node(npc, classification.active, self.config)
            if root is not None:
                logger.debug("Root menu for %s with %d active task(s)", npc.id, len(classification.active))
                edges = await synthesize_root_edges(root, npc, classification.active, context)
                return ResolvedDialogue(node=root, edges=tuple(edges))

        if npc.dialogue is None:
            return None

        node = await resolve_entry(npc.dialogue, context)
        if node is None:
            return None
        return self.enter_node(npc, node)

    async def resolve_current_node(
        self,
        npc: NPC,
        module: ModuleDefinition,
        context: ModuleContext,
    ) -> Optional[DialogueNode]:
        resolved = await self.resolve(npc, module, context)
        return resolved.node if resolved else None

    def enter_node(self, npc: NPC, node: DialogueNode) -> ResolvedDialogue:
        tree = npc.dialogue
        edges = tuple(e for e in tree.edges() if e.from_node == node.id) if tree else ()
        return ResolvedDialogue(node=node, edges=edges)

    def enter(self, npc: NPC, node_id: str) -> Optional[ResolvedDialogue]:
        """
        Resolve an authored node by id.

        A missing node is reported as NodeNotFoundError and yields None.
        """
        node = npc.dialogue.get_node(node_id) if npc.dialogue else None
        if node is None:
            report(NodeNotFoundError(node_id, dialogue_id=npc.id), self.error_handler)
            return None
        return self.enter_node(npc, node)

    def task_ready_node(self, npc: NPC, task: Task) -> ResolvedDialogue:
        """The authored task-ready node, or a generated default."""
        authored = npc.dialogue.node_for_task(task.id) if npc.dialogue else None
        if authored is not None:
            return self.enter_node(npc, authored)
        return default_task_dialogue(npc, task)


def default_task_dialogue(npc: NPC, task: Task) -> ResolvedDialogue:
    """
    A generic "ready to submit?" node built from the task's ready lines.
    """
    lines = task.dialogues.ready
    if not lines:
        reminder = f"Remember: {task.description}" if task.description else DEFAULT_REVIEW_LINE
        lines = (DEFAULT_READY_LINE, reminder)

    submit = OpenTaskSubmission(task.id)
    node = DialogueNode(
        id=f"{npc.id}_task_ready_{task.id}",
        lines=lines,
        task_id=task.id,
        choices={
            "yes": DialogueChoice(text="Yes, I'm ready to submit", actions=(submit,)),
            "not_yet": DialogueChoice(text="Not yet"),
        },
    )
    edges = (
        DialogueEdge(from_node=node.id, next=None, choice_key="yes", actions=(submit,)),
        DialogueEdge(from_node=node.id, next=None, choice_key="not_yet"),
    )
    return ResolvedDialogue(node=node, edges=edges)
