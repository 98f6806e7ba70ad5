"""
Dialogue session - runs a conversation with one NPC at a time.

Handles:
- Resolving the node to show (greeting, root menu or authored entry)
- Filtering choices by their conditions
- Running choice actions in order, awaiting async ones
- Following edges, node-level ``next`` and closing
- Remembering the last node per NPC for resuming

Progress may change while actions run, so the session re-resolves
targets after every choice instead of reusing earlier results.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from progression.core.errors import DialogueNotFoundError, ErrorHandler, report
from progression.core.events import DialogueEvent, EventBus
from curriculum.dialogue.actions import run_actions
from curriculum.dialogue.navigation import available_edges
from curriculum.dialogue.resolver import DialogueResolver, ResolvedDialogue
from curriculum.dialogue.tree import DialogueChoice, DialogueNode

if TYPE_CHECKING:
    from curriculum.modules.context import ModuleContext
    from curriculum.modules.definition import NPC
    from curriculum.modules.progression import ModuleProgressionService

logger = logging.getLogger(__name__)

CONVERSATIONS_KEY = "conversations"


class DialogueSession:
    """
    Drives dialogue for a single module.

    Usage:
        session = DialogueSession(context, resolver)
        node = await session.start("guide")
        node = await session.choose("accept")
    """

    def __init__(
        self,
        context: ModuleContext,
        resolver: DialogueResolver,
        modules: Optional[ModuleProgressionService] = None,
        events: Optional[EventBus] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.context = context
        self.resolver = resolver
        self.modules = modules
        self.events = events if events is not None else context.events
        self.error_handler = error_handler

        self._npc: Optional[NPC] = None
        self._current: Optional[ResolvedDialogue] = None

    @property
    def is_active(self) -> bool:
        return self._current is not None

    @property
    def current_node(self) -> Optional[DialogueNode]:
        return self._current.node if self._current else None

    @property
    def npc(self) -> Optional[NPC]:
        return self._npc

    def _publish(self, event_type: DialogueEvent, **data: Any) -> None:
        if self.events is not None:
            self.events.publish(event_type, module_id=self.context.module_id, **data)

    async def start(self, npc_id: str) -> Optional[DialogueNode]:
        """
        Start talking to an NPC.

        Returns:
            The node to show, or None when the NPC has nothing to say
        """
        npc = self.context.module.get_npc(npc_id)
        if npc is None:
            report(DialogueNotFoundError(npc_id, self.context.module_id), self.error_handler)
            return None

        self._npc = npc
        self.context.interactable_id = npc.id
        resolved = await self.resolver.resolve(npc, self.context.module, self.context)
        if resolved is None:
            self._npc = None
            return None

        self._publish(DialogueEvent.DIALOGUE_STARTED, npc_id=npc.id)
        self._enter(resolved)
        return resolved.node

    def show_task_ready(self, task_id: str) -> Optional[DialogueNode]:
        """
        Jump to the task-ready node of one of the current NPC's tasks,
        generating a default one when none is authored.
        """
        if self._npc is None:
            return None
        task = next((t for t in self._npc.tasks if t.id == task_id), None)
        if task is None:
            return None
        resolved = self.resolver.task_ready_node(self._npc, task)
        self._enter(resolved)
        return resolved.node

    async def available_choices(self) -> dict[str, DialogueChoice]:
        """Visible choices of the current node, in declaration order."""
        if self._current is None:
            return {}
        node = self._current.node
        edges = await available_edges(self._current.edges, self.context)
        visible = {edge.choice_key for edge in edges}
        # Choices without an edge (e.g. a task with no ready node) stay visible as no-ops
        edge_keys = {edge.choice_key for edge in self._current.edges}
        return {
            key: choice for key, choice in node.choices.items()
            if key in visible or key not in edge_keys
        }

    async def choose(self, choice_key: str) -> Optional[DialogueNode]:
        """
        Take a choice: run its actions, then move to its target.

        Returns:
            The next node, or None when the dialogue closed

        Raises:
            KeyError: the choice is not offered by the current node
        """
        if self._current is None or self._npc is None:
            raise KeyError(choice_key)

        choices = await self.available_choices()
        if choice_key not in choices:
            raise KeyError(choice_key)

        edge = self._current.edge(choice_key)
        self._publish(DialogueEvent.CHOICE_TAKEN, npc_id=self._npc.id, choice_key=choice_key)

        if edge is None:
            # Menu entry without a target
            return self._current.node

        await run_actions(edge.actions, self.context)
        if self.modules is not None:
            await self.modules.evaluate_module_completion(self.context.module_id)

        if edge.next is None:
            self.end()
            return None
        return self._go_to(edge.next)

    async def advance(self) -> Optional[DialogueNode]:
        """Follow the current node's ``next``, closing when there is none."""
        if self._current is None:
            return None
        target = self._current.node.next
        if target is None:
            self.end()
            return None
        return self._go_to(target)

    def end(self) -> None:
        if self._current is None:
            return
        npc_id = self._npc.id if self._npc else None
        self._current = None
        self._npc = None
        self.context.interactable_id = None
        self._publish(DialogueEvent.DIALOGUE_ENDED, npc_id=npc_id)

    def last_node_id(self, npc_id: str) -> Optional[str]:
        """Last node shown for an NPC, from the module's conversation state."""
        conversations = self.context.get_state(CONVERSATIONS_KEY) or {}
        return conversations.get(npc_id, {}).get("last_node")

    def _go_to(self, node_id: str) -> Optional[DialogueNode]:
        resolved = self.resolver.enter(self._npc, node_id)
        if resolved is None:
            self.end()
            return None
        self._enter(resolved)
        return resolved.node

    def _enter(self, resolved: ResolvedDialogue) -> None:
        self._current = resolved
        if resolved.greeting is not None:
            self.context.progress.mark_greeting_seen(self.context.module_id, resolved.greeting.id)
        self._remember(resolved.node.id)
        logger.debug("Entered node %s", resolved.node.id)
        self._publish(DialogueEvent.NODE_ENTERED, npc_id=self._npc.id, node_id=resolved.node.id)

    def _remember(self, node_id: str) -> None:
        conversations = dict(self.context.get_state(CONVERSATIONS_KEY) or {})
        entry = dict(conversations.get(self._npc.id, {}))
        entry["last_node"] = node_id
        conversations[self._npc.id] = entry
        self.context.set_state(CONVERSATIONS_KEY, conversations)
