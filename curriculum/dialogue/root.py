"""
Root dialogue - the generated menu spliced ahead of an NPC's authored tree.

When an NPC has active tasks, talking to it opens a menu:

    talk        enter the authored tree (only if it has any text)
    task_<id>   jump to the task-ready node for each active task
    goodbye     close

The menu node carries labels only. Its targets are produced by
``synthesize_root_edges`` as ordinary DialogueEdge records.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

from progression.core.config import EngineConfig
from curriculum.dialogue.navigation import resolve_entry
from curriculum.dialogue.tree import DialogueChoice, DialogueEdge, DialogueNode
from curriculum.tasks.task import Task

if TYPE_CHECKING:
    from curriculum.modules.context import ModuleContext
    from curriculum.modules.definition import NPC

TALK_KEY = "talk"
GOODBYE_KEY = "goodbye"
TASK_KEY_PREFIX = "task_"


def root_node_id(npc: NPC) -> str:
    return f"{npc.id}_root"


def format_task_choice(task: Task, status: str, max_length: int = 50) -> str:
    """
    Label for a task choice, truncated with an ellipsis to ``max_length``.

    e.g. "[Task] - Gather Wood (In Progress)"
    """
    text = f"[Task] - {task.name} ({status})"
    if len(text) > max_length:
        return text[:max_length - 3] + "..."
    return text


def generate_root_node(
    npc: NPC,
    active_tasks: Sequence[Task],
    config: Optional[EngineConfig] = None,
) -> Optional[DialogueNode]:
    """Build the root menu, or None when there is nothing active to surface."""
    if not active_tasks:
        return None

    config = config or EngineConfig()
    choices: dict[str, DialogueChoice] = {}

    if npc.dialogue is not None and npc.dialogue.has_content:
        choices[TALK_KEY] = DialogueChoice(text=config.talk_text_template.format(name=npc.name))

    for task in active_tasks:
        choices[f"{TASK_KEY_PREFIX}{task.id}"] = DialogueChoice(
            text=format_task_choice(task, config.active_status_label, config.choice_label_max_length),
        )

    choices[GOODBYE_KEY] = DialogueChoice(text=config.goodbye_text)

    return DialogueNode(id=root_node_id(npc), lines=(config.root_greeting,), choices=choices)


async def synthesize_root_edges(
    root: DialogueNode,
    npc: NPC,
    active_tasks: Sequence[Task],
    context: ModuleContext,
) -> list[DialogueEdge]:
    """
    Targets for the root menu's choices.

    ``talk`` follows the authored entry, skipping ``task-active`` entry
    conditions. ``task_<id>`` targets the node tagged with that task; with
    no such node no edge is emitted and the choice does nothing.
    """
    edges: list[DialogueEdge] = []
    tree = npc.dialogue

    if TALK_KEY in root.choices and tree is not None:
        target = await resolve_entry(tree, context, skip_task_active=True)
        edges.append(DialogueEdge(
            from_node=root.id,
            next=target.id if target else None,
            choice_key=TALK_KEY,
        ))

    for task in active_tasks:
        key = f"{TASK_KEY_PREFIX}{task.id}"
        if key not in root.choices or tree is None:
            continue
        target = tree.node_for_task(task.id)
        if target is not None:
            edges.append(DialogueEdge(from_node=root.id, next=target.id, choice_key=key))

    edges.append(DialogueEdge(from_node=root.id, next=None, choice_key=GOODBYE_KEY))
    return edges
