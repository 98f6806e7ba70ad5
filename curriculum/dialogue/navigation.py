"""
Navigation over authored dialogue trees: entry resolution and choice filtering.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Optional, Sequence

from curriculum.dialogue.conditions import TaskActiveCondition, evaluate_condition
from curriculum.dialogue.tree import DialogueChoice, DialogueEdge, DialogueNode, DialogueTree, EntryResolver

if TYPE_CHECKING:
    from curriculum.modules.context import ModuleContext


async def resolve_entry(
    tree: DialogueTree,
    context: ModuleContext,
    skip_task_active: bool = False,
) -> Optional[DialogueNode]:
    """
    Resolve the entry node of a tree.

    Conditions are tried in declaration order and the first that holds
    wins; otherwise the default is used. Trees without a resolver enter at
    a fixed node, or at the first declared node.

    Args:
        skip_task_active: Ignore top-level ``task-active`` entry conditions
    """
    entry = tree.entry
    if entry is None:
        return tree.first_node
    if not isinstance(entry, EntryResolver):
        return tree.get_node(entry)

    for candidate in entry.conditions:
        if skip_task_active and isinstance(candidate.condition, TaskActiveCondition):
            continue
        if await evaluate_condition(candidate.condition, context):
            return tree.get_node(candidate.node)
    return tree.get_node(entry.default)


async def available_choices(node: DialogueNode, context: ModuleContext) -> dict[str, DialogueChoice]:
    """Choices whose condition holds, in declaration order."""
    keys = list(node.choices)
    visible = await asyncio.gather(
        *(evaluate_condition(node.choices[key].condition, context) for key in keys)
    )
    return {key: node.choices[key] for key, ok in zip(keys, visible) if ok}


async def available_edges(edges: Sequence[DialogueEdge], context: ModuleContext) -> list[DialogueEdge]:
    """Edges whose condition holds, in order."""
    visible = await asyncio.gather(*(evaluate_condition(edge.condition, context) for edge in edges))
    return [edge for edge, ok in zip(edges, visible) if ok]
