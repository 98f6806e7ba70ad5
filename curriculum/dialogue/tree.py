"""
Dialogue graph - nodes, choices, edges and entry resolution.

Nodes are immutable content. Choices point at other nodes by id (None
closes the dialogue). Edges are derived from choices so generated menus
can be spliced into the graph as ordinary edge records.

Usage:
    greeting = DialogueNode(
        id="hello",
        lines=("Hi there!",),
        choices={"bye": DialogueChoice(text="Bye")},
    )
    tree = DialogueTree.with_entry(
        nodes=(greeting, returning),
        default=greeting,
        conditions=[(state_is("met_guide"), returning)],
    )
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from pydantic import Field, field_validator, model_validator

from progression.core.errors import InvalidStructureError
from progression.core.model import ContentModel
from curriculum.dialogue.actions import DialogueAction, as_action
from curriculum.dialogue.conditions import DialogueCondition


def _node_ref(value: Any) -> Any:
    """Allow nodes to be referenced by object as well as by id."""
    if isinstance(value, DialogueNode):
        return value.id
    return value


class DialogueChoice(ContentModel):
    """
    A player choice.

    Attributes:
        text: Label shown to the player
        next: Target node id, None closes the dialogue
        actions: Side effects run in order when the choice is taken
        condition: Choice is hidden unless this holds
    """
    text: str
    next: Optional[str] = None
    actions: tuple[DialogueAction, ...] = ()
    condition: Optional[DialogueCondition] = None

    @field_validator("next", mode="before")
    @classmethod
    def _resolve_next(cls, value: Any) -> Any:
        return _node_ref(value)

    @field_validator("actions", mode="before")
    @classmethod
    def _wrap_actions(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return tuple(as_action(a) for a in value)
        return value


class DialogueNode(ContentModel):
    """
    A dialogue node.

    ``task_id`` marks a task-ready checkpoint: the node the root menu jumps
    to for that task. ``next`` auto-advances nodes without choices.
    """
    id: str
    lines: tuple[str, ...] = ()
    task_id: Optional[str] = None
    choices: dict[str, DialogueChoice] = Field(default_factory=dict)
    next: Optional[str] = None

    @field_validator("next", mode="before")
    @classmethod
    def _resolve_next(cls, value: Any) -> Any:
        return _node_ref(value)

    @property
    def has_content(self) -> bool:
        """True when at least one line is not blank."""
        return any(line.strip() for line in self.lines)


class Greeting(ContentModel):
    """One-shot greeting shown before any other dialogue, then marked seen."""
    id: str
    speaker: str = ""
    lines: tuple[str, ...] = ()

    @property
    def has_content(self) -> bool:
        return any(line.strip() for line in self.lines)

    def as_node(self) -> DialogueNode:
        return DialogueNode(id=self.id, lines=self.lines)


@dataclass(frozen=True)
class DialogueEdge:
    """A connection from one node to another (or to None) via a choice key."""
    from_node: str
    next: Optional[str]
    choice_key: str
    actions: tuple[DialogueAction, ...] = ()
    condition: Optional[DialogueCondition] = None


class EntryCondition(ContentModel):
    """Conditional entry point."""
    condition: DialogueCondition
    node: str

    @field_validator("node", mode="before")
    @classmethod
    def _resolve_node(cls, value: Any) -> Any:
        return _node_ref(value)


class EntryResolver(ContentModel):
    """
    Ordered (condition, node) pairs, first match wins, plus a default.

    The default is mandatory; a tree whose resolver lacks one is rejected.
    """
    conditions: tuple[EntryCondition, ...] = ()
    default: Optional[str] = None

    @field_validator("default", mode="before")
    @classmethod
    def _resolve_default(cls, value: Any) -> Any:
        return _node_ref(value)


class DialogueTree(ContentModel):
    """
    Nodes plus an entry: a fixed node id, an EntryResolver, or None
    (the first declared node is the entry).
    """
    nodes: tuple[DialogueNode, ...] = ()
    entry: Union[str, EntryResolver, None] = None

    @field_validator("entry", mode="before")
    @classmethod
    def _resolve_entry(cls, value: Any) -> Any:
        return _node_ref(value)

    @model_validator(mode="after")
    def _check_structure(self) -> DialogueTree:
        ids = [node.id for node in self.nodes]
        if len(set(ids)) != len(ids):
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            raise InvalidStructureError(f"Duplicate dialogue node ids: {duplicates}")

        known = set(ids)

        def require(node_id: Optional[str], where: str) -> None:
            if node_id is not None and node_id not in known:
                raise InvalidStructureError(
                    f"{where} references unknown node '{node_id}'",
                    context={"node_id": node_id},
                )

        if isinstance(self.entry, EntryResolver):
            if self.entry.default is None:
                raise InvalidStructureError("Dialogue entry resolver has no default node")
            require(self.entry.default, "Entry default")
            for entry in self.entry.conditions:
                require(entry.node, "Entry condition")
        else:
            require(self.entry, "Entry")

        for node in self.nodes:
            require(node.next, f"Node '{node.id}'")
            for key, choice in node.choices.items():
                require(choice.next, f"Choice '{node.id}.{key}'")
        return self

    @classmethod
    def with_entry(
        cls,
        nodes: Sequence[DialogueNode],
        default: Union[DialogueNode, str],
        conditions: Sequence[tuple[DialogueCondition, Union[DialogueNode, str]]] = (),
    ) -> DialogueTree:
        """Build a tree with a conditional entry resolver."""
        resolver = EntryResolver(
            conditions=tuple(EntryCondition(condition=c, node=n) for c, n in conditions),
            default=default,
        )
        return cls(nodes=tuple(nodes), entry=resolver)

    def get_node(self, node_id: Optional[str]) -> Optional[DialogueNode]:
        if node_id is None:
            return None
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    @property
    def first_node(self) -> Optional[DialogueNode]:
        return self.nodes[0] if self.nodes else None

    @property
    def has_content(self) -> bool:
        return any(node.has_content for node in self.nodes)

    def node_for_task(self, task_id: str) -> Optional[DialogueNode]:
        """The task-ready node for a task, if one is authored."""
        for node in self.nodes:
            if node.task_id == task_id:
                return node
        return None

    def edges(self) -> list[DialogueEdge]:
        """Authored edges, one per choice, in declaration order."""
        return [
            DialogueEdge(
                from_node=node.id,
                next=choice.next,
                choice_key=key,
                actions=choice.actions,
                condition=choice.condition,
            )
            for node in self.nodes
            for key, choice in node.choices.items()
        ]
