"""
Typed event bus for progression and dialogue notifications.

Event types are Enum members. Services publish state transitions here and
UI layers subscribe to refresh their views; every service works without a
bus as well.

Usage:
    bus.subscribe(ProgressionEvent.MODULE_UNLOCKED, on_unlocked)
    bus.publish(ProgressionEvent.MODULE_UNLOCKED, module_id="forest")
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Optional, Union
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


class ProgressionEvent(Enum):
    """Module and task lifecycle events."""
    MODULE_UNLOCKED = auto()
    MODULE_COMPLETED = auto()
    MODULE_LOCKED = auto()
    TASK_ACCEPTED = auto()
    TASK_COMPLETED = auto()
    TASK_SUBMISSION_FAILED = auto()


class DialogueEvent(Enum):
    """Dialogue session events."""
    DIALOGUE_STARTED = auto()
    NODE_ENTERED = auto()
    CHOICE_TAKEN = auto()
    DIALOGUE_ENDED = auto()
    TASK_SUBMISSION_REQUESTED = auto()


@dataclass
class Event:
    """
    A published notification.

    Attributes:
        type: ProgressionEvent or DialogueEvent member
        data: Keyword payload given to ``publish`` (module_id, task_id, ...)
        consumed: Set by a handler to stop lower-priority handlers
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    @property
    def module_id(self) -> Optional[str]:
        return self.data.get("module_id")

    def consume(self) -> None:
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]
_HandlerRef = Union[EventHandler, ref, WeakMethod]


@dataclass(eq=False)
class _Subscription:
    priority: int
    target: _HandlerRef
    one_shot: bool = False

    def resolve(self) -> Optional[EventHandler]:
        """The live handler, or None once a weakly held one is collected."""
        if isinstance(self.target, (ref, WeakMethod)):
            return self.target()
        return self.target


class EventBus:
    """
    Publish/subscribe hub.

    Handlers run highest priority first, in subscription order among equal
    priorities. Handlers are held weakly unless ``weak=False``. Events
    published while a dispatch is running are queued and delivered after it.
    A failing handler is logged and the remaining handlers still run.
    """

    def __init__(self):
        self._subscriptions: dict[Enum, list[_Subscription]] = {}
        self._pending: deque[Event] = deque()
        self._dispatching = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> None:
        """
        Register a handler for one event type.

        Args:
            event_type: ProgressionEvent or DialogueEvent member
            handler: Called with the Event
            priority: Higher runs earlier
            one_shot: Drop the handler after its first call
            weak: Hold only a weak reference to the handler
        """
        if not weak:
            target: _HandlerRef = handler
        elif hasattr(handler, "__self__"):
            target = WeakMethod(handler)
        else:
            target = ref(handler)

        subscriptions = self._subscriptions.setdefault(event_type, [])
        position = next(
            (i for i, s in enumerate(subscriptions) if priority > s.priority),
            len(subscriptions),
        )
        subscriptions.insert(position, _Subscription(priority, target, one_shot))

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        subscriptions = self._subscriptions.get(event_type)
        if subscriptions is None:
            return
        self._subscriptions[event_type] = [s for s in subscriptions if s.resolve() != handler]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Returns:
            The Event; check ``consumed`` to see whether a handler claimed it
        """
        event = Event(type=event_type, data=data)
        self._pending.append(event)
        if not self._dispatching:
            self._drain()
        return event

    def clear(self, event_type: Optional[Enum] = None) -> None:
        """Drop the handlers of one event type, or all handlers."""
        if event_type is None:
            self._subscriptions.clear()
        else:
            self._subscriptions.pop(event_type, None)

    def _drain(self) -> None:
        self._dispatching = True
        try:
            while self._pending:
                self._deliver(self._pending.popleft())
        finally:
            self._dispatching = False

    def _deliver(self, event: Event) -> None:
        subscriptions = self._subscriptions.get(event.type)
        if not subscriptions:
            return

        finished: list[_Subscription] = []
        for subscription in list(subscriptions):
            handler = subscription.resolve()
            if handler is None:
                finished.append(subscription)
                continue

            try:
                handler(event)
            except Exception:
                logger.exception("Handler failed for %s", event.type)

            if subscription.one_shot:
                finished.append(subscription)
            if event.consumed:
                break

        if finished:
            self._subscriptions[event.type] = [s for s in subscriptions if s not in finished]
