"""
Typed event bus.

Event types are Enum members, so publishers and listeners share one
vocabulary without string keys:

    event_bus.subscribe(ProgressionEvent.SKILL_PURCHASED, on_purchase)
    event_bus.publish(ProgressionEvent.SKILL_PURCHASED, skill_id="root", level=1)

Events published from inside a handler are queued and delivered after the
current dispatch finishes.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Union
from weakref import WeakMethod, ref


logger = logging.getLogger(__name__)


class ProgressionEvent(Enum):
    """Skill progression changes."""
    SKILL_PURCHASED = auto()
    PURCHASE_REJECTED = auto()
    SESSION_RESET = auto()
    PROGRESS_RESET = auto()
    PROGRESS_RESTORED = auto()
    AUTHOR_MODE_CHANGED = auto()


class ViewportEvent(Enum):
    """Pan/zoom interaction."""
    PANNED = auto()
    ZOOMED = auto()
    DRAG_STARTED = auto()
    DRAG_ENDED = auto()


class CueKind(Enum):
    """One-shot feedback (sound, animation) requested by the skill tree."""
    PURCHASE_SUCCEEDED = "cue.purchase_succeeded"
    PURCHASE_REJECTED = "cue.purchase_rejected"


@dataclass
class Event:
    """
    A published event.

    Attributes:
        type: Enum member identifying the event
        data: Keyword payload given to publish()
        consumed: Set by a handler to stop lower-priority handlers
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]
HandlerRef = Union[EventHandler, ref, WeakMethod]


@dataclass(eq=False)
class Subscription:
    """One handler registered for one event type."""
    priority: int
    target: HandlerRef
    one_shot: bool = False

    def resolve(self) -> EventHandler | None:
        """The live handler, or None once a weakly held one was collected."""
        if isinstance(self.target, (ref, WeakMethod)):
            return self.target()
        return self.target


class EventBus:
    """
    Publish/subscribe hub.

    Handlers run highest priority first (ties in subscription order). By
    default handlers are held weakly, so a listener object going away
    unsubscribes it. A handler that raises is logged and skipped; the rest
    still run.
    """

    def __init__(self):
        self._subscriptions: dict[Enum, list[Subscription]] = {}
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
        Register a handler.

        Args:
            event_type: Event to listen for
            handler: Callable taking the Event
            priority: Higher runs first
            one_shot: Drop the handler after its first call
            weak: Hold the handler by weak reference
        """
        if weak:
            target: HandlerRef = WeakMethod(handler) if hasattr(handler, '__self__') else ref(handler)
        else:
            target = handler

        subscriptions = self._subscriptions.setdefault(event_type, [])
        position = next(
            (i for i, sub in enumerate(subscriptions) if priority > sub.priority),
            len(subscriptions),
        )
        subscriptions.insert(position, Subscription(priority, target, one_shot))

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        subscriptions = self._subscriptions.get(event_type)
        if subscriptions is None:
            return
        self._subscriptions[event_type] = [sub for sub in subscriptions if sub.resolve() != handler]

    def has_subscribers(self, event_type: Enum) -> bool:
        return bool(self._subscriptions.get(event_type))

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Returns:
            The Event (check .consumed to see whether a handler took it)
        """
        event = Event(type=event_type, data=data)

        if self._dispatching:
            self._pending.append(event)
            return event

        self._deliver(event)
        while self._pending:
            self._deliver(self._pending.popleft())
        return event

    def clear(self, event_type: Enum | None = None) -> None:
        """Drop the handlers of one event type, or of all types."""
        if event_type is None:
            self._subscriptions.clear()
        else:
            self._subscriptions.pop(event_type, None)

    def _deliver(self, event: Event) -> None:
        subscriptions = self._subscriptions.get(event.type)
        if not subscriptions:
            return

        finished: list[Subscription] = []
        self._dispatching = True
        try:
            for sub in list(subscriptions):
                handler = sub.resolve()
                if handler is None:
                    finished.append(sub)
                    continue

                try:
                    handler(event)
                except Exception:
                    logger.exception(f"Handler for {event.type} failed")

                if sub.one_shot:
                    finished.append(sub)
                if event.consumed:
                    break
        finally:
            self._dispatching = False

        if finished:
            current = self._subscriptions.get(event.type, [])
            self._subscriptions[event.type] = [sub for sub in current if sub not in finished]
