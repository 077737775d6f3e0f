"""
Pointer input translation.

Turns raw pygame mouse events into semantic pointer calls
(down/move/up/leave/wheel) on a target such as a page controller.

Usage:
    pointer = PointerHandler(skill_tree_controller)

    for event in pygame.event.get():
        pointer.process_event(event)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import pygame

from engine.core.events import EventBus


class InputEvent(Enum):
    """Pointer-specific events."""
    POINTER_DOWN = "input.pointer_down"
    POINTER_UP = "input.pointer_up"
    POINTER_WHEEL = "input.pointer_wheel"
    POINTER_LEFT = "input.pointer_left"


class PointerTarget(Protocol):
    """Anything that reacts to pointer gestures."""

    def pointer_down(self, x: float, y: float) -> None: ...

    def pointer_move(self, x: float, y: float) -> None: ...

    def pointer_up(self, x: float, y: float) -> None: ...

    def pointer_leave(self) -> None: ...

    def wheel(self, x: float, y: float, steps: float) -> None: ...


@dataclass
class PointerState:
    """Last known pointer state."""
    x: int = 0
    y: int = 0
    left_down: bool = False
    inside: bool = True


class PointerHandler:
    """
    Routes pygame mouse events to a PointerTarget.

    Only the left button drives gestures. Wheel events carry no position
    in pygame 2, so the last motion position is used as the zoom anchor.
    """

    LEFT_BUTTON = 1

    def __init__(self, target: PointerTarget, event_bus: EventBus | None = None):
        self.target = target
        self.event_bus = event_bus
        self._state = PointerState()

    @property
    def position(self) -> tuple[int, int]:
        return (self._state.x, self._state.y)

    @property
    def is_left_down(self) -> bool:
        return self._state.left_down

    def process_event(self, event: pygame.event.Event) -> bool:
        """
        Handle a single pygame event.

        Returns:
            True if the event was a pointer event and was routed
        """
        if event.type == pygame.MOUSEMOTION:
            self._state.x, self._state.y = event.pos
            self._state.inside = True
            self.target.pointer_move(*event.pos)
            return True

        if event.type == pygame.MOUSEBUTTONDOWN:
            # Legacy wheel buttons (4/5) are covered by MOUSEWHEEL
            if event.button != self.LEFT_BUTTON:
                return False
            self._state.x, self._state.y = event.pos
            self._state.left_down = True
            self.target.pointer_down(*event.pos)
            self._publish(InputEvent.POINTER_DOWN, pos=event.pos)
            return True

        if event.type == pygame.MOUSEBUTTONUP:
            if event.button != self.LEFT_BUTTON:
                return False
            self._state.x, self._state.y = event.pos
            self._state.left_down = False
            self.target.pointer_up(*event.pos)
            self._publish(InputEvent.POINTER_UP, pos=event.pos)
            return True

        if event.type == pygame.MOUSEWHEEL:
            if event.y == 0:
                return False
            self.target.wheel(self._state.x, self._state.y, event.y)
            self._publish(InputEvent.POINTER_WHEEL, steps=event.y, pos=self.position)
            return True

        if event.type == pygame.WINDOWLEAVE:
            self._state.inside = False
            self._state.left_down = False
            self.target.pointer_leave()
            self._publish(InputEvent.POINTER_LEFT)
            return True

        return False

    def process_events(self, events) -> None:
        """Handle a batch of pygame events (e.g. pygame.event.get())."""
        for event in events:
            self.process_event(event)

    def _publish(self, event_type: InputEvent, **data) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)
