"""Input handling module."""

from engine.input.pointer import PointerHandler, PointerState, PointerTarget, InputEvent

__all__ = [
    "PointerHandler",
    "PointerState",
    "PointerTarget",
    "InputEvent",
]
