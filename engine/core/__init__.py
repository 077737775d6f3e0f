"""
Core engine module.

Exports:
- EventBus, Event: Event system
- ProgressionEvent, ViewportEvent, CueKind: Event types
"""

from engine.core.events import EventBus, Event, ProgressionEvent, ViewportEvent, CueKind

__all__ = [
    "EventBus",
    "Event",
    "ProgressionEvent",
    "ViewportEvent",
    "CueKind",
]
