"""
Skill Tree Engine

Generic building blocks for a pannable, zoomable node page: a typed event
bus, a pan/zoom viewport, pygame pointer routing and schema-validated data
loading.

Quick Start:
    from engine import EventBus, Viewport

    event_bus = EventBus()
    viewport = Viewport(min_scale=0.3, max_scale=3.0, event_bus=event_bus)
    viewport.zoom_at(640, 360, 1.1)
"""

__version__ = "0.1.0"
__author__ = "Developer"

# Re-export core components for convenience
from engine.core import (
    EventBus,
    Event,
    ProgressionEvent,
    ViewportEvent,
    CueKind,
)

from engine.graphics import Viewport, ViewportState
from engine.input import PointerHandler
from engine.resources import Database

__all__ = [
    # Events
    "EventBus",
    "Event",
    "ProgressionEvent",
    "ViewportEvent",
    "CueKind",
    # Graphics
    "Viewport",
    "ViewportState",
    # Input
    "PointerHandler",
    # Resources
    "Database",
]
