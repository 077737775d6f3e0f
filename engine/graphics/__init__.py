"""
Graphics module.

Exports:
- Viewport, ViewportState: Pan/zoom screen <-> world transform
"""

from engine.graphics.viewport import Viewport, ViewportState

__all__ = [
    "Viewport",
    "ViewportState",
]
