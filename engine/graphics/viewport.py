"""
Pan/zoom viewport for a 2D world plane.

Handles converting between world and screen coordinates:

    screen = world * scale + offset
    world = (screen - offset) / scale
"""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field

from engine.core.events import EventBus, ViewportEvent


class ViewportState(BaseModel):
    """Persistable viewport transform."""

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True, extra='ignore')

    offset_x: float = Field(default=0.0, alias="offsetX")
    offset_y: float = Field(default=0.0, alias="offsetY")
    scale: float = Field(default=1.0, gt=0)


class Viewport:
    """
    Affine screen <-> world transform with drag panning and anchored zoom.

    Two interaction states exist: idle and dragging. Zooming keeps the
    world point under the pointer fixed on screen.

    Usage:
        viewport = Viewport(min_scale=0.3, max_scale=3.0)
        viewport.begin_drag(mx, my)
        viewport.drag_to(mx + 20, my)
        viewport.end_drag()

        viewport.zoom_at(mx, my, 1.1)
        world_x, world_y = viewport.screen_to_world(mx, my)
    """

    def __init__(
        self,
        min_scale: float = 0.25,
        max_scale: float = 4.0,
        state: ViewportState | None = None,
        event_bus: EventBus | None = None,
    ):
        if min_scale <= 0 or max_scale < min_scale:
            raise ValueError(f"Invalid scale range [{min_scale}, {max_scale}]")

        self.min_scale = min_scale
        self.max_scale = max_scale
        self.event_bus = event_bus

        self._offset_x = 0.0
        self._offset_y = 0.0
        self._scale = 1.0

        # Drag tracking
        self._dragging = False
        self._drag_anchor_x = 0.0
        self._drag_anchor_y = 0.0
        self._drag_start_x = 0.0
        self._drag_start_y = 0.0
        self._drag_travel = 0.0

        if state is not None:
            self.apply_state(state)

    @property
    def offset_x(self) -> float:
        return self._offset_x

    @property
    def offset_y(self) -> float:
        return self._offset_y

    @property
    def scale(self) -> float:
        return self._scale

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    @property
    def drag_travel(self) -> float:
        """Largest pointer distance from the drag start during the current/last drag."""
        return self._drag_travel

    def clamp_scale(self, scale: float) -> float:
        """Clamp a scale value to the allowed zoom range."""
        return max(self.min_scale, min(scale, self.max_scale))

    # State

    def get_state(self) -> ViewportState:
        """Snapshot of the current transform."""
        return ViewportState(offset_x=self._offset_x, offset_y=self._offset_y, scale=self._scale)

    def apply_state(self, state: ViewportState) -> None:
        """Restore a saved transform (scale is clamped)."""
        self._offset_x = state.offset_x
        self._offset_y = state.offset_y
        self._scale = self.clamp_scale(state.scale)

    def center_on(self, world_x: float, world_y: float, view_width: float, view_height: float,
                  scale: float | None = None) -> None:
        """Place a world point at the centre of a view of the given size."""
        if scale is not None:
            self._scale = self.clamp_scale(scale)
        self._offset_x = view_width / 2 - world_x * self._scale
        self._offset_y = view_height / 2 - world_y * self._scale

    # Panning

    def pan(self, dx: float, dy: float) -> None:
        """Translate the world plane by a screen-space delta."""
        if dx == 0 and dy == 0:
            return
        self._offset_x += dx
        self._offset_y += dy
        self._publish(ViewportEvent.PANNED, dx=dx, dy=dy)

    def begin_drag(self, screen_x: float, screen_y: float) -> None:
        """Enter the dragging state, anchoring the pointer to the current offset."""
        self._dragging = True
        self._drag_anchor_x = screen_x - self._offset_x
        self._drag_anchor_y = screen_y - self._offset_y
        self._drag_start_x = screen_x
        self._drag_start_y = screen_y
        self._drag_travel = 0.0
        self._publish(ViewportEvent.DRAG_STARTED, x=screen_x, y=screen_y)

    def drag_to(self, screen_x: float, screen_y: float) -> bool:
        """
        Move the drag to a new pointer position.

        Returns:
            True if the offset changed (only while dragging)
        """
        if not self._dragging:
            return False

        self._drag_travel = max(
            self._drag_travel,
            math.hypot(screen_x - self._drag_start_x, screen_y - self._drag_start_y),
        )

        new_x = screen_x - self._drag_anchor_x
        new_y = screen_y - self._drag_anchor_y
        if new_x == self._offset_x and new_y == self._offset_y:
            return False

        dx = new_x - self._offset_x
        dy = new_y - self._offset_y
        self._offset_x = new_x
        self._offset_y = new_y
        self._publish(ViewportEvent.PANNED, dx=dx, dy=dy)
        return True

    def end_drag(self) -> bool:
        """
        Leave the dragging state.

        Returns:
            True if a drag was in progress
        """
        if not self._dragging:
            return False
        self._dragging = False
        self._publish(ViewportEvent.DRAG_ENDED, travel=self._drag_travel)
        return True

    # Zoom

    def zoom_at(self, screen_x: float, screen_y: float, factor: float) -> bool:
        """
        Multiply the scale by a factor, keeping the world point under
        (screen_x, screen_y) fixed on screen.

        Returns:
            True if the scale changed
        """
        if factor <= 0:
            return False

        old_scale = self._scale
        new_scale = self.clamp_scale(old_scale * factor)
        if new_scale == old_scale:
            return False

        ratio = new_scale / old_scale
        self._offset_x = screen_x - (screen_x - self._offset_x) * ratio
        self._offset_y = screen_y - (screen_y - self._offset_y) * ratio
        self._scale = new_scale
        self._publish(ViewportEvent.ZOOMED, scale=new_scale, x=screen_x, y=screen_y)
        return True

    # Coordinate conversion

    def screen_to_world(self, screen_x: float, screen_y: float) -> tuple[float, float]:
        """Convert screen coordinates to world coordinates."""
        return (
            (screen_x - self._offset_x) / self._scale,
            (screen_y - self._offset_y) / self._scale,
        )

    def world_to_screen(self, world_x: float, world_y: float) -> tuple[float, float]:
        """Convert world coordinates to screen coordinates."""
        return (
            world_x * self._scale + self._offset_x,
            world_y * self._scale + self._offset_y,
        )

    def _publish(self, event_type: ViewportEvent, **data) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)
