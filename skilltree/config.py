"""
Skill tree configuration.
"""

from __future__ import annotations

import logging
from typing import Any


logger = logging.getLogger(__name__)


class SkillTreeConfig:
    """Tunables for the skill tree page, viewport and persistence."""

    def __init__(
        self,
        root_id: str = "root",
        # Viewport
        default_scale: float = 0.5,
        min_scale: float = 0.3,
        max_scale: float = 3.0,
        wheel_zoom_in: float = 1.1,
        wheel_zoom_out: float = 0.9,
        button_zoom_in: float = 1.2,
        button_zoom_out: float = 0.8,
        canvas_width: float = 1200,
        canvas_height: float = 640,
        click_tolerance: float = 4.0,
        # Layout
        grid_size: float = 150,
        grid_origin_x: float = 500,
        grid_origin_y: float = 500,
        # Nodes
        node_radius: float = 50,
        hover_scale: float = 1.15,
        pulse_amplitude: float = 0.05,
        pulse_speed: float = 3.0,
        click_animation: float = 0.3,
        click_bounce: float = 0.3,
        # Persistence
        save_debounce: float = 0.5,
    ):
        self.root_id = root_id
        self.default_scale = default_scale
        self.min_scale = min_scale
        self.max_scale = max_scale
        self.wheel_zoom_in = wheel_zoom_in
        self.wheel_zoom_out = wheel_zoom_out
        self.button_zoom_in = button_zoom_in
        self.button_zoom_out = button_zoom_out
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.click_tolerance = click_tolerance
        self.grid_size = grid_size
        self.grid_origin_x = grid_origin_x
        self.grid_origin_y = grid_origin_y
        self.node_radius = node_radius
        self.hover_scale = hover_scale
        self.pulse_amplitude = pulse_amplitude
        self.pulse_speed = pulse_speed
        self.click_animation = click_animation
        self.click_bounce = click_bounce
        self.save_debounce = save_debounce

    @classmethod
    def from_dict(cls, settings: dict[str, Any]) -> SkillTreeConfig:
        """Build a config from a settings mapping, ignoring unknown keys."""
        config = cls()
        for key, value in settings.items():
            if not hasattr(config, key):
                logger.warning(f"Unknown skill tree setting '{key}' ignored")
                continue
            setattr(config, key, value)
        return config

    def to_dict(self) -> dict[str, Any]:
        return dict(vars(self))
