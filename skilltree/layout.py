"""
Skill tree layout - authored grid cells mapped to world positions.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence


logger = logging.getLogger(__name__)


class GridLayout:
    """
    Places skills on a square grid.

    A cell (col, row) maps to world (origin_x + col * grid_size,
    origin_y + row * grid_size). Skills without an authored cell are
    placed at the grid origin and reported once.
    """

    def __init__(
        self,
        cells: Mapping[str, Sequence[float]],
        grid_size: float = 150,
        origin_x: float = 500,
        origin_y: float = 500,
    ):
        self.grid_size = grid_size
        self.origin_x = origin_x
        self.origin_y = origin_y
        self._cells = {skill_id: (float(cell[0]), float(cell[1])) for skill_id, cell in cells.items()}
        self._positions: dict[str, tuple[float, float]] = {}
        self._missing: set[str] = set()

    def cell_of(self, skill_id: str) -> tuple[float, float] | None:
        return self._cells.get(skill_id)

    def position_of(self, skill_id: str) -> tuple[float, float]:
        """World centre of a skill node."""
        position = self._positions.get(skill_id)
        if position is not None:
            return position

        cell = self._cells.get(skill_id)
        if cell is None:
            if skill_id not in self._missing:
                logger.warning(f"No position defined for {skill_id}, using grid origin")
                self._missing.add(skill_id)
            position = (self.origin_x, self.origin_y)
        else:
            col, row = cell
            position = (self.origin_x + col * self.grid_size, self.origin_y + row * self.grid_size)

        self._positions[skill_id] = position
        return position

    def missing(self, skill_ids: Iterable[str]) -> list[str]:
        """Skills from the given ids that have no authored cell."""
        return [skill_id for skill_id in skill_ids if skill_id not in self._cells]
