"""
Connectivity graph - parent -> children unlock edges and node depths.
"""

from __future__ import annotations

import logging
from collections import deque

from skilltree.catalog import SkillCatalog


logger = logging.getLogger(__name__)


class ConnectivityGraph:
    """
    Unlock edges declared by the catalog, rooted at a single skill.

    Children that have no SkillDefinition are dropped (and logged). Depth is
    computed by breadth-first traversal from the root: the first visit wins,
    so a node with several parents takes the depth of whichever parent is
    dequeued first.
    """

    def __init__(self, catalog: SkillCatalog, root_id: str | None = None):
        self.catalog = catalog
        self.root_id = root_id or catalog.root_id

        self._children: dict[str, tuple[str, ...]] = {}
        self._parents: dict[str, list[str]] = {}
        self._depths: dict[str, int] = {}

        self._build_adjacency()
        self._compute_depths()

    def _build_adjacency(self) -> None:
        for skill in self.catalog:
            kept: list[str] = []
            for child_id in skill.children:
                if child_id not in self.catalog:
                    logger.warning(f"Skill '{skill.id}' unlocks unknown skill '{child_id}'")
                    continue
                if child_id in kept:
                    logger.warning(f"Skill '{skill.id}' lists child '{child_id}' twice")
                    continue
                kept.append(child_id)
                self._parents.setdefault(child_id, []).append(skill.id)
            self._children[skill.id] = tuple(kept)

    def _compute_depths(self) -> None:
        if self.root_id not in self.catalog:
            return

        queue: deque[tuple[str, int]] = deque([(self.root_id, 0)])
        while queue:
            skill_id, depth = queue.popleft()
            if skill_id in self._depths:
                continue
            self._depths[skill_id] = depth

            for child_id in self._children.get(skill_id, ()):
                if child_id in self._depths:
                    if child_id == self.root_id or self._depths[child_id] < depth:
                        logger.warning(f"Back edge '{skill_id}' -> '{child_id}' ignored for depth")
                    continue
                queue.append((child_id, depth + 1))

        unreachable = [skill_id for skill_id in self.catalog.ids() if skill_id not in self._depths]
        if unreachable:
            logger.warning(f"{len(unreachable)} skills unreachable from '{self.root_id}': {unreachable}")

    def children_of(self, skill_id: str) -> tuple[str, ...]:
        """Ordered children unlocked by a skill (empty for unknown ids)."""
        return self._children.get(skill_id, ())

    def parents_of(self, skill_id: str) -> tuple[str, ...]:
        return tuple(self._parents.get(skill_id, ()))

    def depth_of(self, skill_id: str) -> int | None:
        """BFS depth from the root, or None if unreachable."""
        return self._depths.get(skill_id)

    def reachable_ids(self) -> list[str]:
        """Ids reachable from the root, in BFS order."""
        return list(self._depths)
