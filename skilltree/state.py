"""
Progression state - persisted skill progress plus a session overlay.

Effective state is never stored; it is derived on every query:

    effective_level    = persisted.current_level + overlay.session_level
    effectively_unlocked = persisted.unlocked or overlay.session_unlocked

Resetting a session simply discards the overlay.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from skilltree.catalog import SkillCatalog
from skilltree.graph import ConnectivityGraph


logger = logging.getLogger(__name__)


class PersistedSkillRecord(BaseModel):
    """Progress that survives across sessions."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    current_level: int = Field(default=0, ge=0, alias="currentLevel")
    unlocked: bool = False


@dataclass
class SessionOverlayRecord:
    """Session-only progress layered on top of a persisted record."""
    session_level: int = 0
    session_unlocked: bool = False


class ProgressionStore:
    """
    Holds persisted and session progress for every catalog skill.

    Mutated only through apply_purchase(), the reset operations, restore()
    and the author-mode toggle. Queries never raise: unknown ids read as
    level 0 and locked.
    """

    def __init__(self, catalog: SkillCatalog, graph: ConnectivityGraph):
        self.catalog = catalog
        self.graph = graph

        self._persisted: dict[str, PersistedSkillRecord] = {}
        self._overlay: dict[str, SessionOverlayRecord] = {}
        self._author_mode = False

        self._seed_persisted()

    def _seed_persisted(self) -> None:
        self._persisted = {}
        for skill in self.catalog:
            level, unlocked = self.catalog.seed(skill.id)
            self._persisted[skill.id] = PersistedSkillRecord(current_level=level, unlocked=unlocked)

    # Queries

    def persisted_level(self, skill_id: str) -> int:
        record = self._persisted.get(skill_id)
        return record.current_level if record else 0

    def session_level(self, skill_id: str) -> int:
        overlay = self._overlay.get(skill_id)
        return overlay.session_level if overlay else 0

    def effective_level(self, skill_id: str) -> int:
        """Persisted level plus session level (0 for unknown ids)."""
        record = self._persisted.get(skill_id)
        if record is None:
            return 0

        level = record.current_level + self.session_level(skill_id)
        if self._author_mode and skill_id == self.catalog.root_id:
            level = max(level, 1)
        return level

    def effectively_unlocked(self, skill_id: str) -> bool:
        """Persisted unlock OR-ed with the session unlock (False for unknown ids)."""
        record = self._persisted.get(skill_id)
        if record is None:
            return False
        if self._author_mode:
            return True

        overlay = self._overlay.get(skill_id)
        return record.unlocked or (overlay.session_unlocked if overlay else False)

    def is_maxed(self, skill_id: str) -> bool:
        skill = self.catalog.get(skill_id)
        if skill is None:
            return False
        return self.effective_level(skill_id) >= skill.max_level

    def can_purchase(self, skill_id: str) -> bool:
        """Unlocked and below max level (currency is not considered here)."""
        return self.effectively_unlocked(skill_id) and not self.is_maxed(skill_id)

    def total_levels(self, skill_ids: Iterable[str]) -> int:
        """Sum of effective levels over several skills."""
        return sum(self.effective_level(skill_id) for skill_id in skill_ids)

    @property
    def has_session_progress(self) -> bool:
        return bool(self._overlay)

    @property
    def author_mode(self) -> bool:
        return self._author_mode

    # Mutation

    def apply_purchase(self, skill_id: str) -> bool:
        """
        Add one session level to a skill.

        On the first level (effective 0 -> 1) every declared child is
        session-unlocked. Callers check unlock/max/currency beforehand;
        a maxed or unknown skill is refused here too so the max-level bound
        always holds.

        Returns:
            True if the level was added
        """
        skill = self.catalog.get(skill_id)
        if skill is None:
            logger.warning(f"Purchase applied to unknown skill '{skill_id}'")
            return False

        previous = self.effective_level(skill_id)
        if previous >= skill.max_level:
            return False

        overlay = self._overlay.setdefault(skill_id, SessionOverlayRecord())
        overlay.session_level += 1

        if previous == 0:
            for child_id in self.graph.children_of(skill_id):
                child_overlay = self._overlay.setdefault(child_id, SessionOverlayRecord())
                child_overlay.session_unlocked = True

        return True

    def reset_session(self) -> None:
        """Discard the whole session overlay. Safe to call repeatedly."""
        if self._overlay:
            logger.info(f"Session progress reset ({len(self._overlay)} overlay records dropped)")
        self._overlay.clear()

    def set_author_mode(self, enabled: bool) -> bool:
        """
        Toggle author/debug mode.

        While enabled every skill is unlocked and the root counts as
        purchased. Turning it off removes that forced state along with any
        session progress made on top of it.

        Returns:
            True if the mode changed
        """
        if enabled == self._author_mode:
            return False

        self._author_mode = enabled
        if not enabled:
            self._overlay.clear()
        logger.info(f"Author mode {'enabled' if enabled else 'disabled'}")
        return True

    # Persistence

    def persisted_records(self) -> dict[str, PersistedSkillRecord]:
        """Copy of the persisted layer, for the save collaborator."""
        return {skill_id: record.model_copy() for skill_id, record in self._persisted.items()}

    def restore(self, records: Mapping[str, PersistedSkillRecord | Mapping[str, Any]]) -> int:
        """
        Merge saved persisted records for known skills.

        Unknown ids and invalid records are logged and skipped; levels are
        clamped to the skill's max level.

        Returns:
            Number of records restored
        """
        restored = 0
        for skill_id, raw in records.items():
            skill = self.catalog.get(skill_id)
            if skill is None:
                logger.warning(f"Ignoring saved progress for unknown skill '{skill_id}'")
                continue

            try:
                record = raw if isinstance(raw, PersistedSkillRecord) else PersistedSkillRecord.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Ignoring invalid saved progress for '{skill_id}': {e}")
                continue

            if record.current_level > skill.max_level:
                logger.warning(
                    f"Saved level {record.current_level} for '{skill_id}' exceeds max {skill.max_level}, clamping"
                )
            self._persisted[skill_id] = PersistedSkillRecord(
                current_level=min(record.current_level, skill.max_level),
                unlocked=record.unlocked,
            )
            restored += 1

        logger.info(f"Restored progress for {restored} skills")
        return restored

    def reset_progress(self) -> None:
        """Wipe persisted progress: every level 0, only the root unlocked."""
        self._overlay.clear()
        self._persisted = {
            skill.id: PersistedSkillRecord(current_level=0, unlocked=skill.id == self.catalog.root_id)
            for skill in self.catalog
        }
        logger.info("Skill progress reset")
