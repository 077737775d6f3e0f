"""
Skill catalog - immutable skill definitions loaded once from data.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from engine.resources.database import Database
from skilltree.errors import CatalogError


logger = logging.getLogger(__name__)


class SkillDefinition(BaseModel):
    """
    Complete, immutable definition of a skill node.

    JSON uses the camelCase keys of the authored table
    (baseCost, costMultiplier, maxLevel, children).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='ignore')

    id: str
    name: str
    description: str = ""
    icon: str = ""
    base_cost: float = Field(default=0, ge=0, alias="baseCost")
    cost_multiplier: float = Field(default=1.0, gt=0, alias="costMultiplier")
    max_level: int = Field(default=1, ge=1, alias="maxLevel")
    children: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("children", "connectedNodes"),
    )

    # Frozen models hash by value; identity by id is what sets of nodes need
    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SkillDefinition):
            return NotImplemented
        return self.id == other.id


class SkillCatalog:
    """
    Read-only table of SkillDefinition keyed by id.

    Also carries the seed progress authored alongside each skill
    (currentLevel / unlocked), which is the persisted state of a fresh save.
    """

    def __init__(self, definitions: list[SkillDefinition], root_id: str = "root",
                 seeds: dict[str, tuple[int, bool]] | None = None):
        self.root_id = root_id
        self._skills: dict[str, SkillDefinition] = {}
        for definition in definitions:
            self._skills[definition.id] = definition
        self._seeds = dict(seeds or {})

        if root_id not in self._skills:
            logger.error(f"Skill catalog has no root skill '{root_id}'")

    @classmethod
    def from_entries(cls, entries: list[dict[str, Any]] | dict[str, dict[str, Any]],
                     root_id: str = "root") -> SkillCatalog:
        """
        Build a catalog from raw table entries.

        Invalid entries are logged and skipped.
        """
        if isinstance(entries, dict):
            entries = [{**value, "id": value.get("id", key)} for key, value in entries.items()]

        definitions: list[SkillDefinition] = []
        seeds: dict[str, tuple[int, bool]] = {}
        for entry in entries:
            try:
                definition = SkillDefinition.model_validate(entry)
            except ValidationError as e:
                logger.error(f"Invalid skill definition {entry.get('id', '?')!r}: {e}")
                continue

            definitions.append(definition)
            level = int(entry.get("currentLevel", 0))
            unlocked = bool(entry.get("unlocked", definition.id == root_id))
            seeds[definition.id] = (max(0, min(level, definition.max_level)), unlocked)

        catalog = cls(definitions, root_id=root_id, seeds=seeds)
        logger.info(f"Skill catalog ready with {len(catalog)} skills")
        return catalog

    @classmethod
    def from_database(cls, database: Database, root_id: str = "root") -> SkillCatalog:
        """Build a catalog from a loaded Database."""
        return cls.from_entries(list(database.skills.values()), root_id=root_id)

    def __len__(self) -> int:
        return len(self._skills)

    def __contains__(self, skill_id: object) -> bool:
        return skill_id in self._skills

    def __iter__(self) -> Iterator[SkillDefinition]:
        return iter(self._skills.values())

    @property
    def root(self) -> SkillDefinition | None:
        return self._skills.get(self.root_id)

    def ids(self) -> list[str]:
        return list(self._skills)

    def get(self, skill_id: str) -> SkillDefinition | None:
        """Get a skill definition, or None for unknown ids."""
        return self._skills.get(skill_id)

    def require(self, skill_id: str) -> SkillDefinition:
        """Get a skill definition, raising CatalogError for unknown ids."""
        definition = self._skills.get(skill_id)
        if definition is None:
            raise CatalogError(skill_id)
        return definition

    def seed(self, skill_id: str) -> tuple[int, bool]:
        """Authored starting (level, unlocked) for a skill."""
        return self._seeds.get(skill_id, (0, skill_id == self.root_id))
