"""
Game Database.

Handles loading and validation of static game data (skill catalog, layout tables).
"""

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema


class Database:
    """
    Central storage for static game data.

    Expected layout under data_path:
        schemas/skill.schema.json
        schemas/layout.schema.json
        skilltree.json
        skilltree_layout.json
    """

    def __init__(
        self,
        data_path: Path | str,
        skills_file: str = "skilltree.json",
        layout_file: str = "skilltree_layout.json",
    ):
        self._data_path = Path(data_path)
        self._skills_file = skills_file
        self._layout_file = layout_file
        self._schemas: dict[str, Any] = {}

        # Data stores
        self.skills: dict[str, dict[str, Any]] = {}
        self.layout: dict[str, list[float]] = {}

        self.logger = logging.getLogger(__name__)

    @property
    def data_path(self) -> Path:
        return self._data_path

    def load_all(self) -> None:
        """Load all data from disk."""
        self._load_schemas()

        self.skills = self._load_skills()
        self.layout = self._load_layout()

        self.logger.info(
            f"Loaded {len(self.skills)} skills, "
            f"{len(self.layout)} layout cells."
        )

    def _load_schemas(self) -> None:
        """Load JSON schemas."""
        schema_dir = self._data_path / "schemas"
        if not schema_dir.exists():
            self.logger.warning(f"Schema directory not found: {schema_dir}")
            return

        for schema_file in schema_dir.glob("*.schema.json"):
            try:
                with open(schema_file, 'r', encoding='utf-8') as f:
                    self._schemas[schema_file.name] = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load schema {schema_file}: {e}")

    def _read_json(self, file_name: str) -> Any:
        path = self._data_path / file_name
        if not path.exists():
            self.logger.warning(f"Data file not found: {path}")
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Failed to load {path}: {e}")
            return None

    def _load_skills(self) -> dict[str, dict[str, Any]]:
        """
        Load the skill table.

        Accepts either a list of skill objects or an object keyed by skill id
        (the key is used when an entry has no "id").
        """
        data = self._read_json(self._skills_file)
        data_store: dict[str, dict[str, Any]] = {}
        if data is None:
            return data_store

        if isinstance(data, dict):
            entries = [
                {**value, "id": value.get("id", key)} if isinstance(value, dict) else value
                for key, value in data.items()
            ]
        elif isinstance(data, list):
            entries = data
        else:
            self.logger.error(f"Unexpected skill table type in {self._skills_file}: {type(data).__name__}")
            return data_store

        schema = self._schemas.get("skill.schema.json")
        if schema is None:
            self.logger.warning("No schema found for skills (skill.schema.json), loading unvalidated")

        for entry in entries:
            if not isinstance(entry, dict) or 'id' not in entry:
                self.logger.error(f"Skipping malformed skill entry: {entry!r}")
                continue

            if schema:
                try:
                    jsonschema.validate(instance=entry, schema=schema)
                except jsonschema.ValidationError as e:
                    self.logger.error(f"Validation error in skill '{entry['id']}': {e.message}")
                    continue

            if entry['id'] in data_store:
                self.logger.warning(f"Duplicate skill id '{entry['id']}', keeping the last definition")
            data_store[entry['id']] = entry

        return data_store

    def _load_layout(self) -> dict[str, list[float]]:
        """Load the authored grid cell table (skill id -> [col, row])."""
        data = self._read_json(self._layout_file)
        if data is None:
            return {}

        schema = self._schemas.get("layout.schema.json")
        if schema:
            try:
                jsonschema.validate(instance=data, schema=schema)
            except jsonschema.ValidationError as e:
                self.logger.error(f"Validation error in {self._layout_file}: {e.message}")
                return {}

        cells = data.get("cells", data) if isinstance(data, dict) else {}
        layout: dict[str, list[float]] = {}
        for skill_id, cell in cells.items():
            if isinstance(cell, (list, tuple)) and len(cell) == 2:
                layout[skill_id] = [cell[0], cell[1]]
            else:
                self.logger.warning(f"Ignoring malformed layout cell for '{skill_id}': {cell!r}")
        return layout

    def get_skill(self, skill_id: str) -> dict[str, Any] | None:
        return self.skills.get(skill_id)

    def get_cell(self, skill_id: str) -> list[float] | None:
        return self.layout.get(skill_id)
