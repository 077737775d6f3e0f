"""
Save/Load system - skill tree persistence.

Provides:
- Persisted skill progress (per-skill currentLevel/unlocked)
- Persisted skill tree camera (offset and zoom)
- Save integrity validation (checksum)
- Event publishing for save/load operations

Writes are best-effort: failures are logged and reported through events,
never raised to the caller.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from engine.core.events import EventBus
from engine.graphics.viewport import ViewportState
from skilltree.state import PersistedSkillRecord


logger = logging.getLogger(__name__)


class SaveEvent(Enum):
    """Save system events."""
    SAVE_COMPLETED = auto()
    SAVE_FAILED = auto()
    LOAD_COMPLETED = auto()
    LOAD_FAILED = auto()


class SaveManager:
    """
    JSON file store for skill tree progress and camera.

    Usage:
        save_mgr = SaveManager("game/saves", event_bus=event_bus)
        save_mgr.write_progression(store.persisted_records())
        records = save_mgr.read_progression()
    """

    VERSION = "1.0"
    PROGRESSION_FILE = "skilltree_progress.json"
    VIEWPORT_FILE = "skilltree_camera.json"

    def __init__(self, save_path: str | Path = "game/saves", event_bus: Optional[EventBus] = None):
        self.save_path = Path(save_path)
        self.event_bus = event_bus

    # DurableStore interface

    def write_viewport(self, state: ViewportState) -> bool:
        """Save the skill tree camera."""
        return self._write(self.VIEWPORT_FILE, state.model_dump(by_alias=True))

    def write_progression(self, records: Mapping[str, PersistedSkillRecord]) -> bool:
        """Save per-skill persisted progress."""
        data = {skill_id: record.model_dump(by_alias=True) for skill_id, record in records.items()}
        return self._write(self.PROGRESSION_FILE, data)

    # Loading

    def read_viewport(self) -> ViewportState | None:
        """Load the saved camera, or None if missing or invalid."""
        data = self._read(self.VIEWPORT_FILE)
        if data is None:
            return None

        try:
            return ViewportState.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Discarding invalid camera save: {e}")
            self._publish(SaveEvent.LOAD_FAILED, file=self.VIEWPORT_FILE, error=str(e))
            return None

    def read_progression(self) -> dict[str, dict[str, Any]]:
        """
        Load saved progress as raw per-skill records.

        Validation of individual records is left to ProgressionStore.restore().
        """
        data = self._read(self.PROGRESSION_FILE)
        if not isinstance(data, dict):
            return {}
        return data

    def has_save(self, file_name: str) -> bool:
        return (self.save_path / file_name).exists()

    def delete_saves(self) -> None:
        """Remove both save files if present."""
        for file_name in (self.PROGRESSION_FILE, self.VIEWPORT_FILE):
            path = self.save_path / file_name
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.error(f"Failed to delete {path}: {e}")

    # File IO

    def _write(self, file_name: str, data: Any) -> bool:
        path = self.save_path / file_name
        save_dict = {
            'version': self.VERSION,
            'timestamp': datetime.now().isoformat(timespec='seconds'),
            'data': data,
        }

        try:
            save_dict['checksum'] = self._calculate_checksum(save_dict)
            self.save_path.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(save_dict, f, indent=2)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write {path}: {e}")
            self._publish(SaveEvent.SAVE_FAILED, file=file_name, error=str(e))
            return False

        logger.debug(f"Saved {path}")
        self._publish(SaveEvent.SAVE_COMPLETED, file=file_name)
        return True

    def _read(self, file_name: str) -> Any:
        path = self.save_path / file_name
        if not path.exists():
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                save_dict = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {path}: {e}")
            self._publish(SaveEvent.LOAD_FAILED, file=file_name, error=str(e))
            return None

        if not isinstance(save_dict, dict) or 'data' not in save_dict:
            logger.warning(f"Save file {path} has no data section")
            self._publish(SaveEvent.LOAD_FAILED, file=file_name, error="malformed")
            return None

        checksum = save_dict.get('checksum')
        if checksum and not self._verify_checksum(save_dict, checksum):
            logger.warning(f"Save file corrupted: checksum mismatch in {path}")
            self._publish(SaveEvent.LOAD_FAILED, file=file_name, error="checksum mismatch")
            return None

        if save_dict.get('version') != self.VERSION:
            logger.info(f"Loading {path} saved with version {save_dict.get('version')}")

        self._publish(SaveEvent.LOAD_COMPLETED, file=file_name)
        return save_dict['data']

    # Checksum validation

    def _calculate_checksum(self, data: dict) -> str:
        """Calculate checksum for save data."""
        json_str = json.dumps(data, sort_keys=True, separators=(',', ':'))
        hash_bytes = hashlib.sha256(json_str.encode('utf-8')).digest()
        return base64.b64encode(hash_bytes).decode('ascii')

    def _verify_checksum(self, data: dict, expected_checksum: str) -> bool:
        """Verify save data checksum."""
        data_copy = data.copy()
        data_copy.pop('checksum', None)
        return self._calculate_checksum(data_copy) == expected_checksum

    def _publish(self, event_type: SaveEvent, **data: Any) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)
