"""Skill tree persistence."""

from skilltree.save.manager import SaveManager, SaveEvent
from skilltree.save.scheduler import PersistenceScheduler

__all__ = ["SaveManager", "SaveEvent", "PersistenceScheduler"]
