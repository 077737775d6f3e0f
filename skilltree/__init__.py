"""
Skill tree module.

Game-specific progression built on top of the engine:
- Catalog and connectivity graph (static skill data)
- Progression store (persisted progress + session overlay)
- Visibility, effects and purchasing
- Layout and render snapshots
- Controller (page facade)
- Save (persistence)
"""

from skilltree.catalog import SkillCatalog, SkillDefinition
from skilltree.config import SkillTreeConfig
from skilltree.controller import SkillTreeController
from skilltree.errors import CatalogError, SkillTreeError
from skilltree.graph import ConnectivityGraph
from skilltree.purchase import PurchaseEngine, PurchaseResult, PurchaseStatus, skill_cost
from skilltree.state import PersistedSkillRecord, ProgressionStore

__all__ = [
    "SkillCatalog",
    "SkillDefinition",
    "SkillTreeConfig",
    "SkillTreeController",
    "CatalogError",
    "SkillTreeError",
    "ConnectivityGraph",
    "PurchaseEngine",
    "PurchaseResult",
    "PurchaseStatus",
    "skill_cost",
    "PersistedSkillRecord",
    "ProgressionStore",
]
