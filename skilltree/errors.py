"""
Skill tree exceptions.

Engine operations degrade instead of raising; these are only raised by
strict lookups a caller opts into.
"""


class SkillTreeError(Exception):
    """Base class for skill tree errors."""


class CatalogError(SkillTreeError):
    """A skill identifier or catalog entry could not be resolved."""

    def __init__(self, skill_id: str, message: str = ""):
        self.skill_id = skill_id
        super().__init__(message or f"Unknown skill '{skill_id}'")
