"""Skill engine: catalog, stats resolution, and skill management."""

from .catalog import (
    ABSOLUTE_POWER_THRESHOLD,
    SKILL_CATALOG,
    SkillCategory,
    SkillName,
    describe,
    is_valid,
)
from .manager import SkillManager, SkillResult
from .models import (
    DEFAULT_TITLE,
    DerivedStats,
    SkillEntry,
    SkillSet,
    default_skills,
    skills_from_json,
    skills_to_json,
)
from .resolver import resolve

__all__ = [
    # Catalog
    "ABSOLUTE_POWER_THRESHOLD",
    "SKILL_CATALOG",
    "SkillCategory",
    "SkillName",
    "describe",
    "is_valid",
    # Models
    "DEFAULT_TITLE",
    "DerivedStats",
    "SkillEntry",
    "SkillSet",
    "default_skills",
    "skills_from_json",
    "skills_to_json",
    # Resolver
    "resolve",
    # Manager
    "SkillManager",
    "SkillResult",
]
