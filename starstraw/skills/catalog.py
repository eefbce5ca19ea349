"""Skill catalog: the closed set of skill names and what each one does."""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import DerivedStats


class SkillCategory(Enum):
    """How a skill's magnitude is folded into derived stats."""

    MODIFIER_POWER = "ModifierPower"  # multiplies power
    MODIFIER_DEFENSE = "ModifierDefense"  # multiplies defense
    ABILITY = "Ability"  # unlockable action, magnitude kept as-is
    TITLE = "Title"  # exclusive; scales both power and defense

    @classmethod
    def from_string(cls, value: str) -> "SkillCategory":
        """Parse a category name.

        Accepts the canonical names and the short ``ModifierP``/``ModifierD``
        forms found in older stored skill lists. Raises ValueError otherwise.
        """
        value = _CATEGORY_ALIASES.get(value, value)
        for category in cls:
            if category.value.lower() == value.lower():
                return category
        raise ValueError(f"Unknown skill category: {value!r}")


_CATEGORY_ALIASES = {
    "ModifierP": "ModifierPower",
    "ModifierD": "ModifierDefense",
}


class SkillName(Enum):
    """Every skill a profile can hold."""

    # modifiers
    MASTER = "Master"
    PATRON = "Patron"
    TRUSTWORTHY = "Trustworthy"
    PROTECTED = "Protected"
    # abilities
    ABSOLUTE = "Absolute"
    # titles
    GOD = "God"
    ADMINISTRATOR = "Administrator"
    MANAGER = "Manager"
    NORMAL = "Normal"

    @classmethod
    def from_string(cls, value: str) -> "SkillName":
        """Parse a skill name (case-insensitive). Raises ValueError if unknown."""
        for name in cls:
            if name.value.lower() == value.lower():
                return name
        raise ValueError(f"Unknown skill name: {value!r}")

    @property
    def category(self) -> SkillCategory:
        return SKILL_CATALOG[self][0]

    @property
    def default_magnitude(self) -> float:
        return SKILL_CATALOG[self][1]


SKILL_CATALOG: dict[SkillName, tuple[SkillCategory, float]] = {
    SkillName.MASTER: (SkillCategory.MODIFIER_POWER, 2.0),
    SkillName.PATRON: (SkillCategory.MODIFIER_DEFENSE, 2.0),
    SkillName.TRUSTWORTHY: (SkillCategory.MODIFIER_POWER, 1.05),
    SkillName.PROTECTED: (SkillCategory.MODIFIER_DEFENSE, 1.05),
    SkillName.ABSOLUTE: (SkillCategory.ABILITY, 1.0),
    SkillName.GOD: (SkillCategory.TITLE, 100_000.0),
    SkillName.ADMINISTRATOR: (SkillCategory.TITLE, 10_000.0),
    SkillName.MANAGER: (SkillCategory.TITLE, 1_000.0),
    SkillName.NORMAL: (SkillCategory.TITLE, 1.0),
}

# Minimum power before Absolute can be granted
ABSOLUTE_POWER_THRESHOLD = 100_000.0


def describe(name: SkillName) -> tuple[SkillCategory, float]:
    """Return the category and default magnitude bound to ``name``."""
    return SKILL_CATALOG[name]


def is_valid(name: SkillName, stats: "DerivedStats") -> bool:
    """Check whether ``name`` may be granted to a profile with ``stats``.

    God is never grantable; it only reaches a profile through direct
    seeding in the profile store.
    """
    if name is SkillName.ABSOLUTE and stats.power < ABSOLUTE_POWER_THRESHOLD:
        return False
    if name is SkillName.GOD:
        return False
    return True
