"""Data models for skill entries and derived profile stats."""

from dataclasses import dataclass, field
from typing import Any, Iterable

from .catalog import SkillCategory, SkillName, describe


@dataclass(frozen=True)
class SkillEntry:
    """One skill held by a profile.

    The magnitude is usually the name's default, but a grant may carry a
    weaker or stronger instance of the same skill.
    """

    category: SkillCategory
    name: SkillName
    magnitude: float

    def __post_init__(self):
        expected, _ = describe(self.name)
        if self.category is not expected:
            raise ValueError(
                f"{self.name.value} is a {expected.value} skill, not {self.category.value}"
            )

    @classmethod
    def of(cls, name: SkillName, magnitude: float | None = None) -> "SkillEntry":
        """Build a category-correct entry for ``name``."""
        category, default = describe(name)
        return cls(category, name, default if magnitude is None else float(magnitude))

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "name": self.name.value,
            "magnitude": self.magnitude,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "SkillEntry":
        """Create an entry from its stored form.

        Accepts ``{"category", "name", "magnitude"}`` objects and the older
        ``[[category, name], magnitude]`` pairs. Raises ValueError on
        anything else.
        """
        if isinstance(data, dict):
            category, name, magnitude = (
                data.get("category"),
                data.get("name"),
                data.get("magnitude"),
            )
        elif isinstance(data, (list, tuple)) and len(data) == 2:
            ident, magnitude = data
            if not isinstance(ident, (list, tuple)) or len(ident) != 2:
                raise ValueError(f"Malformed skill identifier: {ident!r}")
            category, name = ident
        else:
            raise ValueError(f"Malformed skill entry: {data!r}")

        if not isinstance(name, str):
            raise ValueError(f"Malformed skill name: {name!r}")
        skill_name = SkillName.from_string(name)
        skill_category = (
            SkillCategory.from_string(category) if category is not None else skill_name.category
        )
        if magnitude is None:
            magnitude = skill_name.default_magnitude
        return cls(skill_category, skill_name, float(magnitude))


# Ordered; the first Title entry is the effective title
SkillSet = list[SkillEntry]

DEFAULT_TITLE = SkillEntry(SkillCategory.TITLE, SkillName.NORMAL, 1.0)


def default_skills() -> SkillSet:
    """Skill list every new profile starts with."""
    return [SkillEntry.of(SkillName.NORMAL)]


def skills_to_json(skills: Iterable[SkillEntry]) -> list[dict[str, Any]]:
    return [skill.to_dict() for skill in skills]


def skills_from_json(data: Any) -> SkillSet:
    """Decode a stored skill list, keeping entry order."""
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"Skill list must be a JSON array, got {type(data).__name__}")
    return [SkillEntry.from_dict(item) for item in data]


@dataclass
class DerivedStats:
    """Stats computed from a profile's skills. Never stored."""

    power: float = 1.0
    defense: float = 1.0
    title: SkillName = SkillName.NORMAL
    abilities: dict[SkillName, float] = field(default_factory=dict)
    skills: SkillSet = field(default_factory=list)

    def has_ability(self, name: SkillName) -> bool:
        return name in self.abilities

    def to_dict(self) -> dict[str, Any]:
        return {
            "power": self.power,
            "defense": self.defense,
            "title": self.title.value,
            "abilities": {name.value: magnitude for name, magnitude in self.abilities.items()},
            "skills": skills_to_json(self.skills),
        }
