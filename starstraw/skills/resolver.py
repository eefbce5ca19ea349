"""Fold a skill list into derived stats."""

from typing import Sequence

from .catalog import SkillCategory, SkillName
from .models import DEFAULT_TITLE, DerivedStats, SkillEntry


def find_title_index(skills: Sequence[SkillEntry]) -> int | None:
    """Position of the first Title entry, or None if there is none."""
    for i, skill in enumerate(skills):
        if skill.category is SkillCategory.TITLE:
            return i
    return None


def resolve(skills: Sequence[SkillEntry]) -> DerivedStats:
    """
    Compute a profile's stats from its skills.

    The first Title entry is the effective title; any later Title entries
    are ignored. Modifiers multiply into power or defense, abilities are
    recorded by name (last one wins), and the title's magnitude then scales
    both power and defense.

    Args:
        skills: The profile's ordered skill list (not modified)

    Returns:
        DerivedStats whose ``skills`` equals the input
    """
    title_index = find_title_index(skills)
    title = skills[title_index] if title_index is not None else DEFAULT_TITLE

    power = 1.0
    defense = 1.0
    abilities: dict[SkillName, float] = {}

    for i, skill in enumerate(skills):
        if i == title_index:
            continue
        if skill.category is SkillCategory.MODIFIER_POWER:
            power *= skill.magnitude
        elif skill.category is SkillCategory.MODIFIER_DEFENSE:
            defense *= skill.magnitude
        elif skill.category is SkillCategory.ABILITY:
            abilities[skill.name] = skill.magnitude

    power *= title.magnitude
    defense *= title.magnitude

    return DerivedStats(
        power=power,
        defense=defense,
        title=title.name,
        abilities=abilities,
        skills=list(skills),
    )
