"""Skill mutation and authorization for a single profile."""

import logging
from dataclasses import dataclass
from typing import Iterable

from starstraw.errors import ErrorKind

from .catalog import SkillCategory, SkillName, is_valid
from .models import DerivedStats, SkillEntry, SkillSet
from .resolver import find_title_index, resolve

logger = logging.getLogger(__name__)


@dataclass
class SkillResult:
    """Outcome of a skill operation. Falsy when the operation failed."""

    ok: bool
    error: ErrorKind | None = None
    detail: str = ""

    @classmethod
    def success(cls) -> "SkillResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: ErrorKind, detail: str = "") -> "SkillResult":
        return cls(ok=False, error=error, detail=detail)

    def __bool__(self) -> bool:
        return self.ok


class SkillManager:
    """Wraps one profile's skill list.

    The caller owns persistence: load the list, run an operation, and store
    ``manager.skills`` again if the operation succeeded. A failed operation
    leaves the list untouched.
    """

    def __init__(self, skills: Iterable[SkillEntry] | None = None):
        self.skills: SkillSet = list(skills) if skills is not None else []

    def __repr__(self) -> str:
        return f"SkillManager({self.skills!r})"

    def stats(self) -> DerivedStats:
        return resolve(self.skills)

    def grant(self, entry: SkillEntry) -> SkillResult:
        """Append ``entry`` if the catalog allows it for the current stats.

        Granting a skill the profile already has adds a second entry;
        modifiers then stack.
        """
        stats = self.stats()
        if not is_valid(entry.name, stats):
            logger.debug(f"Rejected grant of {entry.name.value} (power={stats.power})")
            return SkillResult.failure(
                ErrorKind.INVALID_GRANT,
                f"{entry.name.value} cannot be granted at power {stats.power:g}",
            )

        self.skills.append(entry)
        return SkillResult.success()

    def revoke(self, name: SkillName) -> SkillResult:
        """Remove every entry named ``name``. Nothing to remove is not an error."""
        self.skills = [skill for skill in self.skills if skill.name is not name]
        return SkillResult.success()

    def set_title(self, entry: SkillEntry) -> SkillResult:
        """Replace the effective title.

        Overwrites the first Title entry in place, or inserts at the front
        when there is none. Catalog validity is not checked; callers gate
        this behind their own authorization.
        """
        if entry.category is not SkillCategory.TITLE:
            return SkillResult.failure(
                ErrorKind.VALUE_ERROR, f"{entry.name.value} is not a title"
            )

        index = find_title_index(self.skills)
        if index is None:
            self.skills.insert(0, entry)
        else:
            self.skills[index] = entry
        return SkillResult.success()

    def authorize_action(self, other: "SkillManager") -> bool:
        """Whether this profile may act on ``other``.

        Allowed when our power beats their defense and their power does not
        exceed ours, or unconditionally when we hold the God title.
        """
        me = self.stats()
        them = other.stats()
        return (me.power > them.defense and them.power <= me.power) or (
            me.title is SkillName.GOD
        )
