"""Data models for profile persistence."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from starstraw.skills import SkillSet, resolve


@dataclass
class ProfileMetadata:
    """Extra per-profile data stored alongside the skills."""

    # SHA-256 of a second token that can also be used to log in
    secondary_token: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"secondary_token": self.secondary_token}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ProfileMetadata":
        data = data or {}
        return cls(secondary_token=data.get("secondary_token", "") or "")


@dataclass
class ProfileRecord:
    """A stored profile.

    ``id`` is the hashed account id; the unhashed id is only ever held by
    the profile's owner.
    """

    id: str
    username: str
    skills: SkillSet = field(default_factory=list)
    metadata: ProfileMetadata = field(default_factory=ProfileMetadata)
    joined: datetime | None = None

    def to_public_dict(self) -> dict[str, Any]:
        """Public-safe representation (no id or tokens)."""
        return {
            "username": self.username,
            "joined": self.joined.isoformat() if self.joined else None,
            "stats": resolve(self.skills).to_dict(),
        }
