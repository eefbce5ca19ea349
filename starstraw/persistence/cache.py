"""In-process profile cache keyed by username."""

import copy
import logging

from .models import ProfileRecord

logger = logging.getLogger(__name__)


class ProfileCache:
    """Caches profiles looked up by username.

    Entries are copied on the way in and out so callers can mutate the
    records they get back. Every write to a profile must call ``remove``.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._entries: dict[str, ProfileRecord] = {}

    @staticmethod
    def key(username: str) -> str:
        return f"sr_profile:{username.lower()}"

    def get(self, username: str) -> ProfileRecord | None:
        if not self.enabled:
            return None
        record = self._entries.get(self.key(username))
        return copy.deepcopy(record) if record else None

    def set(self, record: ProfileRecord) -> None:
        if self.enabled:
            self._entries[self.key(record.username)] = copy.deepcopy(record)

    def remove(self, username: str) -> None:
        if self._entries.pop(self.key(username), None) is not None:
            logger.debug(f"Evicted cached profile {username}")

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
