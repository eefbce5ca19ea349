"""
Error kinds and the exception used outside the skill engine.
"""

from enum import Enum


class ErrorKind(Enum):
    """Outward-facing failure kinds.

    Each kind carries the message shown to API clients and the HTTP status
    the web layer answers with.
    """

    MUST_BE_UNIQUE = "must_be_unique"
    NOT_ALLOWED = "not_allowed"
    VALUE_ERROR = "value_error"
    NOT_FOUND = "not_found"
    INVALID_GRANT = "invalid_grant"
    STORAGE_FAILURE = "storage_failure"
    OTHER = "other"

    @property
    def message(self) -> str:
        return _MESSAGES[self]

    @property
    def status_code(self) -> int:
        return _STATUS_CODES.get(self, 500)


_MESSAGES = {
    ErrorKind.MUST_BE_UNIQUE: "One of the given values must be unique.",
    ErrorKind.NOT_ALLOWED: "You are not allowed to access this resource.",
    ErrorKind.VALUE_ERROR: "One of the field values given is invalid.",
    ErrorKind.NOT_FOUND: "No asset with this ID could be found.",
    ErrorKind.INVALID_GRANT: "This skill cannot be granted to this profile.",
    ErrorKind.STORAGE_FAILURE: "The profile store could not complete the request.",
    ErrorKind.OTHER: "An unspecified error has occured",
}

_STATUS_CODES = {
    ErrorKind.MUST_BE_UNIQUE: 409,
    ErrorKind.NOT_ALLOWED: 401,
    ErrorKind.VALUE_ERROR: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_GRANT: 400,
}


class StarstrawError(Exception):
    """Raised by the persistence and web layers.

    The skill engine never raises this; it returns a SkillResult instead.
    """

    def __init__(self, kind: ErrorKind, details: str = ""):
        self.kind = kind
        self.details = details
        super().__init__(details or kind.message)

    @property
    def message(self) -> str:
        return self.kind.message
