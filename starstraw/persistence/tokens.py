"""Account id and token helpers."""

import hashlib
import uuid


def generate_token() -> str:
    """Create a new random account id or secondary token."""
    return uuid.uuid4().hex


def hash_token(token: str) -> str:
    """SHA-256 hex digest; only this form is ever stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
