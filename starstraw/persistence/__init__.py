"""Persistence layer -- PostgreSQL via SQLAlchemy Core + asyncpg."""

from .cache import ProfileCache
from .models import ProfileMetadata, ProfileRecord
from .postgres import PostgresRepository, validate_username
from .tables import metadata, profiles
from .tokens import generate_token, hash_token

__all__ = [
    "ProfileCache",
    "ProfileMetadata",
    "ProfileRecord",
    "PostgresRepository",
    "validate_username",
    "metadata",
    "profiles",
    "generate_token",
    "hash_token",
]
