"""Async PostgreSQL repository using SQLAlchemy Core + asyncpg."""

import logging
import re
from typing import Callable

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from starstraw.errors import ErrorKind, StarstrawError
from starstraw.skills import (
    SkillManager,
    SkillResult,
    SkillSet,
    default_skills,
    skills_from_json,
    skills_to_json,
)

from .cache import ProfileCache
from .models import ProfileMetadata, ProfileRecord
from .tables import metadata, profiles
from .tokens import generate_token, hash_token

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[\w\-.!]+$")
USERNAME_MIN_LENGTH = 2
USERNAME_MAX_LENGTH = 500


def validate_username(username: str) -> None:
    """Raise a VALUE_ERROR StarstrawError if ``username`` is not acceptable."""
    if not USERNAME_PATTERN.match(username):
        raise StarstrawError(ErrorKind.VALUE_ERROR, "Username contains invalid characters")
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise StarstrawError(
            ErrorKind.VALUE_ERROR,
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters",
        )


class PostgresRepository:
    """Async profile store backed by PostgreSQL.

    All methods are async. Engine lifecycle is managed externally
    (created in FastAPI lifespan or CLI, passed to constructor).
    Lookups that find nothing raise StarstrawError(NOT_FOUND); driver
    errors propagate unchanged.
    """

    def __init__(self, engine: AsyncEngine, cache: ProfileCache | None = None):
        self._engine = engine
        self._cache = cache if cache is not None else ProfileCache()

    async def init(self) -> None:
        """Create tables that do not exist yet."""
        async with self._engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    # === Profile creation ===

    async def create_profile(self, username: str) -> str:
        """Create a profile and return its unhashed account id.

        The account id is shown to the owner once; only its hash is stored.
        """
        username = username.lower()
        validate_username(username)

        if await self._find_profile(profiles.c.username == username):
            raise StarstrawError(ErrorKind.MUST_BE_UNIQUE, f"Username {username} is taken")

        account_id = generate_token()
        try:
            async with self._engine.begin() as conn:
                await conn.execute(
                    insert(profiles).values(
                        id=hash_token(account_id),
                        username=username,
                        metadata=ProfileMetadata().to_dict(),
                        skills=skills_to_json(default_skills()),
                    )
                )
        except IntegrityError as e:
            raise StarstrawError(ErrorKind.MUST_BE_UNIQUE, f"Username {username} is taken") from e

        logger.info(f"Created profile {username}")
        return account_id

    # === Lookups ===

    async def get_profile_by_hashed(self, hashed: str) -> ProfileRecord:
        profile = await self._find_profile(profiles.c.id == hashed)
        if not profile:
            raise StarstrawError(ErrorKind.NOT_FOUND)
        return profile

    async def get_profile_by_unhashed(self, unhashed: str) -> ProfileRecord:
        """Look up by account id, falling back to the secondary token."""
        try:
            return await self.get_profile_by_hashed(hash_token(unhashed))
        except StarstrawError as e:
            if e.kind is not ErrorKind.NOT_FOUND:
                raise
        return await self.get_profile_by_unhashed_st(unhashed)

    async def get_profile_by_unhashed_st(self, unhashed: str) -> ProfileRecord:
        token_column = profiles.c["metadata"]["secondary_token"].as_string()
        profile = await self._find_profile(token_column == hash_token(unhashed))
        if not profile:
            raise StarstrawError(ErrorKind.NOT_FOUND)
        return profile

    async def get_profile_by_username(self, username: str) -> ProfileRecord:
        username = username.lower()

        cached = self._cache.get(username)
        if cached:
            return cached

        profile = await self._find_profile(profiles.c.username == username)
        if not profile:
            raise StarstrawError(ErrorKind.NOT_FOUND, f"Profile {username} not found")

        self._cache.set(profile)
        return profile

    # === Updates ===

    async def edit_profile_metadata_by_name(self, name: str, metadata: ProfileMetadata) -> None:
        name = name.lower()
        await self.get_profile_by_username(name)

        async with self._engine.begin() as conn:
            await conn.execute(
                update(profiles)
                .where(profiles.c.username == name)
                .values(metadata=metadata.to_dict())
            )
        self._cache.remove(name)

    async def edit_profile_skills_by_name(self, name: str, skills: SkillSet) -> None:
        """Overwrite a profile's skills. Entry order is stored as given."""
        name = name.lower()
        await self.get_profile_by_username(name)

        async with self._engine.begin() as conn:
            await conn.execute(
                update(profiles)
                .where(profiles.c.username == name)
                .values(skills=skills_to_json(skills))
            )
        self._cache.remove(name)

    async def update_profile_skills(
        self,
        name: str,
        operation: Callable[[SkillManager], SkillResult],
    ) -> tuple[SkillResult, SkillSet]:
        """Run ``operation`` against a profile's skills under a row lock.

        The skills are re-read inside the transaction with SELECT ... FOR
        UPDATE, so concurrent edits of one profile are applied one after
        another. Nothing is written when the operation fails.

        Returns:
            The operation's result and the resulting skill list
        """
        name = name.lower()
        async with self._engine.begin() as conn:
            result = await conn.execute(
                select(profiles).where(profiles.c.username == name).with_for_update()
            )
            row = result.mappings().first()
            if not row:
                raise StarstrawError(ErrorKind.NOT_FOUND, f"Profile {name} not found")

            manager = SkillManager(self._row_to_profile(row).skills)
            outcome = operation(manager)
            if outcome:
                await conn.execute(
                    update(profiles)
                    .where(profiles.c.username == name)
                    .values(skills=skills_to_json(manager.skills))
                )

        if outcome:
            self._cache.remove(name)
        return outcome, manager.skills

    async def issue_secondary_token(self, name: str) -> str:
        """Replace a profile's secondary token and return the new unhashed value."""
        profile = await self.get_profile_by_username(name)
        token = generate_token()
        profile.metadata.secondary_token = hash_token(token)
        await self.edit_profile_metadata_by_name(profile.username, profile.metadata)
        return token

    async def close(self) -> None:
        await self._engine.dispose()

    # === Row mapping ===

    async def _find_profile(self, condition) -> ProfileRecord | None:
        async with self._engine.connect() as conn:
            result = await conn.execute(select(profiles).where(condition))
            row = result.mappings().first()
        if not row:
            return None
        return self._row_to_profile(row)

    def _row_to_profile(self, row) -> ProfileRecord:
        try:
            skills = skills_from_json(row["skills"])
        except ValueError as e:
            logger.error(f"Stored skills for {row['username']} are corrupt: {e}")
            raise StarstrawError(ErrorKind.VALUE_ERROR, str(e)) from e

        return ProfileRecord(
            id=row["id"],
            username=row["username"],
            skills=skills,
            metadata=ProfileMetadata.from_dict(row["metadata"]),
            joined=row["joined"],
        )
