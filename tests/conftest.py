"""
Pytest configuration and fixtures for starstraw tests.
"""

import copy
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from starstraw.config import AuthConfig
from starstraw.errors import ErrorKind, StarstrawError
from starstraw.persistence.models import ProfileMetadata, ProfileRecord
from starstraw.persistence.postgres import validate_username
from starstraw.persistence.tokens import generate_token, hash_token
from starstraw.skills import SkillEntry, SkillManager, SkillName, default_skills
from starstraw.web.app import create_app
from starstraw.web.auth import create_jwt

TEST_SECRET = "test-secret-key-for-jwt-signing"


class InMemoryRepository:
    """Stand-in for PostgresRepository with the same async interface."""

    def __init__(self):
        self.profiles: dict[str, ProfileRecord] = {}  # username -> record

    def add_profile(self, username: str, skills=None) -> str:
        """Synchronously store a profile and return its unhashed account id."""
        account_id = generate_token()
        self.profiles[username.lower()] = ProfileRecord(
            id=hash_token(account_id),
            username=username.lower(),
            skills=list(skills) if skills is not None else default_skills(),
            metadata=ProfileMetadata(),
            joined=datetime(2026, 1, 15, tzinfo=timezone.utc),
        )
        return account_id

    async def create_profile(self, username: str) -> str:
        username = username.lower()
        validate_username(username)
        if username in self.profiles:
            raise StarstrawError(ErrorKind.MUST_BE_UNIQUE)
        return self.add_profile(username)

    async def get_profile_by_hashed(self, hashed: str) -> ProfileRecord:
        for profile in self.profiles.values():
            if profile.id == hashed:
                return copy.deepcopy(profile)
        raise StarstrawError(ErrorKind.NOT_FOUND)

    async def get_profile_by_unhashed(self, unhashed: str) -> ProfileRecord:
        try:
            return await self.get_profile_by_hashed(hash_token(unhashed))
        except StarstrawError:
            return await self.get_profile_by_unhashed_st(unhashed)

    async def get_profile_by_unhashed_st(self, unhashed: str) -> ProfileRecord:
        for profile in self.profiles.values():
            if profile.metadata.secondary_token == hash_token(unhashed):
                return copy.deepcopy(profile)
        raise StarstrawError(ErrorKind.NOT_FOUND)

    async def get_profile_by_username(self, username: str) -> ProfileRecord:
        profile = self.profiles.get(username.lower())
        if not profile:
            raise StarstrawError(ErrorKind.NOT_FOUND)
        return copy.deepcopy(profile)

    async def update_profile_skills(self, name: str, operation):
        profile = self.profiles.get(name.lower())
        if not profile:
            raise StarstrawError(ErrorKind.NOT_FOUND)
        manager = SkillManager(profile.skills)
        result = operation(manager)
        if result:
            profile.skills = list(manager.skills)
        return result, manager.skills

    async def issue_secondary_token(self, name: str) -> str:
        token = generate_token()
        self.profiles[name.lower()].metadata.secondary_token = hash_token(token)
        return token


@pytest.fixture
def auth_config():
    return AuthConfig(session_secret=TEST_SECRET, cookie_name="session", cookie_secure=False)


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def app(repo, auth_config):
    """App wired to the in-memory repository (lifespan is not run)."""
    app = create_app()
    app.state.repo = repo
    app.state.auth_config = auth_config
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def client_for(app, repo, auth_config):
    """Build a client signed in as ``username``, creating the profile first."""

    def _make(username: str, skills=None) -> TestClient:
        account_id = repo.add_profile(username, skills)
        token = create_jwt(hash_token(account_id), auth_config.session_secret)
        return TestClient(app, cookies={auth_config.cookie_name: token})

    return _make


@pytest.fixture
def god_skills():
    return [SkillEntry.of(SkillName.GOD)]
