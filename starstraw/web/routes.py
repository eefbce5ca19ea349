"""REST API endpoints for profile stats and skill administration."""

import logging
from typing import Callable

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from starstraw.errors import ErrorKind, StarstrawError
from starstraw.persistence.models import ProfileRecord
from starstraw.persistence.postgres import PostgresRepository
from starstraw.skills import (
    SkillCategory,
    SkillEntry,
    SkillManager,
    SkillName,
    SkillResult,
    SkillSet,
    skills_to_json,
)

from .deps import get_current_profile, get_repo
from .responses import default_return

logger = logging.getLogger(__name__)

router = APIRouter()


# === Request bodies ===


class SkillPayload(BaseModel):
    name: str
    category: str | None = None
    magnitude: float | None = None

    def to_entry(self) -> SkillEntry:
        """Build the entry, filling category and magnitude from the catalog."""
        try:
            entry = SkillEntry.of(SkillName.from_string(self.name), self.magnitude)
            if self.category is not None:
                category = SkillCategory.from_string(self.category)
                if category is not entry.category:
                    raise ValueError(
                        f"{entry.name.value} is a {entry.category.value} skill, "
                        f"not {category.value}"
                    )
        except ValueError as e:
            raise StarstrawError(ErrorKind.VALUE_ERROR, str(e)) from e
        return entry


class GrantSkillRequest(BaseModel):
    skill: SkillPayload


class RevokeSkillRequest(BaseModel):
    skill: str


class GrantTitleRequest(BaseModel):
    title: str


def _parse_name(value: str) -> SkillName:
    try:
        return SkillName.from_string(value)
    except ValueError as e:
        raise StarstrawError(ErrorKind.VALUE_ERROR, str(e)) from e


def _skills_response(result: SkillResult, skills: SkillSet) -> dict:
    if not result:
        raise StarstrawError(result.error or ErrorKind.OTHER, result.detail)
    return default_return(True, "Acceptable", skills_to_json(skills))


def _require_god(actor: ProfileRecord, action: str) -> SkillManager:
    """Raise NOT_ALLOWED unless ``actor`` holds the God title.

    ``actor`` comes from the session lookup, which always reads the
    database, so a title revoked elsewhere takes effect immediately.
    """
    manager = SkillManager(actor.skills)
    if manager.stats().title is not SkillName.GOD:
        logger.info(f"{actor.username} tried to {action} without the God title")
        raise StarstrawError(ErrorKind.NOT_ALLOWED)
    return manager


def _as_actor(
    actor: SkillManager, operation: Callable[[SkillManager], SkillResult]
) -> Callable[[SkillManager], SkillResult]:
    """Wrap ``operation`` so it only runs when ``actor`` may act on the target.

    The check runs against the target's skills as read under the row lock.
    """

    def run(target: SkillManager) -> SkillResult:
        if not actor.authorize_action(target):
            return SkillResult.failure(ErrorKind.NOT_ALLOWED)
        return operation(target)

    return run


# === Own profile ===


@router.get("/me")
async def my_stats(profile: ProfileRecord = Depends(get_current_profile)):
    """Derived stats of the signed-in profile."""
    return default_return(True, "", SkillManager(profile.skills).stats().to_dict())


@router.post("/me/token")
async def issue_secondary_token(
    profile: ProfileRecord = Depends(get_current_profile),
    repo: PostgresRepository = Depends(get_repo),
):
    """Issue a new secondary login token. It is only shown this once."""
    token = await repo.issue_secondary_token(profile.username)
    return default_return(True, token)


# === Other profiles ===


@router.get("/spirit/{username}")
async def get_spirit(
    username: str,
    repo: PostgresRepository = Depends(get_repo),
):
    """Public view of a profile."""
    profile = await repo.get_profile_by_username(username)
    return default_return(True, "", profile.to_public_dict())


@router.post("/spirit/{username}/grant")
async def grant_skill(
    username: str,
    body: GrantSkillRequest,
    actor: ProfileRecord = Depends(get_current_profile),
    repo: PostgresRepository = Depends(get_repo),
):
    """Grant a skill. Only profiles holding the God title may do this."""
    entry = body.skill.to_entry()
    manager = _require_god(actor, "grant a skill")

    result, skills = await repo.update_profile_skills(
        username, _as_actor(manager, lambda m: m.grant(entry))
    )
    if result:
        logger.info(f"{actor.username} granted {entry.name.value} to {username}")
    return _skills_response(result, skills)


@router.post("/spirit/{username}/revoke")
async def revoke_skill(
    username: str,
    body: RevokeSkillRequest,
    actor: ProfileRecord = Depends(get_current_profile),
    repo: PostgresRepository = Depends(get_repo),
):
    """Revoke every entry of a skill. Only profiles holding the God title may do this."""
    name = _parse_name(body.skill)
    manager = _require_god(actor, "revoke a skill")

    result, skills = await repo.update_profile_skills(
        username, _as_actor(manager, lambda m: m.revoke(name))
    )
    if result:
        logger.info(f"{actor.username} revoked {name.value} from {username}")
    return _skills_response(result, skills)


@router.post("/spirit/{username}/seed")
async def grant_title(
    username: str,
    body: GrantTitleRequest,
    actor: ProfileRecord = Depends(get_current_profile),
    repo: PostgresRepository = Depends(get_repo),
):
    """Set a profile's title. Only profiles holding the God title may do this.

    God itself cannot be handed out here; ``starstraw seed-title`` is the
    only way to create one.
    """
    name = _parse_name(body.title)
    manager = _require_god(actor, "set a title")
    if name is SkillName.GOD:
        logger.info(f"{actor.username} tried to set the God title on {username}")
        raise StarstrawError(ErrorKind.NOT_ALLOWED, "The God title cannot be granted")

    entry = SkillEntry.of(name)
    result, skills = await repo.update_profile_skills(
        username, _as_actor(manager, lambda m: m.set_title(entry))
    )
    if result:
        logger.info(f"{actor.username} set title of {username} to {name.value}")
    return _skills_response(result, skills)
