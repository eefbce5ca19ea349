"""Account-id login with JWT session cookies.

Flow:
1. POST /api/start  -- creates a profile, returns its account id once and
   sets the session cookie
2. POST /api/return -- exchanges an account id (or secondary token) for a
   session cookie
3. Subsequent requests carry the JWT cookie; deps.py extracts the profile
4. POST /api/logout -- clears the cookie

The JWT subject is the hashed account id, so the cookie never contains
the secret the owner logs in with.
"""

import logging
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from starstraw.config import AuthConfig
from starstraw.errors import ErrorKind, StarstrawError
from starstraw.persistence.postgres import PostgresRepository
from starstraw.persistence.tokens import hash_token

from .responses import default_return

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/api", tags=["auth"])


# ---------------------------------------------------------------------------
# JWT helpers
# ---------------------------------------------------------------------------


def create_jwt(profile_id: str, secret: str, expiry_days: int = 365) -> str:
    """Create an HS256 JWT with the profile's hashed id."""
    payload = {
        "sub": profile_id,
        "iat": datetime.now(timezone.utc),
        "exp": datetime.now(timezone.utc) + timedelta(days=expiry_days),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def decode_jwt(token: str, secret: str) -> dict | None:
    """Decode and validate a JWT. Returns payload or None on failure."""
    try:
        return jwt.decode(token, secret, algorithms=["HS256"])
    except jwt.PyJWTError:
        return None


def set_session_cookie(response: Response, token: str, auth_config: AuthConfig) -> None:
    response.set_cookie(
        key=auth_config.cookie_name,
        value=token,
        httponly=True,
        secure=auth_config.cookie_secure,
        samesite="lax",
        max_age=auth_config.jwt_expiry_days * 86400,
        domain=auth_config.cookie_domain or None,
    )


# ---------------------------------------------------------------------------
# Helper to read config/repo from app state
# ---------------------------------------------------------------------------


def _require_auth_config(request: Request) -> AuthConfig:
    config = getattr(request.app.state, "auth_config", None)
    if config and config.enabled:
        return config
    raise StarstrawError(ErrorKind.NOT_ALLOWED, "Authentication is not configured")


def _get_repo(request: Request) -> PostgresRepository:
    return request.app.state.repo


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


class ProfileCreateRequest(BaseModel):
    username: str


class ProfileLoginRequest(BaseModel):
    id: str


@auth_router.post("/start")
async def create_profile(body: ProfileCreateRequest, request: Request):
    """Create a profile. Refused while already signed in."""
    auth_config = _require_auth_config(request)
    if request.cookies.get(auth_config.cookie_name):
        raise StarstrawError(ErrorKind.NOT_ALLOWED, "Already signed in")

    repo = _get_repo(request)
    account_id = await repo.create_profile(body.username)

    token = create_jwt(hash_token(account_id), auth_config.session_secret, auth_config.jwt_expiry_days)
    response = JSONResponse(default_return(True, account_id))
    set_session_cookie(response, token, auth_config)
    return response


@auth_router.post("/return")
async def login(body: ProfileLoginRequest, request: Request):
    """Sign in with an account id or secondary token."""
    auth_config = _require_auth_config(request)

    repo = _get_repo(request)
    profile = await repo.get_profile_by_unhashed(body.id)

    token = create_jwt(profile.id, auth_config.session_secret, auth_config.jwt_expiry_days)
    response = JSONResponse(default_return(True, body.id))
    set_session_cookie(response, token, auth_config)
    logger.info(f"Profile {profile.username} signed in")
    return response


@auth_router.post("/logout")
async def logout(request: Request):
    """Clear the session cookie."""
    auth_config = getattr(request.app.state, "auth_config", None) or AuthConfig()
    response = JSONResponse(default_return(True, "You have been signed out."))
    response.delete_cookie(auth_config.cookie_name, domain=auth_config.cookie_domain or None)
    return response
