"""FastAPI dependency injection."""

from fastapi import Request

from starstraw.config import AuthConfig
from starstraw.errors import ErrorKind, StarstrawError
from starstraw.persistence.models import ProfileRecord
from starstraw.persistence.postgres import PostgresRepository
from starstraw.web.auth import decode_jwt


def get_repo(request: Request) -> PostgresRepository:
    """Provide the PostgresRepository from app state."""
    return request.app.state.repo


def get_auth_config(request: Request) -> AuthConfig | None:
    """Return AuthConfig if auth is enabled, else None."""
    config = getattr(request.app.state, "auth_config", None)
    if config and config.enabled:
        return config
    return None


async def get_current_profile(request: Request) -> ProfileRecord:
    """Require a signed-in profile. Raises NOT_ALLOWED otherwise."""
    auth_config = get_auth_config(request)
    if not auth_config:
        raise StarstrawError(ErrorKind.NOT_ALLOWED, "Authentication is not configured")

    token = request.cookies.get(auth_config.cookie_name)
    if not token:
        raise StarstrawError(ErrorKind.NOT_ALLOWED, "Not authenticated")

    payload = decode_jwt(token, auth_config.session_secret)
    if not payload:
        raise StarstrawError(ErrorKind.NOT_ALLOWED, "Invalid or expired session")

    repo = get_repo(request)
    try:
        return await repo.get_profile_by_hashed(payload["sub"])
    except StarstrawError as e:
        if e.kind is ErrorKind.NOT_FOUND:
            raise StarstrawError(ErrorKind.NOT_ALLOWED, "Profile no longer exists") from e
        raise
