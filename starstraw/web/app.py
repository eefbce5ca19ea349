"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from starstraw.errors import ErrorKind, StarstrawError

from .auth import auth_router
from .responses import default_return, error_response
from .routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage async engine lifecycle."""
    from sqlalchemy.ext.asyncio import create_async_engine

    from starstraw.config import load_config
    from starstraw.persistence import PostgresRepository, ProfileCache

    config = load_config()

    # Engine may be pre-created by CLI and stored on app.state
    if not getattr(app.state, "engine", None):
        app.state.engine = create_async_engine(
            config.database.url,
            pool_size=config.database.pool_max_size,
        )

    if not getattr(app.state, "repo", None):
        app.state.repo = PostgresRepository(
            app.state.engine, ProfileCache(enabled=config.cache.enabled)
        )

    # Store auth config (may already be set by CLI)
    if not getattr(app.state, "auth_config", None):
        app.state.auth_config = config.auth

    if not app.state.auth_config.enabled:
        logger.warning("AUTH_SESSION_SECRET is not set; sign-in is disabled")

    yield

    if hasattr(app.state, "engine") and app.state.engine:
        await app.state.engine.dispose()


def create_app(engine=None) -> FastAPI:
    """Create FastAPI application.

    Args:
        engine: Optional AsyncEngine. If None, created in lifespan from config.
    """
    app = FastAPI(
        title="Starstraw API",
        description="Profiles, skills, and skill-based authorization",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Pre-set engine if provided (lifespan will use it instead of creating one)
    if engine is not None:
        app.state.engine = engine

    app.include_router(router, prefix="/api")
    app.include_router(auth_router)

    @app.exception_handler(StarstrawError)
    async def starstraw_error_handler(request: Request, exc: StarstrawError) -> JSONResponse:
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return error_response(StarstrawError(ErrorKind.VALUE_ERROR))

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception(f"Storage failure on {request.url.path}: {exc}")
        return error_response(StarstrawError(ErrorKind.STORAGE_FAILURE))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return JSONResponse(
                default_return(False, "Path does not exist", 404), status_code=404
            )
        return JSONResponse(
            default_return(False, str(exc.detail), exc.status_code),
            status_code=exc.status_code,
        )

    return app
