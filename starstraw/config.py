"""Configuration management for the Starstraw service."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass
class AuthConfig:
    """Session cookie configuration.

    If session_secret is empty, auth is disabled and every endpoint that
    needs a profile answers "not allowed".
    """

    session_secret: str = ""  # HS256 signing key for JWT cookies
    cookie_name: str = "__Secure-Token"
    cookie_domain: str = ""  # empty = use request host
    cookie_secure: bool = True  # set False for local HTTP dev
    jwt_expiry_days: int = 365

    @property
    def enabled(self) -> bool:
        return bool(self.session_secret)


@dataclass
class DatabaseConfig:
    """PostgreSQL database configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "starstraw"
    user: str = "starstraw"
    password: str = "starstraw"
    pool_max_size: int = 10

    @property
    def url(self) -> str:
        """Async SQLAlchemy connection URL."""
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )


@dataclass
class CacheConfig:
    """Profile cache configuration."""

    enabled: bool = True


@dataclass
class ServerConfig:
    """HTTP server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


@dataclass
class Config:
    """Main configuration container."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to config file. Defaults to config/default.yaml

    Returns:
        Populated Config dataclass
    """
    if config_path is None:
        candidates = [
            Path("config/default.yaml"),
            Path(__file__).parent.parent / "config" / "default.yaml",
        ]
        for candidate in candidates:
            if candidate.exists():
                config_path = str(candidate)
                break

    config = Config()

    if config_path and Path(config_path).exists():
        with open(config_path) as f:
            data = yaml.safe_load(f)

        if data:
            if "database" in data:
                config.database = DatabaseConfig(**data["database"])
            if "auth" in data:
                config.auth = AuthConfig(**data["auth"])
            if "cache" in data:
                config.cache = CacheConfig(**data["cache"])
            if "server" in data:
                config.server = ServerConfig(**data["server"])
            if "logging" in data:
                config.logging = LoggingConfig(**data["logging"])

    # Environment variable overrides
    if os.environ.get("STARSTRAW_DB_HOST"):
        config.database.host = os.environ["STARSTRAW_DB_HOST"]
    if os.environ.get("STARSTRAW_DB_PORT"):
        config.database.port = int(os.environ["STARSTRAW_DB_PORT"])
    if os.environ.get("STARSTRAW_DB_NAME"):
        config.database.database = os.environ["STARSTRAW_DB_NAME"]
    if os.environ.get("STARSTRAW_DB_USER"):
        config.database.user = os.environ["STARSTRAW_DB_USER"]
    if os.environ.get("STARSTRAW_DB_PASSWORD"):
        config.database.password = os.environ["STARSTRAW_DB_PASSWORD"]
    if os.environ.get("STARSTRAW_LOG_LEVEL"):
        config.logging.level = os.environ["STARSTRAW_LOG_LEVEL"]
    if os.environ.get("STARSTRAW_PORT"):
        config.server.port = int(os.environ["STARSTRAW_PORT"])

    # Auth overrides
    if os.environ.get("AUTH_SESSION_SECRET"):
        config.auth.session_secret = os.environ["AUTH_SESSION_SECRET"]
    if os.environ.get("AUTH_COOKIE_SECURE"):
        config.auth.cookie_secure = os.environ["AUTH_COOKIE_SECURE"].lower() == "true"

    return config


def setup_logging(config: LoggingConfig) -> None:
    """
    Configure logging based on configuration.

    Args:
        config: Logging configuration
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.file))

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger.info(f"Logging configured at level {config.level}")
