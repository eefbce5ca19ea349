"""
Command-line interface for Starstraw.

Usage:
    python -m starstraw.cli serve                      Start the web server
    python -m starstraw.cli init-db                    Create database tables
    python -m starstraw.cli create-profile NAME        Create a profile, print its account id
    python -m starstraw.cli seed-title NAME TITLE      Set a title directly in the store
"""

import argparse
import asyncio
import logging
import sys

from starstraw.config import Config, load_config, setup_logging
from starstraw.errors import StarstrawError

logger = logging.getLogger(__name__)


def _create_repo(cfg: Config):
    from sqlalchemy.ext.asyncio import create_async_engine

    from starstraw.persistence import PostgresRepository, ProfileCache

    engine = create_async_engine(cfg.database.url, pool_size=cfg.database.pool_max_size)
    return PostgresRepository(engine, ProfileCache(enabled=cfg.cache.enabled))


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the web server."""
    import uvicorn

    cfg = args.config_obj
    host = args.host or cfg.server.host
    port = args.port or cfg.server.port

    async def setup_and_run():
        from starstraw.web.app import create_app

        from sqlalchemy.ext.asyncio import create_async_engine

        from starstraw.persistence import PostgresRepository, ProfileCache

        engine = create_async_engine(cfg.database.url, pool_size=cfg.database.pool_max_size)
        repo = PostgresRepository(engine, ProfileCache(enabled=cfg.cache.enabled))
        if args.init_db:
            await repo.init()

        app = create_app(engine=engine)
        app.state.repo = repo
        app.state.auth_config = cfg.auth

        print(f"API docs: http://{host}:{port}/docs")
        print()

        config = uvicorn.Config(app, host=host, port=port, log_level="info")
        server = uvicorn.Server(config)
        await server.serve()

        await repo.close()

    try:
        asyncio.run(setup_and_run())
    except KeyboardInterrupt:
        print("\nServer stopped.")

    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create the profile table."""

    async def run():
        repo = _create_repo(args.config_obj)
        try:
            await repo.init()
        finally:
            await repo.close()

    asyncio.run(run())
    print("Database initialized.")
    return 0


def cmd_create_profile(args: argparse.Namespace) -> int:
    """Create a profile and print its account id."""

    async def run() -> str:
        repo = _create_repo(args.config_obj)
        try:
            return await repo.create_profile(args.username)
        finally:
            await repo.close()

    try:
        account_id = asyncio.run(run())
    except StarstrawError as e:
        print(f"Error: {e}")
        return 1

    print(f"Created {args.username.lower()}. Account id (shown once): {account_id}")
    return 0


def cmd_seed_title(args: argparse.Namespace) -> int:
    """Write a title straight into the store.

    This skips grant validity, so it is the only way to hand out God.
    """
    from starstraw.skills import SkillCategory, SkillEntry, SkillName

    try:
        name = SkillName.from_string(args.title)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    if name.category is not SkillCategory.TITLE:
        print(f"Error: {name.value} is not a title")
        return 1

    entry = SkillEntry.of(name)

    async def run():
        repo = _create_repo(args.config_obj)
        try:
            return await repo.update_profile_skills(args.username, lambda m: m.set_title(entry))
        finally:
            await repo.close()

    try:
        result, _ = asyncio.run(run())
    except StarstrawError as e:
        print(f"Error: {e}")
        return 1

    if not result:
        print(f"Error: {result.detail}")
        return 1

    logger.warning(f"Seeded title {name.value} on {args.username}")
    print(f"{args.username.lower()} now holds the {name.value} title.")
    return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Starstraw - authentication back-end that feels like a game",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--log-level",
        "-l",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level override",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start the web server")
    serve_parser.add_argument("--host", type=str, default=None, help="Bind host")
    serve_parser.add_argument("--port", "-p", type=int, default=None, help="Bind port")
    serve_parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create missing tables before serving",
    )
    serve_parser.set_defaults(func=cmd_serve)

    # init-db command
    init_parser = subparsers.add_parser("init-db", help="Create database tables")
    init_parser.set_defaults(func=cmd_init_db)

    # create-profile command
    create_parser = subparsers.add_parser("create-profile", help="Create a profile")
    create_parser.add_argument("username", type=str)
    create_parser.set_defaults(func=cmd_create_profile)

    # seed-title command
    seed_parser = subparsers.add_parser(
        "seed-title", help="Set a profile's title directly, bypassing grant rules"
    )
    seed_parser.add_argument("username", type=str)
    seed_parser.add_argument("title", type=str, help="Title name, e.g. God")
    seed_parser.set_defaults(func=cmd_seed_title)

    args = parser.parse_args()

    config = load_config(args.config)
    if args.log_level:
        config.logging.level = args.log_level
    setup_logging(config.logging)
    args.config_obj = config

    if args.command is None:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
