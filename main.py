"""Command-line interface for the user directory service and console."""

from __future__ import annotations
import argparse
import asyncio
import logging
import os
import sys
from typing import Sequence

try:
    import httpx  # noqa: F401
    import yaml
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'httpx' and 'PyYAML' packages are required. Execute `pip install -e .` to install dependencies."
    ) from exc

from userdir.config import ConsoleSettings, load_settings, resolve_config_path
from userdir.database import Database, resolve_database_path

logger = logging.getLogger("userdir.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User directory utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Initialise the directory database")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP user directory service")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the HTTP API (default: 8000)",
    )

    console_parser = subparsers.add_parser(
        "console", help="Launch the interactive user list console"
    )
    console_parser.add_argument(
        "--service-url",
        default=None,
        help=(
            "Base URL of a running user directory. Defaults to USERDIR_SERVICE_URL or the "
            "configuration file."
        ),
    )
    console_parser.add_argument(
        "--config",
        default=None,
        help="Path to the console YAML configuration (defaults to USERDIR_CONFIG)",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "console", "init-db"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _initialise_database() -> Database:
    db_path = resolve_database_path(os.getenv("USERDIR_DB_PATH"))
    database = Database(db_path)
    database.initialize()
    logger.info("Database initialised at %s", db_path)
    return database


def _serve(*, database: Database, host: str, port: int) -> None:
    from userdir.service import create_app
    import uvicorn

    logger.info("Starting user directory on http://%s:%s", host, port)
    app = create_app(database=database)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _load_console_settings(args: argparse.Namespace) -> ConsoleSettings:
    config_path = resolve_config_path(args.config or os.getenv("USERDIR_CONFIG"))
    service_url = args.service_url or os.getenv("USERDIR_SERVICE_URL")
    try:
        return load_settings(config_path, service_url=service_url)
    except (ValueError, yaml.YAMLError) as exc:
        raise SystemExit(f"Invalid console configuration: {exc}") from exc


async def _run_console(settings: ConsoleSettings) -> None:
    from userdir.client import HttpUserRepository
    from userdir.console import run_console
    from userdir.controller import UserListController

    print("User Directory Console")
    print(f"Connected to {settings.service_url}. Press Ctrl+C at any time to exit.\n")

    async with HttpUserRepository(settings.service_url, timeout=settings.timeout) as repository:
        controller = UserListController(repository)
        try:
            await run_console(controller)
        finally:
            controller.close()


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    args = _parse_args(argv)

    if args.command == "console":
        settings = _load_console_settings(args)
        level = getattr(logging, settings.log_level, logging.INFO)
    else:
        settings = ConsoleSettings()
        level = logging.INFO

    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(message)s")
    # basicConfig leaves the level alone when the root logger already has handlers
    logging.getLogger().setLevel(level)

    if args.command == "serve":
        _serve(database=_initialise_database(), host=args.host, port=args.port)
    elif args.command == "console":
        try:
            asyncio.run(_run_console(settings))
        except KeyboardInterrupt:
            print("\nExiting user console.")
    elif args.command == "init-db":
        _initialise_database()
        print("Database initialisation complete.")


if __name__ == "__main__":
    main()
