"""CLI entry point for tasksync."""

import argparse
from pathlib import Path

from . import __version__
from .config import Settings
from .logging import setup_logging


def _parse_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in ("1", "true", "yes", "y"):
        return True
    if lowered in ("0", "false", "no", "n"):
        return False
    raise argparse.ArgumentTypeError(f"Expected a boolean, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tasksync",
        description="Offline-first task store with batched sync to a remote API",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Path to the SQLite database (default: tasksync.db)",
    )
    parser.add_argument(
        "--api-url",
        default=None,
        help="Base URL of the remote sync API",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v for INFO, -vv for DEBUG)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Path to write logs to file",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("sync", help="Send queued mutations to the remote")
    commands.add_parser("status", help="Show the number of queued mutations")
    commands.add_parser("health", help="Check whether the remote is reachable")

    add = commands.add_parser("add", help="Create a task")
    add.add_argument("title")
    add.add_argument("--description", default=None)
    add.add_argument("--completed", type=_parse_bool, default=False)

    update = commands.add_parser("update", help="Update a task")
    update.add_argument("task_id")
    update.add_argument("--title", default=None)
    update.add_argument("--description", default=None)
    update.add_argument("--completed", type=_parse_bool, default=None)

    delete = commands.add_parser("delete", help="Delete a task")
    delete.add_argument("task_id")

    show = commands.add_parser("show", help="Show one task")
    show.add_argument("task_id")

    commands.add_parser("list", help="List tasks")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    settings_kwargs: dict = {}
    if args.db:
        settings_kwargs["database_path"] = args.db
    if args.api_url:
        settings_kwargs["api_base_url"] = args.api_url
    if args.verbose:
        settings_kwargs["verbose"] = args.verbose
    if args.log_file:
        settings_kwargs["log_file"] = args.log_file

    settings = Settings(**settings_kwargs)
    setup_logging(settings.verbose, settings.log_file)

    # Import here so --help and --version stay cheap
    from .cli.commands import (
        build_task_service,
        run_health,
        run_status,
        run_sync,
        run_task_command,
    )
    from .remote import SyncClient
    from .repositories import Database
    from .sync import SyncEngine

    with Database(settings.database_path) as db:
        if args.command in ("sync", "status", "health"):
            config = settings.sync_config()
            with SyncClient(config.base_url, timeout=config.sync_timeout) as client:
                engine = SyncEngine.create(db, config, client)
                runner = {"sync": run_sync, "status": run_status, "health": run_health}
                exit_code = runner[args.command](engine)
        else:
            exit_code = run_task_command(
                build_task_service(db),
                args.command,
                task_id=getattr(args, "task_id", None),
                title=getattr(args, "title", None),
                description=getattr(args, "description", None),
                completed=getattr(args, "completed", None),
            )

    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
