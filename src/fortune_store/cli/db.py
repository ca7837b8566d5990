"""
Database administration CLI.

Usage:
    python -m fortune_store.cli <command> [options]
    fortune-db <command> [options]

Available commands:
    create    - Create the database
    migrate   - Apply pending migrations
    drop      - Drop the database
    truncate  - Empty every table except migration bookkeeping
    recreate  - Drop, create and migrate the database

Examples:
    fortune-db create
    fortune-db migrate --database fortune_mysql_test_0
    fortune-db truncate --url sqlite:///./fortune_dev.db
"""

import argparse
import sys
from typing import List, Optional

from fortune_store.config import get_settings
from fortune_store.io.database.dsn import DataSource
from fortune_store.io.database.handle import Database
from fortune_store.io.database.models import DatabaseError
from fortune_store.io.schema import admin, migration_runner
from fortune_store.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

COMMANDS = ("create", "migrate", "drop", "truncate", "recreate")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fortune-db",
        description="Fortune Store database administration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fortune-db create
  fortune-db migrate --database fortune_mysql_test_0
  fortune-db recreate --url sqlite:///./fortune_dev.db
        """,
    )
    parser.add_argument("command", choices=COMMANDS, help="Command to execute")
    parser.add_argument(
        "--database",
        type=str,
        default=None,
        help="Database name (defaults to DATABASE_NAME)",
    )
    parser.add_argument(
        "--url",
        type=str,
        default=None,
        help="Full database URL, overriding the DATABASE_* settings",
    )
    return parser


def _resolve_source(args: argparse.Namespace) -> DataSource:
    source = DataSource.from_url(args.url) if args.url else get_settings().data_source()
    if args.database:
        source = source.for_database(args.database)
    return source


def _create(source: DataSource) -> None:
    if admin.create_database_if_not_exists(source):
        print(f"Created database {source.database}")
    else:
        print(f"Database {source.database} already exists")


def _migrate(source: DataSource) -> None:
    db = Database.open(source, "devtools")
    try:
        migration_runner.try_to_migrate(db)
        print(f"Database {source.database} is at {migration_runner.current_revision(db)}")
    finally:
        db.close()


def _drop(source: DataSource) -> None:
    if not admin.database_exists(source):
        print(f"Database {source.database} does not exist")
        return
    admin.drop_database(source)
    print(f"Dropped database {source.database}")


def _truncate(source: DataSource) -> None:
    db = Database.open(source, "devtools")
    try:
        tables = admin.reset_database(db)
    finally:
        db.close()
    print(f"Truncated {len(tables)} table(s) in {source.database}")


def _recreate(source: DataSource) -> None:
    admin.recreate_database(source)
    print(f"Recreated database {source.database}")
    _migrate(source)


HANDLERS = {
    "create": _create,
    "migrate": _migrate,
    "drop": _drop,
    "truncate": _truncate,
    "recreate": _recreate,
}


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = _build_parser().parse_args(argv)

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_DEV_MODE)

    source = _resolve_source(args)
    try:
        HANDLERS[args.command](source)
    except DatabaseError as exc:
        logger.error("cli.command_failed", command=args.command, error=str(exc))
        print(f"{args.command} failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
