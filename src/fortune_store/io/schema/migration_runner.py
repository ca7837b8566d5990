"""Programmatic helpers for invoking Alembic migrations.

Migrations ship inside the package (``io/schema/migrations``) and run on a
connection borrowed from the instrumented handle's engine, so the revision
chain always targets exactly the database the handle is bound to.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.util import CommandError
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from fortune_store.io.database.dsn import DataSource
from fortune_store.io.database.handle import Database
from fortune_store.io.database.models import (
    DatabaseError,
    MigrationError,
    UnrecoverableMigrationError,
)
from fortune_store.io.schema import admin
from fortune_store.utils.logging import get_logger

LOGGER = get_logger("fortune_store.io.schema.migration_runner")

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def _build_config(connection: Optional[Connection] = None) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    if connection is not None:
        cfg.attributes["connection"] = connection
    return cfg


def upgrade(db: Database, revision: str = "head") -> None:
    """Run ``alembic upgrade`` against the handle's database.

    Being at ``revision`` already is success.
    """
    with db.engine.begin() as connection:
        command.upgrade(_build_config(connection), revision)
    LOGGER.info("alembic.upgrade", revision=revision, url=str(db.engine.url))


def current_revision(db: Database) -> Optional[str]:
    """Revision the database is stamped with, or None when unmigrated."""
    with db.engine.connect() as connection:
        return MigrationContext.configure(connection).get_current_revision()


def try_to_migrate(db: Database) -> None:
    """
    Apply all pending migrations.

    Raises:
        MigrationError: ``recreate`` is True when the migration itself failed
            and may have left partial state (drop and recreate, then retry);
            False when the database could not be reached at all (abort).
    """
    try:
        db.execute("SELECT 1")
    except DatabaseError as exc:
        raise MigrationError(f"connecting for migration: {exc}", recreate=False) from exc

    try:
        upgrade(db)
    except (SQLAlchemyError, CommandError) as exc:
        LOGGER.error("alembic.upgrade_failed", error=str(exc), url=str(db.engine.url))
        raise MigrationError(f"migrating database: {exc}", recreate=True) from exc


def setup_database(source: DataSource, instance_id: str = "") -> Database:
    """
    Create the database if absent, migrate it, and return an open handle.

    A migration failure that leaves partial state triggers exactly one
    drop, recreate and retry.

    Raises:
        MigrationError: The database could not be migrated for a reason a
            recreate would not fix.
        UnrecoverableMigrationError: Migration failed again after recreating.
    """
    admin.create_database_if_not_exists(source)
    db = Database.open(source, instance_id)
    try:
        try_to_migrate(db)
        return db
    except MigrationError as exc:
        db.close()
        if not exc.recreate:
            raise
        LOGGER.warning("migration.recreating", database=source.database, error=str(exc))
    except BaseException:
        db.close()
        raise

    admin.recreate_database(source)
    db = Database.open(source, instance_id)
    try:
        try_to_migrate(db)
    except MigrationError as exc:
        db.close()
        raise UnrecoverableMigrationError(
            f"unfixable error migrating database {source.database}: {exc}. "
            "Consider dropping the test databases and starting over",
            recreate=False,
        ) from exc
    except BaseException:
        db.close()
        raise
    return db
