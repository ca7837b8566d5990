"""
Database administration: create, drop and reset whole databases.

Server-level statements (CREATE/DROP DATABASE) run on a short-lived handle
with no database selected. SQLite has no server, so a database is a file and
these helpers operate on the file instead.

Usage:
    >>> source = DataSource(password="example", database="fortune_db")
    >>> create_database_if_not_exists(source)
    True
    >>> db = Database.open(source)
    >>> reset_database(db)
    ['fortune_cookies']
"""

from pathlib import Path
from typing import List

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from fortune_store.infrastructure.sql import quote_identifier
from fortune_store.io.database.dsn import DataSource
from fortune_store.io.database.handle import Database
from fortune_store.io.database.models import DatabaseError
from fortune_store.utils.logging import get_logger

MYSQL_CHARSET = "utf8mb4"
MYSQL_COLLATION = "utf8mb4_unicode_ci"

# Bookkeeping tables that survive a reset.
PRESERVED_TABLES = frozenset({"alembic_version"})

logger = get_logger(__name__)


def _sqlite_path(source: DataSource) -> Path:
    if not source.database or source.database == ":memory:":
        raise DatabaseError("SQLite administration needs a file database")
    return Path(source.database)


def _require_name(source: DataSource) -> str:
    if not source.database:
        raise DatabaseError(f"no database selected in {source.redacted()}")
    return source.database


def _open_server(source: DataSource) -> Database:
    return Database.open(source.server(), instance_id="admin")


def database_exists(source: DataSource) -> bool:
    """Whether the database named by ``source`` exists on its server."""
    if source.dialect == "sqlite":
        return _sqlite_path(source).exists()

    name = _require_name(source)
    server = _open_server(source)
    try:
        if source.dialect == "postgresql":
            query = f"SELECT datname FROM pg_database WHERE datname = {server.placeholder}"
        else:
            query = (
                "SELECT SCHEMA_NAME FROM INFORMATION_SCHEMA.SCHEMATA "
                f"WHERE SCHEMA_NAME = {server.placeholder}"
            )
        return server.query_row(query, name).found
    finally:
        server.close()


def create_database(source: DataSource) -> None:
    """Create the database; fails if it already exists."""
    if source.dialect == "sqlite":
        path = _sqlite_path(source)
        if path.exists():
            raise DatabaseError(f"database {path} already exists")
        path.parent.mkdir(parents=True, exist_ok=True)
        Database.open(source, instance_id="admin").close()
        logger.info("database.created", name=str(path))
        return

    name = _require_name(source)
    statement = f"CREATE DATABASE {quote_identifier(name, source.dialect)}"
    if source.dialect == "mysql":
        statement += f" CHARACTER SET {MYSQL_CHARSET} COLLATE {MYSQL_COLLATION}"

    server = _open_server(source)
    try:
        server.execute(statement)
    finally:
        server.close()
    logger.info("database.created", name=name)


def create_database_if_not_exists(source: DataSource) -> bool:
    """Create the database unless present; returns True when it was created."""
    if database_exists(source):
        return False
    create_database(source)
    return True


def drop_database(source: DataSource) -> None:
    """Drop the database; fails if it does not exist."""
    if source.dialect == "sqlite":
        path = _sqlite_path(source)
        if not path.exists():
            raise DatabaseError(f"database {path} does not exist")
        path.unlink()
        logger.info("database.dropped", name=str(path))
        return

    name = _require_name(source)
    server = _open_server(source)
    try:
        server.execute(f"DROP DATABASE {quote_identifier(name, source.dialect)}")
    finally:
        server.close()
    logger.info("database.dropped", name=name)


def recreate_database(source: DataSource) -> None:
    """Drop the database if present, then create it empty."""
    if database_exists(source):
        drop_database(source)
    create_database(source)


def mutable_tables(db: Database) -> List[str]:
    """Tables whose rows a reset removes, i.e. every table but bookkeeping."""
    try:
        names = inspect(db.engine).get_table_names()
    except SQLAlchemyError as exc:
        raise DatabaseError(f"listing tables: {exc}") from exc
    return sorted(name for name in names if name not in PRESERVED_TABLES)


def reset_database(db: Database) -> List[str]:
    """
    Empty every mutable table with referential-integrity checks disabled.

    The checks are switched off and back on for the same pinned connection,
    so foreign keys between tables do not constrain the truncation order.

    Returns:
        Names of the tables that were emptied
    """
    tables = mutable_tables(db)
    if not tables:
        return tables

    quoted = [quote_identifier(table, db.dialect) for table in tables]
    with db.connection() as conn:
        if db.dialect == "postgresql":
            conn.execute(f"TRUNCATE TABLE {', '.join(quoted)} RESTART IDENTITY CASCADE")
        elif db.dialect == "sqlite":
            conn.execute("PRAGMA foreign_keys = OFF")
            try:
                for table in quoted:
                    conn.execute(f"DELETE FROM {table}")
                if conn.query_row(
                    "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'sqlite_sequence'"
                ).found:
                    conn.execute("DELETE FROM sqlite_sequence")
            finally:
                conn.execute("PRAGMA foreign_keys = ON")
        else:
            conn.execute("SET FOREIGN_KEY_CHECKS = 0")
            try:
                for table in quoted:
                    conn.execute(f"TRUNCATE TABLE {table}")
            finally:
                conn.execute("SET FOREIGN_KEY_CHECKS = 1")

    logger.debug("database.reset", tables=tables)
    return tables
