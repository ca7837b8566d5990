"""Alembic environment for the fortune schema.

``migration_runner`` hands over an open connection through
``config.attributes["connection"]``; the ``alembic`` command line falls back
to the database configured through ``fortune_store.config``.
"""

from __future__ import annotations

from alembic import context
from sqlalchemy import create_engine, pool

from fortune_store.config import get_settings
from fortune_store.utils.logging import get_logger

config = context.config

logger = get_logger("fortune_store.io.schema.migrations.env")

target_metadata = None


def _database_url() -> str:
    url = config.get_main_option("sqlalchemy.url")
    if url:
        return url
    return get_settings().data_source().dsn()


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = _database_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()

    logger.info("migrations.completed_offline", url=url)


def run_migrations_online() -> None:
    """Run migrations in 'online' mode, on the caller's connection when given."""
    connection = config.attributes.get("connection")
    if connection is not None:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()
        logger.info("migrations.completed_online", url=str(connection.engine.url))
        return

    url = _database_url()
    connectable = create_engine(url, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()

    logger.info("migrations.completed_online", url=url)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
