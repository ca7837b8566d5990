"""Open the service database described by application settings."""

from typing import TYPE_CHECKING, Optional

from fortune_store.io.database.handle import Database
from fortune_store.utils.logging import get_logger

if TYPE_CHECKING:
    from fortune_store.config.settings import Settings

logger = get_logger(__name__)


def open_database(settings: Optional["Settings"] = None) -> Database:
    """
    Open an instrumented handle to the configured database.

    Args:
        settings: Settings to use; defaults to ``get_settings()``

    Raises:
        ConnectError: If the database cannot be reached
    """
    if settings is None:
        from fortune_store.config import get_settings

        settings = get_settings()

    logger.info(
        "database.opening",
        host=settings.DATABASE_HOST,
        port=settings.DATABASE_PORT,
        name=settings.DATABASE_NAME,
        user=settings.DATABASE_USER,
    )
    return Database.open(settings.data_source(), settings.INSTANCE_ID)
