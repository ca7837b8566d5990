"""
Fortune repository: the reads and writes the fortune HTTP service performs.

Usage:
    repo = FortuneRepository(db)
    repo.insert_fortunes(["You will write fewer bugs.", "Beware of ides."])
    fortune = repo.random_fortune()
"""

from typing import Optional, Sequence

from fortune_store.io.database.context import QueryContext
from fortune_store.io.database.handle import Database
from fortune_store.utils.logging import get_logger

logger = get_logger(__name__)

TABLE_NAME = "fortune_cookies"
VALUE_COLUMN = "value"

_RANDOM_FUNCTIONS = {"mysql": "RAND()", "postgresql": "RANDOM()", "sqlite": "RANDOM()"}


class FortuneRepository:
    """
    Repository for fortune cookie rows.

    Args:
        db: Instrumented handle bound to a migrated fortune database
    """

    def __init__(self, db: Database):
        self.db = db

    def insert_fortunes(
        self, records: Sequence[str], ctx: Optional[QueryContext] = None
    ) -> int:
        """
        Store decoded fortune texts, one row each.

        Returns:
            Number of records submitted
        """
        self.db.bulk_insert(TABLE_NAME, [VALUE_COLUMN], list(records), ctx=ctx)
        logger.debug("fortunes.inserted", count=len(records))
        return len(records)

    def random_fortune(self, ctx: Optional[QueryContext] = None) -> str:
        """
        Pick one stored fortune at random.

        Raises:
            NoRowsError: If no fortunes are stored
        """
        order = _RANDOM_FUNCTIONS.get(self.db.dialect, "RANDOM()")
        row = self.db.query_row(
            f"SELECT {VALUE_COLUMN} FROM {TABLE_NAME} ORDER BY {order} LIMIT 1", ctx=ctx
        )
        return row.scalar()
