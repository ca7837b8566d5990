"""
Instrumented database access.

Exports the handle, the data source locator, the query context and the error
types callers are expected to catch.
"""

from .context import QueryContext
from .dsn import DataSource, redact_password
from .handle import Database, DatabaseConnection, PreparedStatement, Row
from .models import (
    ArityMismatchError,
    ChunkExecutionError,
    ConnectError,
    DatabaseClosedError,
    DatabaseError,
    DeadlineExceededError,
    MigrationError,
    NoRowsError,
    PoolError,
    QueryCancelledError,
    QueryError,
    QueryLogEntry,
    TooManyColumnsError,
    UnrecoverableMigrationError,
    UnreleasedHandleError,
    UnsupportedValueError,
)
from .query_logging import QueryLogger, set_query_logging_disabled

__all__ = [
    "ArityMismatchError",
    "ChunkExecutionError",
    "ConnectError",
    "DataSource",
    "Database",
    "DatabaseClosedError",
    "DatabaseConnection",
    "DatabaseError",
    "DeadlineExceededError",
    "MigrationError",
    "NoRowsError",
    "PoolError",
    "PreparedStatement",
    "QueryCancelledError",
    "QueryContext",
    "QueryError",
    "QueryLogEntry",
    "QueryLogger",
    "Row",
    "TooManyColumnsError",
    "UnrecoverableMigrationError",
    "UnreleasedHandleError",
    "UnsupportedValueError",
    "redact_password",
    "set_query_logging_disabled",
]
