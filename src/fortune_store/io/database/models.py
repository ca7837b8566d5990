"""Error hierarchy and value types shared by the database layer."""

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional, Protocol, Sequence, TypeVar, Union

ScalarValue = Union[None, bool, int, float, Decimal, str, bytes, datetime, date, time]
"""Values that may be bound positionally into a parameterized statement."""

SCALAR_TYPES = (bool, int, float, Decimal, str, bytes, datetime, date, time)

T_co = TypeVar("T_co", covariant=True)


class RowConsumer(Protocol[T_co]):
    """Turns one decoded result row into a caller-defined value."""

    def __call__(self, row: Sequence[Any]) -> T_co: ...


class DatabaseError(Exception):
    """Base class for every error raised by the database layer."""


class ConnectError(DatabaseError):
    """Raised when a handle cannot be opened or the store does not answer a ping."""


class DatabaseClosedError(DatabaseError):
    """Raised when a handle is used after close()."""


class QueryError(DatabaseError):
    """Raised when the driver rejects a statement."""

    def __init__(self, message: str, correlation_id: Optional[str] = None):
        super().__init__(message)
        self.correlation_id = correlation_id


class QueryCancelledError(DatabaseError):
    """Raised when the caller cancelled the statement."""

    reason = "context canceled"

    def __init__(self, message: Optional[str] = None, correlation_id: Optional[str] = None):
        super().__init__(message or self.reason)
        self.correlation_id = correlation_id


class DeadlineExceededError(QueryCancelledError):
    """Raised when the caller's deadline expired before the statement finished."""

    reason = "context deadline exceeded"


class NoRowsError(DatabaseError):
    """The row query returned an empty result set."""


class ArityMismatchError(DatabaseError, ValueError):
    """The flat value list does not split evenly into rows."""


class TooManyColumnsError(DatabaseError, ValueError):
    """A single row needs more parameters than one statement may carry."""


class UnsupportedValueError(DatabaseError, TypeError):
    """A bound value is not a scalar the driver can bind."""


class ChunkExecutionError(DatabaseError):
    """One chunk of a bulk insert failed; earlier chunks stay committed."""

    def __init__(self, table: str, start: int, end: int, cause: BaseException):
        super().__init__(
            f"running bulk insert query on {table}, values[{start}:{end}]: {cause}"
        )
        self.table = table
        self.start = start
        self.end = end


class MigrationError(DatabaseError):
    """Migrating a database failed.

    ``recreate`` is True when the failure happened inside the migration run
    itself and the database may be left half-migrated; the caller should drop
    and recreate the database before retrying.
    """

    def __init__(self, message: str, recreate: bool = False):
        super().__init__(message)
        self.recreate = recreate


class UnrecoverableMigrationError(MigrationError):
    """Migration failed again after the database was recreated."""


class PoolError(DatabaseError):
    """Misuse of the test database pool."""


class UnreleasedHandleError(PoolError):
    """Teardown found fewer handles than the pool was created with."""


@dataclass
class QueryLogEntry:
    """One observed statement execution, as emitted to the log sink."""

    id: str
    query: str
    args: str
    duration_seconds: float = 0.0
    error: Optional[str] = None


def ensure_scalars(values: Sequence[Any]) -> None:
    """Reject values that cannot be bound as a single statement parameter."""
    for index, value in enumerate(values):
        if value is not None and not isinstance(value, SCALAR_TYPES):
            raise UnsupportedValueError(
                f"values[{index}] has unsupported type {type(value).__name__}"
            )
