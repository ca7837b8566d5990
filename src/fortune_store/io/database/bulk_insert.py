"""
Batched multi-row INSERT.

A flat value list is split into chunks whose parameter count stays within
MAX_PARAMETERS, and every chunk is sent as one prepared multi-row INSERT.
Chunks are not wrapped in a transaction: when chunk k fails, chunks before it
stay committed and the error names the failing value range.

Example:
    >>> bulk_insert(db, "fortune_cookies", ["value"], ["a", "b", "c"])
    []
"""

from typing import TYPE_CHECKING, List, Optional, Sequence, TypeVar

from fortune_store.infrastructure.sql import InsertBuilder
from fortune_store.io.database.context import QueryContext, resolve
from fortune_store.io.database.models import (
    ArityMismatchError,
    ChunkExecutionError,
    DatabaseError,
    QueryCancelledError,
    RowConsumer,
    ScalarValue,
    TooManyColumnsError,
    ensure_scalars,
)
from fortune_store.utils.logging import get_logger

if TYPE_CHECKING:
    from fortune_store.io.database.handle import Database

# Most drivers cap bound parameters per statement well above this; staying at
# 1000 keeps statements small enough for every supported backend.
MAX_PARAMETERS = 1000

T = TypeVar("T")

logger = get_logger(__name__)


def chunk_stride(column_count: int, max_parameters: int = MAX_PARAMETERS) -> int:
    """Largest multiple of ``column_count`` not above ``max_parameters``.

    Examples:
        >>> chunk_stride(1)
        1000
        >>> chunk_stride(3)
        999
    """
    stride = (max_parameters // column_count) * column_count
    if stride == 0:
        raise TooManyColumnsError(
            f"{column_count} columns exceed the limit of {max_parameters} parameters per statement"
        )
    return stride


def validate_values(columns: Sequence[str], values: Sequence[ScalarValue]) -> None:
    if not columns:
        raise ArityMismatchError("bulk insert requires at least one column")
    if len(values) % len(columns) != 0:
        raise ArityMismatchError(
            f"modulus of len(values) and len(columns) must be 0: got {len(values) % len(columns)}"
        )
    ensure_scalars(values)


def bulk_insert(
    db: "Database",
    table: str,
    columns: Sequence[str],
    values: Sequence[ScalarValue],
    conflict_action: str = "",
    returning: Optional[Sequence[str]] = None,
    consumer: Optional[RowConsumer[T]] = None,
    ctx: Optional[QueryContext] = None,
    max_parameters: int = MAX_PARAMETERS,
) -> List[T]:
    """
    Insert ``values`` into ``table`` row by row, ``len(columns)`` values per row.

    Args:
        db: Handle the statements run on
        table: Target table
        columns: Column names; values are laid out row-major in this order
        values: Flat list of scalars, a multiple of ``len(columns)`` long
        conflict_action: SQL appended verbatim after the VALUES list, e.g.
            ``ON DUPLICATE KEY UPDATE id = id``
        returning: Columns to read back; requires ``consumer``
        consumer: Called once per returned row, results collected in order
        ctx: Cancellation scope shared by every chunk
        max_parameters: Parameter ceiling per statement

    Returns:
        The consumer's results for every returned row, or an empty list.

    Raises:
        ArityMismatchError: If values do not divide evenly into rows
        TooManyColumnsError: If one row alone exceeds the parameter ceiling
        QueryCancelledError: If ``ctx`` is cancelled or its deadline passes
        UnsupportedValueError: If a value is not a bindable scalar
        ChunkExecutionError: If a chunk fails; earlier chunks stay inserted
    """
    if returning and consumer is None:
        raise ValueError("returning columns require a row consumer")

    validate_values(columns, values)
    stride = chunk_stride(len(columns), max_parameters)
    if not values:
        return []

    ctx = resolve(ctx)
    builder = InsertBuilder(db.dialect, db.placeholder)
    results: List[T] = []

    for start in range(0, len(values), stride):
        end = min(start + stride, len(values))
        chunk = values[start:end]
        query = builder.insert(
            table,
            columns,
            len(chunk) // len(columns),
            conflict_action=conflict_action,
            returning=list(returning) if returning else None,
        )
        try:
            with db.prepare(query, ctx) as statement:
                if returning:
                    results.extend(statement.query_rows(*chunk, consumer=consumer))
                else:
                    statement.execute(*chunk)
        except QueryCancelledError:
            logger.debug("bulk_insert.cancelled", table=table, start=start, end=end)
            raise
        except DatabaseError as exc:
            logger.warning(
                "bulk_insert.chunk_failed", table=table, start=start, end=end, error=str(exc)
            )
            raise ChunkExecutionError(table, start, end, exc) from exc

    return results
