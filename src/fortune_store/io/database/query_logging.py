"""
Query observation: timing, truncation and correlation IDs for every statement.

Each statement gets a correlation ID of the form ``<instance>-<n>``. A debug
record is emitted before the statement runs and a second record when it ends:
debug on success, error on failure, and debug again when the failure comes
from the caller cancelling the call.
"""

import itertools
import re
import threading
import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

from fortune_store.io.database.context import QueryContext
from fortune_store.io.database.models import QueryCancelledError, QueryLogEntry
from fortune_store.utils.logging import get_logger

MAX_QUERY_LENGTH = 300
MAX_ARGS = 20
MAX_ARG_LENGTH = 50
ELLIPSIS = "..."

# Driver messages that mean the statement was interrupted on request.
CANCELLATION_MARKERS = (
    "canceling statement due to user request",
    "Query execution was interrupted",
)
# sqlite3 reports an interrupt with this bare message, optionally wrapped by SQLAlchemy.
_SQLITE_INTERRUPTED = re.compile(r"^(?:\(sqlite3\.OperationalError\) )?interrupted$")

_query_logging_disabled = False
_WHITESPACE = re.compile(r"\s+")


def set_query_logging_disabled(disabled: bool) -> bool:
    """Silence (or restore) query logging process-wide; returns the previous value.

    Not safe to flip while queries run concurrently; used around bulk test
    fixture setup only.
    """
    global _query_logging_disabled
    previous = _query_logging_disabled
    _query_logging_disabled = disabled
    return previous


def query_logging_disabled() -> bool:
    return _query_logging_disabled


def compact_query(query: str) -> str:
    """Collapse whitespace to single spaces and cap the length.

    Examples:
        >>> compact_query("SELECT value\\n  FROM fortune_cookies")
        'SELECT value FROM fortune_cookies'
    """
    query = _WHITESPACE.sub(" ", query).strip()
    if len(query) > MAX_QUERY_LENGTH:
        query = query[:MAX_QUERY_LENGTH] + ELLIPSIS
    return query


def format_args(args: Sequence[Any]) -> str:
    """Render at most MAX_ARGS arguments, each at most MAX_ARG_LENGTH long."""
    rendered = []
    for arg in args[:MAX_ARGS]:
        text = str(arg)
        if len(text) > MAX_ARG_LENGTH:
            text = text[:MAX_ARG_LENGTH] + ELLIPSIS
        rendered.append(text)
    if len(args) > MAX_ARGS:
        rendered.append(ELLIPSIS)
    return ", ".join(rendered)


def short_instance_id(instance_id: str) -> str:
    if not instance_id:
        return "local"
    if len(instance_id) > 8:
        return instance_id[-4:]
    return instance_id


def is_cancellation(ctx: QueryContext, error: BaseException) -> bool:
    if ctx.err() is not None or isinstance(error, QueryCancelledError):
        return True
    message = str(error)
    if _SQLITE_INTERRUPTED.match(message.split("\n", 1)[0].strip()):
        return True
    return any(marker in message for marker in CANCELLATION_MARKERS)


def _fields(entry: QueryLogEntry) -> dict:
    return {key: value for key, value in vars(entry).items() if value is not None}


class QueryLogger:
    """Observes statement executions for one handle without altering them."""

    def __init__(self, instance_id: str = "", logger: Optional[Any] = None):
        self._prefix = short_instance_id(instance_id)
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._logger = logger if logger is not None else get_logger(__name__)

    def next_id(self) -> str:
        with self._lock:
            n = next(self._counter)
        return f"{self._prefix}-{n}"

    @contextmanager
    def observe(
        self, ctx: QueryContext, query: str, args: Sequence[Any] = ()
    ) -> Iterator[QueryLogEntry]:
        """Log around one statement; the yielded entry carries the correlation ID."""
        entry = QueryLogEntry(
            id=self.next_id(), query=compact_query(query), args=format_args(args)
        )
        if query_logging_disabled():
            yield entry
            return

        self._logger.debug("query.started", id=entry.id, query=entry.query, args=entry.args)
        start = time.perf_counter()
        try:
            yield entry
        except BaseException as exc:
            entry.duration_seconds = time.perf_counter() - start
            entry.error = str(exc) or type(exc).__name__
            if is_cancellation(ctx, exc):
                self._logger.debug("query.cancelled", **_fields(entry))
            else:
                self._logger.error("query.failed", **_fields(entry))
            raise
        entry.duration_seconds = time.perf_counter() - start
        self._logger.debug("query.completed", **_fields(entry))
