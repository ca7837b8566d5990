"""
Caller-supplied deadline and cancellation for database calls.

Every public operation of ``Database`` takes an optional ``ctx``. A context
that is cancelled, or whose deadline passes, makes the in-flight statement
abort through the driver's interrupt hook and classifies the failure as a
cancellation rather than an operational error.

Usage:
    >>> ctx = QueryContext.with_timeout(30)
    >>> db.execute("DELETE FROM fortune_cookies", ctx=ctx)
"""

import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from fortune_store.io.database.models import DeadlineExceededError, QueryCancelledError


class QueryContext:
    """Deadline and cancellation signal shared by one logical call."""

    def __init__(self, deadline: Optional[float] = None):
        # Deadline is a time.monotonic() timestamp.
        self._deadline = deadline
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._interrupts: List[Callable[[], None]] = []

    @classmethod
    def background(cls) -> "QueryContext":
        """A context that is never cancelled and has no deadline."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "QueryContext":
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when there is none."""
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def cancel(self) -> None:
        """Cancel the context and interrupt any statement it is watching."""
        self._cancelled.set()
        self._fire()

    def err(self) -> Optional[QueryCancelledError]:
        """The cancellation error if the context is done, else None."""
        if self._cancelled.is_set():
            return QueryCancelledError()
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceededError()
        return None

    def raise_if_done(self) -> None:
        error = self.err()
        if error is not None:
            raise error

    @contextmanager
    def watch(self, interrupt: Optional[Callable[[], None]]) -> Iterator[None]:
        """Run ``interrupt`` if the context ends while the block is executing."""
        if interrupt is None:
            yield
            return

        with self._lock:
            self._interrupts.append(interrupt)
        timer = None
        remaining = self.remaining()
        if remaining is not None:
            timer = threading.Timer(remaining, self._fire)
            timer.daemon = True
            timer.start()
        try:
            if self.err() is not None:
                interrupt()
            yield
        finally:
            if timer is not None:
                timer.cancel()
            with self._lock:
                self._interrupts.remove(interrupt)

    def _fire(self) -> None:
        # Interrupts run under the lock: once watch() exits none of its
        # interrupts can still reach the connection.
        with self._lock:
            for interrupt in list(self._interrupts):
                interrupt()


def resolve(ctx: Optional[QueryContext]) -> QueryContext:
    return ctx if ctx is not None else QueryContext.background()
