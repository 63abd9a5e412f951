"""Transaction guard: one state-mutating pool operation in flight at a time.

A nested entry from the thread that already holds the guard (typically a
token ledger calling back into the pool mid-transfer) is rejected with
`ReentrancyDetected` before it can touch state. Entries from other threads
block until the guard is released, so operations form a total order.
"""

from __future__ import annotations

import functools
import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, TypeVar

from .errors import ReentrancyDetected
from .types import GuardState

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class TransactionGuard:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._owner: Optional[int] = None
        self._operation: Optional[str] = None

    @property
    def state(self) -> GuardState:
        return GuardState.IDLE if self._owner is None else GuardState.IN_PROGRESS

    @property
    def active_operation(self) -> Optional[str]:
        return self._operation

    @contextmanager
    def entered(self, operation: str) -> Iterator[None]:
        """Hold the guard for the body; release on every exit path."""
        me = threading.get_ident()
        if self._owner == me:
            logger.warning(
                "rejected reentrant %s while %s is in progress", operation, self._operation
            )
            raise ReentrancyDetected(
                f"{operation} entered while {self._operation} is in progress"
            )
        self._lock.acquire()
        self._owner = me
        self._operation = operation
        try:
            yield
        finally:
            self._owner = None
            self._operation = None
            self._lock.release()


def guarded(fn: F) -> F:
    """Run a method of an object exposing `_guard` under that guard."""

    @functools.wraps(fn)
    def wrapper(self, *args: Any, **kwargs: Any) -> Any:
        with self._guard.entered(fn.__name__):
            return fn(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]
