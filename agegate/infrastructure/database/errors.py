"""Mapping of database lock failures onto the retryable conflict error."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import DBAPIError

from agegate.modules.common.exceptions import ConcurrencyConflictError

_LOCK_MARKERS = (
    "database is locked",
    "deadlock detected",
    "could not serialize",
    "lock timeout",
    "lock wait timeout",
)


def is_lock_conflict(exc: DBAPIError) -> bool:
    message = str(exc.orig if exc.orig is not None else exc).lower()
    return any(marker in message for marker in _LOCK_MARKERS)


@contextmanager
def lock_conflicts(message: str = "Row is locked by another transaction") -> Iterator[None]:
    """Re-raise lock and serialization failures as ConcurrencyConflictError."""
    try:
        yield
    except DBAPIError as exc:
        if is_lock_conflict(exc):
            raise ConcurrencyConflictError(message) from exc
        raise


__all__ = ["is_lock_conflict", "lock_conflicts"]
