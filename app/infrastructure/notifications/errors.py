"""Exceptions raised by the pending notification queue and its stores."""

from __future__ import annotations


class PendingQueueError(RuntimeError):
    """Base error for pending notification persistence problems."""


class PendingQueuePersistenceError(PendingQueueError):
    """Raised when the queue state could not be written to its store."""


class PendingStoreCorruptedError(PendingQueueError):
    """Raised when a store holds data that cannot be decoded."""


__all__ = [
    "PendingQueueError",
    "PendingQueuePersistenceError",
    "PendingStoreCorruptedError",
]
