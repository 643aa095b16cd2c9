"""Durable queue of notifications waiting for a matching client."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import timezone, tzinfo
from typing import Any, Protocol, Sequence

from anyio import to_thread

from app.domain.entities import Identity, NotificationFilter, PendingNotification, matches
from app.utils import now_in_timezone

from .errors import PendingQueuePersistenceError

logger = logging.getLogger(__name__)


class PendingNotificationStore(Protocol):
    """Backend able to load and replace the whole queue state."""

    def load(self) -> Sequence[PendingNotification]: ...

    def save(self, notifications: Sequence[PendingNotification]) -> None: ...


class PendingNotificationQueue:
    """Serialize every queue operation and keep the store in sync.

    The in-memory list only changes after the store accepted the new state, so
    a failed write leaves both sides as they were before the call.
    """

    def __init__(self, store: PendingNotificationStore, *, tz: tzinfo = timezone.utc) -> None:
        self._store = store
        self.tz = tz
        self._entries: list[PendingNotification] = []
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    async def open(self) -> None:
        """Load the persisted queue, resetting it when the store is unreadable."""

        async with self._lock:
            try:
                entries = list(await to_thread.run_sync(self._store.load))
            except Exception as exc:
                logger.warning(
                    "Pending notification store is unreadable (%s); starting with an empty queue",
                    exc,
                )
                try:
                    await self._persist([])
                except PendingQueuePersistenceError:
                    logger.warning("Could not reset the pending notification store")
                entries = []
            self._entries = entries
        logger.info("Pending notification queue opened with %d entries", len(self._entries))

    async def enqueue(self, notification_filter: NotificationFilter, message: Any) -> str:
        """Append ``message`` under ``notification_filter`` and return its id."""

        notification = PendingNotification(
            id=uuid.uuid4().hex,
            filter=notification_filter,
            message=message,
            created_at=now_in_timezone(self.tz),
            attempts=0,
        )
        async with self._lock:
            updated = [*self._entries, notification]
            await self._persist(updated)
            self._entries = updated
        logger.info(
            "Queued notification %s for filter %s", notification.id, notification_filter.constraints()
        )
        return notification.id

    async def take_matching(self, identity: Identity) -> list[PendingNotification]:
        """Remove and return every entry whose filter matches ``identity``."""

        async with self._lock:
            matched: list[PendingNotification] = []
            remaining: list[PendingNotification] = []
            for entry in self._entries:
                (matched if matches(entry.filter, identity) else remaining).append(entry)
            if not matched:
                return []
            await self._persist(remaining)
            self._entries = remaining
        logger.debug("Took %d pending notifications for user %s", len(matched), identity.user_id)
        return matched

    async def requeue(self, notification: PendingNotification) -> None:
        """Put ``notification`` back after a failed delivery attempt."""

        retried = notification.with_attempt()
        async with self._lock:
            updated = [*self._entries, retried]
            await self._persist(updated)
            self._entries = updated
        logger.info(
            "Requeued notification %s (attempt %d)", retried.id, retried.attempts
        )

    async def pending(self) -> list[PendingNotification]:
        """Return a copy of the entries currently queued."""

        async with self._lock:
            return list(self._entries)

    async def _persist(self, entries: list[PendingNotification]) -> None:
        try:
            await to_thread.run_sync(self._store.save, list(entries))
        except Exception as exc:
            logger.error("Failed to persist pending notification queue: %s", exc)
            raise PendingQueuePersistenceError(
                "Pending notification queue could not be persisted"
            ) from exc


__all__ = ["PendingNotificationQueue", "PendingNotificationStore"]
