"""Use case for fanning a notification out to matching live clients."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from app.domain.entities import NotificationFilter, matches
from app.infrastructure.notifications import (
    ConnectionRegistry,
    PendingNotificationQueue,
    build_notification,
)

logger = logging.getLogger(__name__)


class WildcardBroadcastRejected(ValueError):
    """Raised when a broadcast names no filter attribute and wildcards are disabled."""


@dataclass(frozen=True)
class BroadcastResult:
    """Summary of a broadcast call."""

    attempted: int
    delivered: int
    queued_id: str | None = None

    @property
    def matched_any(self) -> bool:
        return self.attempted > 0

    @property
    def all_delivered(self) -> bool:
        return self.delivered == self.attempted


async def broadcast_notification(
    notification_filter: NotificationFilter,
    message: Any,
    *,
    registry: ConnectionRegistry,
    queue: PendingNotificationQueue,
    allow_wildcard: bool = True,
) -> BroadcastResult:
    """Deliver ``message`` to every registered client matching the filter.

    When nobody matches, or at least one send fails, the filter/message pair
    is queued once for the next matching registration.
    """

    if notification_filter.is_wildcard and not allow_wildcard:
        raise WildcardBroadcastRejected("Broadcast requires at least one filter attribute")

    attempted = 0
    delivered = 0
    envelope = build_notification(message)
    for connection, identity in registry.snapshot():
        if identity.is_anonymous and not notification_filter.is_wildcard:
            continue
        if not matches(notification_filter, identity):
            continue
        attempted += 1
        if await connection.send_json(dict(envelope)):
            delivered += 1
        else:
            registry.unregister(connection)

    queued_id = None
    if attempted == 0 or delivered < attempted:
        queued_id = await queue.enqueue(notification_filter, message)
        logger.info(
            "Broadcast for %s reached %d of %d matching clients; queued as %s",
            notification_filter.constraints(),
            delivered,
            attempted,
            queued_id,
        )
    else:
        logger.debug("Broadcast delivered to %d clients", delivered)
    return BroadcastResult(attempted=attempted, delivered=delivered, queued_id=queued_id)


__all__ = ["BroadcastResult", "WildcardBroadcastRejected", "broadcast_notification"]
