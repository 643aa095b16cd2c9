"""Use case for registering a client and replaying its queued notifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.domain.entities import Identity
from app.infrastructure.notifications import (
    ClientConnection,
    ConnectionRegistry,
    PendingNotificationQueue,
    PendingQueuePersistenceError,
    build_notification,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of replaying the queue to a freshly registered client."""

    delivered: int = 0
    requeued: int = 0


async def register_client(
    connection: ClientConnection,
    identity: Identity,
    *,
    registry: ConnectionRegistry,
    queue: PendingNotificationQueue,
) -> RegistrationResult:
    """Register ``connection`` and flush every queued notification it matches.

    Entries leave the queue before they are sent. An entry whose send fails
    is requeued, so between removal and requeue it exists nowhere; a crash in
    that window loses it. Anonymous clients never drain the queue.
    """

    registry.register(connection, identity)
    if identity.is_anonymous:
        return RegistrationResult()

    delivered = 0
    requeued = 0
    lost: list[str] = []
    for notification in await queue.take_matching(identity):
        if await connection.send_json(build_notification(notification.message)):
            delivered += 1
            continue
        registry.unregister(connection)
        try:
            await queue.requeue(notification)
        except PendingQueuePersistenceError:
            lost.append(notification.id)
            continue
        requeued += 1

    if lost:
        logger.error("Notifications %s could not be requeued", ", ".join(lost))
        raise PendingQueuePersistenceError(
            f"{len(lost)} undelivered notification(s) could not be requeued"
        )
    if delivered or requeued:
        logger.info(
            "Replayed queue to user %s: %d delivered, %d requeued",
            identity.user_id,
            delivered,
            requeued,
        )
    return RegistrationResult(delivered=delivered, requeued=requeued)


__all__ = ["RegistrationResult", "register_client"]
