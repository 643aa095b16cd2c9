"""HTTP endpoints for server-side broadcasters and queue inspection."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.application.use_cases.notifications import (
    WildcardBroadcastRejected,
    broadcast_notification,
)
from app.infrastructure.notifications import PendingQueuePersistenceError
from app.interfaces.api.dependencies import RelayContext, get_relay
from app.interfaces.api.schemas import (
    BroadcastAccepted,
    BroadcastRequest,
    PendingNotificationRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post(
    "/broadcast",
    response_model=BroadcastAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def broadcast(
    request: BroadcastRequest,
    relay: RelayContext = Depends(get_relay),
) -> BroadcastAccepted:
    """Push ``request.message`` to matching clients, queueing it on a miss."""

    try:
        await broadcast_notification(
            request.to_filter(),
            request.message,
            registry=relay.registry,
            queue=relay.queue,
            allow_wildcard=relay.settings.allow_wildcard_broadcast,
        )
    except WildcardBroadcastRejected as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except PendingQueuePersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification could not be persisted",
        ) from exc
    return BroadcastAccepted()


@router.get("/pending", response_model=list[PendingNotificationRead])
async def list_pending(
    relay: RelayContext = Depends(get_relay),
) -> list[PendingNotificationRead]:
    """Return the notifications still waiting for a matching client."""

    return [
        PendingNotificationRead.from_entity(notification)
        for notification in await relay.queue.pending()
    ]
