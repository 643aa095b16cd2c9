"""FastAPI dependency utilities."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import HTTPException, status
from starlette.requests import HTTPConnection

from app.config import Settings
from app.infrastructure.notifications import (
    ConnectionRegistry,
    LivenessMonitor,
    PendingNotificationQueue,
)


@dataclass
class RelayContext:
    """Relay components created once per application lifespan."""

    settings: Settings
    registry: ConnectionRegistry
    queue: PendingNotificationQueue
    monitor: LivenessMonitor


def get_relay(connection: HTTPConnection) -> RelayContext:
    """Return the relay components attached to the running application.

    Works for both HTTP requests and websocket sessions.
    """

    relay = getattr(connection.app.state, "relay", None)
    if relay is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Relay is not running",
        )
    return relay


__all__ = ["RelayContext", "get_relay"]
