"""Pydantic models describing relay message payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.entities import Identity, NotificationFilter, PendingNotification


class _RelayModel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class RegisteredUser(_RelayModel):
    """Attributes a client sends inside a ``register`` message."""

    domain: str | None = None
    platform: str | None = None
    user_id: str | None = None
    first_name: str | None = None
    role: str | None = None

    def to_identity(self) -> Identity:
        return Identity(
            domain=self.domain or "",
            platform=self.platform or "",
            user_id=self.user_id or "",
            first_name=self.first_name or "",
            role=self.role or "",
        )


class RegisterRequest(_RelayModel):
    """Inbound ``register`` message."""

    user: RegisteredUser


class BroadcastRequest(_RelayModel):
    """Inbound ``broadcast`` message or HTTP broadcast body."""

    message: Any = Field(..., description="Payload pushed to every matching client")
    domain: str | None = None
    platform: str | None = None
    user_id: str | None = None
    role: str | None = None

    def to_filter(self) -> NotificationFilter:
        return NotificationFilter.from_mapping(
            {
                "domain": self.domain,
                "platform": self.platform,
                "user_id": self.user_id,
                "role": self.role,
            }
        )


class BroadcastAccepted(BaseModel):
    """Acknowledgement returned to broadcasters."""

    status: str = "broadcast_sent"


class PendingNotificationRead(BaseModel):
    """Representation of a queued notification."""

    id: str
    filter: dict[str, str | None]
    message: Any = None
    created_at: datetime
    attempts: int

    @classmethod
    def from_entity(cls, notification: PendingNotification) -> "PendingNotificationRead":
        return cls(
            id=notification.id,
            filter=notification.filter.to_dict(),
            message=notification.message,
            created_at=notification.created_at,
            attempts=notification.attempts,
        )


class HealthRead(BaseModel):
    """Relay health summary."""

    status: str = "ok"
    connections: int
    pending: int


__all__ = [
    "BroadcastAccepted",
    "BroadcastRequest",
    "HealthRead",
    "PendingNotificationRead",
    "RegisterRequest",
    "RegisteredUser",
]
