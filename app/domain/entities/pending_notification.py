"""Domain entity representing a notification waiting for a recipient."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from .notification_filter import NotificationFilter


@dataclass(frozen=True)
class PendingNotification:
    """Message queued under ``filter`` until a matching client registers."""

    id: str
    filter: NotificationFilter
    message: Any
    created_at: datetime
    attempts: int = 0

    def with_attempt(self) -> "PendingNotification":
        """Return a copy recording one more delivery attempt."""

        return replace(self, attempts=self.attempts + 1)


__all__ = ["PendingNotification"]
