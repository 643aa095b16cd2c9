"""Domain entities exposed by the application."""

from .identity import Identity
from .notification_filter import NotificationFilter, matches
from .pending_notification import PendingNotification

__all__ = [
    "Identity",
    "NotificationFilter",
    "PendingNotification",
    "matches",
]
