"""ORM models used by the application infrastructure."""

from .pending_notification import PendingNotificationModel

__all__ = ["PendingNotificationModel"]
