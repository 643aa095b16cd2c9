"""Repository implementations for infrastructure layer."""

from .pending_notification_repository import SqlPendingNotificationStore

__all__ = ["SqlPendingNotificationStore"]
