"""Public helpers for relaying notifications to connected clients."""

from .broadcast import BroadcastResult, WildcardBroadcastRejected, broadcast_notification
from .register_client import RegistrationResult, register_client

__all__ = [
    "BroadcastResult",
    "RegistrationResult",
    "WildcardBroadcastRejected",
    "broadcast_notification",
    "register_client",
]
