from .relay import (
    BroadcastAccepted,
    BroadcastRequest,
    HealthRead,
    PendingNotificationRead,
    RegisterRequest,
    RegisteredUser,
)

__all__ = [
    "BroadcastAccepted",
    "BroadcastRequest",
    "HealthRead",
    "PendingNotificationRead",
    "RegisterRequest",
    "RegisteredUser",
]
