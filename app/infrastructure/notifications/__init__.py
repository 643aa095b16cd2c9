"""Realtime notification relay helpers for the infrastructure layer."""

from .connection import ClientConnection
from .errors import (
    PendingQueueError,
    PendingQueuePersistenceError,
    PendingStoreCorruptedError,
)
from .liveness import DEFAULT_HEARTBEAT_INTERVAL, LivenessMonitor, LivenessState
from .publisher import (
    build_error,
    build_heartbeat,
    build_notification,
    build_status,
)
from .queue import PendingNotificationQueue, PendingNotificationStore
from .registry import ConnectionRegistry

__all__ = [
    "ClientConnection",
    "ConnectionRegistry",
    "DEFAULT_HEARTBEAT_INTERVAL",
    "LivenessMonitor",
    "LivenessState",
    "PendingNotificationQueue",
    "PendingNotificationStore",
    "PendingQueueError",
    "PendingQueuePersistenceError",
    "PendingStoreCorruptedError",
    "build_error",
    "build_heartbeat",
    "build_notification",
    "build_status",
]
