"""Outbound message envelopes sent to relay clients."""

from __future__ import annotations

import copy
from typing import Any

STATUS_REGISTERED = "registered"
STATUS_BROADCAST_SENT = "broadcast_sent"
STATUS_PONG = "pong"
STATUS_ERROR = "error"

NOTIFICATION_SENDER = "server"


def build_status(status: str) -> dict[str, Any]:
    """Return an acknowledgement envelope such as ``{"status": "registered"}``."""

    return {"status": status}


def build_error(message: str) -> dict[str, Any]:
    return {"status": STATUS_ERROR, "message": message}


def build_notification(message: Any) -> dict[str, Any]:
    """Wrap a deep copy of ``message`` in the envelope pushed to clients."""

    return {
        "type": "notification",
        "message": copy.deepcopy(message),
        "from": NOTIFICATION_SENDER,
    }


def build_heartbeat() -> dict[str, Any]:
    return {"type": "heartbeat"}


__all__ = [
    "NOTIFICATION_SENDER",
    "STATUS_BROADCAST_SENT",
    "STATUS_ERROR",
    "STATUS_PONG",
    "STATUS_REGISTERED",
    "build_error",
    "build_heartbeat",
    "build_notification",
    "build_status",
]
