"""Aggregate application use cases."""

from .notifications import broadcast_notification, register_client

__all__ = [
    "broadcast_notification",
    "register_client",
]
