"""Utility helpers for reusable functionality."""

from .datetime import (
    ensure_naive_datetime,
    ensure_timezone,
    now_in_timezone,
    resolve_timezone,
)

__all__ = [
    "ensure_naive_datetime",
    "ensure_timezone",
    "now_in_timezone",
    "resolve_timezone",
]
