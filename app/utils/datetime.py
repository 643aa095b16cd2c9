"""Helpers for working with timezone-aware datetimes."""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def resolve_timezone(tz_name: str | None) -> tzinfo:
    """Return the zone named ``tz_name``, falling back to UTC when unknown."""

    name = (tz_name or "").strip()
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; using UTC", name)
        return timezone.utc


def now_in_timezone(tz: tzinfo) -> datetime:
    return datetime.now(tz=tz)


def ensure_timezone(value: datetime | None, tz: tzinfo) -> datetime | None:
    """Normalize ``value`` so it is expressed in ``tz``.

    Naive values are assumed to already be local to ``tz``.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def ensure_naive_datetime(value: datetime | None, tz: tzinfo) -> datetime | None:
    """Return ``value`` localized to ``tz`` but without ``tzinfo``.

    SQLite ``DATETIME`` columns drop the offset, so pending notifications are
    stored as naive local values and re-localized on load.
    """

    localized = ensure_timezone(value, tz)
    if localized is None:
        return None
    return localized.replace(tzinfo=None)
