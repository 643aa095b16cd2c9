"""Storage backends for pending notifications."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Any, Sequence

from sqlalchemy.engine import Engine

from app.config import Settings
from app.domain.entities import NotificationFilter, PendingNotification
from app.infrastructure.database import (
    create_database_engine,
    create_session_factory,
    initialize_database,
)
from app.infrastructure.notifications.errors import PendingStoreCorruptedError
from app.infrastructure.notifications.queue import PendingNotificationStore
from app.infrastructure.repositories import SqlPendingNotificationStore
from app.utils import ensure_timezone, resolve_timezone

logger = logging.getLogger(__name__)


def serialize_pending_notification(notification: PendingNotification) -> dict[str, Any]:
    """Return a JSON-serializable representation of ``notification``."""

    return {
        "id": notification.id,
        "filter": notification.filter.to_dict(),
        "message": notification.message,
        "created_at": notification.created_at.isoformat(),
        "attempts": notification.attempts,
    }


def deserialize_pending_notification(
    data: Any, tz: tzinfo = timezone.utc
) -> PendingNotification:
    """Rebuild a :class:`PendingNotification` from its stored representation."""

    if not isinstance(data, dict):
        raise PendingStoreCorruptedError(f"Expected an object, found {type(data).__name__}")
    try:
        notification_id = str(data["id"])
        created_at = ensure_timezone(datetime.fromisoformat(data["created_at"]), tz)
        attempts = int(data.get("attempts", 0))
    except (KeyError, TypeError, ValueError) as exc:
        raise PendingStoreCorruptedError(f"Invalid pending notification entry: {exc}") from exc
    filter_data = data.get("filter")
    if filter_data is not None and not isinstance(filter_data, dict):
        raise PendingStoreCorruptedError("Pending notification filter must be an object")
    return PendingNotification(
        id=notification_id,
        filter=NotificationFilter.from_mapping(filter_data),
        message=data.get("message"),
        created_at=created_at,
        attempts=attempts,
    )


class JsonFilePendingNotificationStore:
    """Persist pending notifications as a JSON array on local disk."""

    def __init__(self, path: str | os.PathLike[str], *, tz: tzinfo = timezone.utc) -> None:
        self.path = Path(path)
        self.tz = tz

    def load(self) -> list[PendingNotification]:
        """Return the stored notifications, or an empty list if none exist yet."""

        if not self.path.exists():
            return []
        raw = self.path.read_text(encoding="utf-8")
        if not raw.strip():
            return []
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise PendingStoreCorruptedError(f"{self.path} is not valid JSON: {exc}") from exc
        if not isinstance(entries, list):
            raise PendingStoreCorruptedError(f"{self.path} does not contain a JSON array")
        return [deserialize_pending_notification(entry, self.tz) for entry in entries]

    def save(self, notifications: Sequence[PendingNotification]) -> None:
        """Replace the stored notifications with ``notifications``.

        The file is written to a temporary sibling first and moved into place,
        so readers never observe a partially written queue.
        """

        payload = json.dumps(
            [serialize_pending_notification(n) for n in notifications], indent=2
        )
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=directory, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Persisted %d pending notifications to %s", len(notifications), self.path)


def build_pending_store(settings: Settings) -> tuple[PendingNotificationStore, Engine | None]:
    """Return the configured queue store and the engine to dispose, if any."""

    tz = resolve_timezone(settings.app_timezone)
    if settings.queue_backend == "database":
        engine = create_database_engine(settings.database_url)
        initialize_database(engine)
        return SqlPendingNotificationStore(create_session_factory(engine), tz=tz), engine
    return JsonFilePendingNotificationStore(settings.queue_file_path, tz=tz), None


__all__ = [
    "JsonFilePendingNotificationStore",
    "build_pending_store",
    "deserialize_pending_notification",
    "serialize_pending_notification",
]
