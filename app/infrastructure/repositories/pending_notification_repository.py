"""Persistence helpers for pending notifications stored in a database."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timezone, tzinfo

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.domain.entities import NotificationFilter, PendingNotification
from app.infrastructure.models import PendingNotificationModel
from app.infrastructure.notifications.errors import PendingStoreCorruptedError
from app.utils import ensure_naive_datetime, ensure_timezone

logger = logging.getLogger(__name__)


class SqlPendingNotificationStore:
    """Store the pending queue in the ``pending_notification`` table."""

    def __init__(self, session_factory: sessionmaker, *, tz: tzinfo = timezone.utc) -> None:
        self._session_factory = session_factory
        self.tz = tz

    def load(self) -> list[PendingNotification]:
        session: Session = self._session_factory()
        try:
            models = (
                session.query(PendingNotificationModel)
                .order_by(PendingNotificationModel.position.asc())
                .all()
            )
            return [self._to_entity(model) for model in models]
        finally:
            session.close()

    def save(self, notifications: Sequence[PendingNotification]) -> None:
        """Replace every stored row with ``notifications`` in one transaction."""

        session: Session = self._session_factory()
        try:
            session.query(PendingNotificationModel).delete(synchronize_session=False)
            for position, notification in enumerate(notifications):
                session.add(self._to_model(notification, position))
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        finally:
            session.close()
        logger.debug("Persisted %d pending notifications to the database", len(notifications))

    def _to_model(self, notification: PendingNotification, position: int) -> PendingNotificationModel:
        return PendingNotificationModel(
            id=notification.id,
            position=position,
            filter=notification.filter.to_dict(),
            message=notification.message,
            created_at=ensure_naive_datetime(notification.created_at, self.tz),
            attempts=notification.attempts,
        )

    def _to_entity(self, model: PendingNotificationModel) -> PendingNotification:
        if model.filter is not None and not isinstance(model.filter, dict):
            raise PendingStoreCorruptedError(
                f"Pending notification {model.id} has an invalid filter"
            )
        return PendingNotification(
            id=model.id,
            filter=NotificationFilter.from_mapping(model.filter),
            message=model.message,
            created_at=ensure_timezone(model.created_at, self.tz),
            attempts=model.attempts or 0,
        )


__all__ = ["SqlPendingNotificationStore"]
