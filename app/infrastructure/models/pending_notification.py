"""SQLAlchemy model for queued notifications."""

from sqlalchemy import JSON, Column, DateTime, Integer, String

from app.infrastructure.database import Base


class PendingNotificationModel(Base):
    """Database representation of a notification awaiting delivery."""

    __tablename__ = "pending_notification"

    id = Column(String(64), primary_key=True)
    position = Column(Integer, nullable=False, index=True)
    filter = Column(JSON, nullable=False, default=dict)
    message = Column(JSON, nullable=True)
    created_at = Column(DateTime(), nullable=False)
    attempts = Column(Integer, nullable=False, default=0)


__all__ = ["PendingNotificationModel"]
