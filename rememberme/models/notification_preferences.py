from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB

from rememberme.db.base import Base

JsonColumnType = JSON().with_variant(JSONB(), "postgresql")


class NotificationPreferences(Base):
    """Per-user reminder preferences plus the durable scheduling position."""
    __tablename__ = "notification_preferences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False, unique=True, index=True)

    # Preferences (owned by the preferences gateway)
    notifications_per_day = Column(Integer, nullable=False)
    timezone = Column(String, nullable=False)
    time_intervals = Column(JsonColumnType, nullable=False, default=list)  # [{"start_time": "HH:mm", "end_time": "HH:mm"}]
    is_active = Column(Boolean, nullable=False, default=True)

    # Derived schedule (owned by the scheduling engine)
    scheduled_times = Column(JsonColumnType, nullable=False, default=list)  # [{"hour": h, "minute": m}], sorted
    current_notification_index = Column(Integer, nullable=False, default=0)
    next_notification_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_notification_preferences_active_next", "is_active", "next_notification_at"),
    )
