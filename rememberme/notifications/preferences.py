"""
Preferences gateway: validates and persists user preferences, then drives the scheduler
"""
import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from rememberme.models.notification_preferences import NotificationPreferences
from rememberme.schemas.notification_preferences import (
    NotificationPreferencesCreate,
    NotificationPreferencesUpdate,
    TimeInterval,
)
from rememberme.utils.timezone import is_valid_timezone

from .distribution import TIME_OF_DAY_RE
from .exceptions import InvalidPreferences, PreferencesAlreadyExist, PreferencesNotFound
from .scheduler import NotificationSchedulerService, ScheduleInfo

logger = logging.getLogger(__name__)


class NotificationPreferencesService:
    def __init__(self, db: Session, scheduler: Optional[NotificationSchedulerService] = None):
        self.db = db
        self.scheduler = scheduler or NotificationSchedulerService(db)

    def create(self, user_id: str, data: NotificationPreferencesCreate) -> NotificationPreferences:
        self._validate_timezone(data.timezone)
        self._validate_time_intervals(data.time_intervals)
        self._validate_count(data.notifications_per_day)

        if self.find_one_or_none(user_id) is not None:
            raise PreferencesAlreadyExist("Notification preferences already exist. Use update instead.")

        prefs = NotificationPreferences(
            user_id=user_id,
            notifications_per_day=data.notifications_per_day,
            timezone=data.timezone,
            time_intervals=[i.model_dump() for i in data.time_intervals],
            is_active=data.is_active,
            scheduled_times=[],
            current_notification_index=0,
        )
        self.db.add(prefs)
        self.db.commit()
        self.db.refresh(prefs)

        return self.scheduler.reschedule(prefs)

    def find_one(self, user_id: str) -> NotificationPreferences:
        prefs = self.find_one_or_none(user_id)
        if prefs is None:
            raise PreferencesNotFound("Notification preferences not found")
        return prefs

    def find_one_or_none(self, user_id: str) -> Optional[NotificationPreferences]:
        return (
            self.db.query(NotificationPreferences)
            .filter(NotificationPreferences.user_id == user_id)
            .first()
        )

    def update(self, user_id: str, data: NotificationPreferencesUpdate) -> NotificationPreferences:
        if data.timezone is not None:
            self._validate_timezone(data.timezone)
        if data.time_intervals is not None:
            self._validate_time_intervals(data.time_intervals)
        if data.notifications_per_day is not None:
            self._validate_count(data.notifications_per_day)

        prefs = self.find_one(user_id)
        if data.notifications_per_day is not None:
            prefs.notifications_per_day = data.notifications_per_day
        if data.timezone is not None:
            prefs.timezone = data.timezone
        if data.time_intervals is not None:
            prefs.time_intervals = [i.model_dump() for i in data.time_intervals]
        if data.is_active is not None:
            prefs.is_active = data.is_active
        prefs.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(prefs)

        return self.scheduler.reschedule(prefs)

    def remove(self, user_id: str) -> None:
        prefs = self.find_one(user_id)
        self.scheduler.deactivate(user_id)
        self.db.delete(prefs)
        self.db.commit()
        logger.info(f"[Preferences] Removed notification preferences for user {user_id}")

    def toggle_active(self, user_id: str, is_active: bool) -> NotificationPreferences:
        prefs = self.find_one(user_id)
        prefs.is_active = is_active
        prefs.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(prefs)

        if is_active:
            return self.scheduler.reschedule(prefs)
        self.scheduler.deactivate(user_id)
        self.db.refresh(prefs)
        return prefs

    def get_scheduled_jobs(self, user_id: str) -> Optional[ScheduleInfo]:
        return self.scheduler.get_schedule_info(user_id)

    # --- Validation ---
    @staticmethod
    def _validate_timezone(tz_name: str) -> None:
        if not is_valid_timezone(tz_name):
            raise InvalidPreferences("Invalid timezone")

    @staticmethod
    def _validate_count(count: int) -> None:
        if not isinstance(count, int) or not 1 <= count <= 24:
            raise InvalidPreferences("notifications_per_day must be between 1 and 24")

    @staticmethod
    def _validate_time_intervals(intervals: Iterable[TimeInterval]) -> None:
        intervals = list(intervals)
        if not intervals:
            raise InvalidPreferences("At least one time interval is required")
        for interval in intervals:
            if not TIME_OF_DAY_RE.match(interval.start_time) or not TIME_OF_DAY_RE.match(interval.end_time):
                raise InvalidPreferences("Invalid time format. Use HH:mm (24-hour)")
