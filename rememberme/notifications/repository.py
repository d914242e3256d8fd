from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from rememberme.models.notification_preferences import NotificationPreferences
from rememberme.utils.timezone import to_utc_aware

from .distribution import ScheduledTime, TimeWindow, times_to_dicts, windows_from_dicts
from .exceptions import MalformedStoredSchedule


class ScheduleRepository:
    """Durable per-user scheduling position, stored on notification_preferences."""

    def get(self, db: Session, id: int) -> Optional[NotificationPreferences]:
        return db.get(NotificationPreferences, id)

    def get_by_user(self, db: Session, user_id: str) -> Optional[NotificationPreferences]:
        return (
            db.query(NotificationPreferences)
            .filter(NotificationPreferences.user_id == user_id)
            .first()
        )

    def get_due(self, db: Session, now: datetime, limit: int = 100) -> List[NotificationPreferences]:
        stmt = (
            select(NotificationPreferences)
            .where(NotificationPreferences.is_active == True)  # noqa: E712
            .where(NotificationPreferences.next_notification_at.isnot(None))
            .where(NotificationPreferences.next_notification_at <= to_utc_aware(now))
            .order_by(NotificationPreferences.next_notification_at.asc())
            .limit(limit)
        )
        return list(db.execute(stmt).scalars())

    def get_uninitialized(self, db: Session, limit: Optional[int] = None) -> List[NotificationPreferences]:
        stmt = (
            select(NotificationPreferences)
            .where(NotificationPreferences.is_active == True)  # noqa: E712
            .where(NotificationPreferences.next_notification_at.is_(None))
            .order_by(NotificationPreferences.id.asc())
        )
        if limit:
            stmt = stmt.limit(limit)
        return list(db.execute(stmt).scalars())

    def save_schedule(
        self,
        db: Session,
        prefs: NotificationPreferences,
        times: Sequence[ScheduledTime],
        cursor: int,
        next_at: Optional[datetime],
    ) -> NotificationPreferences:
        prefs.scheduled_times = times_to_dicts(times)
        prefs.current_notification_index = cursor
        prefs.next_notification_at = to_utc_aware(next_at)
        prefs.updated_at = datetime.utcnow()
        db.add(prefs)
        db.commit()
        db.refresh(prefs)
        return prefs

    def update_position(self, db: Session, id: int, cursor: int, next_at: Optional[datetime]) -> bool:
        """Atomic single-row cursor update. False when the row is gone or was deactivated."""
        result = db.execute(
            update(NotificationPreferences)
            .where(NotificationPreferences.id == id)
            .where(NotificationPreferences.is_active == True)  # noqa: E712
            .values(
                current_notification_index=cursor,
                next_notification_at=to_utc_aware(next_at),
                updated_at=datetime.utcnow(),
            )
        )
        db.commit()
        return result.rowcount > 0

    def clear_schedule(self, db: Session, user_id: str) -> bool:
        result = db.execute(
            update(NotificationPreferences)
            .where(NotificationPreferences.user_id == user_id)
            .values(
                scheduled_times=[],
                current_notification_index=0,
                next_notification_at=None,
                updated_at=datetime.utcnow(),
            )
        )
        db.commit()
        return result.rowcount > 0

    @staticmethod
    def load_times(prefs: NotificationPreferences) -> List[ScheduledTime]:
        raw = prefs.scheduled_times or []
        if not isinstance(raw, list):
            raise MalformedStoredSchedule(f"scheduled_times for user {prefs.user_id} is not a list")
        try:
            times = [ScheduledTime.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedStoredSchedule(f"scheduled_times for user {prefs.user_id} unreadable: {e}") from e
        if times != sorted(times, key=lambda t: t.minute_of_day):
            raise MalformedStoredSchedule(f"scheduled_times for user {prefs.user_id} not sorted")
        return times

    @staticmethod
    def load_windows(prefs: NotificationPreferences) -> List[TimeWindow]:
        try:
            return windows_from_dicts(prefs.time_intervals or [])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedStoredSchedule(f"time_intervals for user {prefs.user_id} unreadable: {e}") from e


schedules = ScheduleRepository()
