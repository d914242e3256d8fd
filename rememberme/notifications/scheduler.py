"""
Scheduling engine entry points used on preference writes and startup recovery
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from rememberme.models.notification_preferences import NotificationPreferences
from rememberme.utils.timezone import to_utc_aware

from .calculator import NextFire, NextFireCalculator
from .clock import Clock, SystemClock
from .distribution import ScheduledTime, distribute
from .exceptions import MalformedStoredSchedule
from .metrics import schedules_initialized_total
from .repository import ScheduleRepository, schedules

logger = logging.getLogger(__name__)


@dataclass
class ScheduleInfo:
    scheduled_times: List[ScheduledTime]
    next_notification_at: Optional[datetime]
    current_notification_index: int

    def to_dict(self) -> dict:
        return {
            "scheduled_times": [t.to_dict() for t in self.scheduled_times],
            "next_notification_at": self.next_notification_at,
            "current_notification_index": self.current_notification_index,
        }


class NotificationSchedulerService:
    """Recomputes and reads a user's schedule within one database session."""

    def __init__(self, db: Session, clock: Optional[Clock] = None, repository: ScheduleRepository = schedules):
        self.db = db
        self.clock = clock or SystemClock()
        self.repository = repository

    def reschedule(self, prefs: NotificationPreferences) -> NotificationPreferences:
        """Distribute times for `prefs` and point the cursor at the next one.

        Inactive preferences, or preferences without windows, are cleared instead.
        """
        if not prefs.is_active or not prefs.time_intervals:
            return self.repository.save_schedule(self.db, prefs, [], 0, None)

        windows = self.repository.load_windows(prefs)
        times = distribute(prefs.notifications_per_day, windows)
        next_fire = NextFireCalculator.reinitialize(times, prefs.timezone, self.clock.now())
        prefs = self.repository.save_schedule(self.db, prefs, times, next_fire.next_index, next_fire.next_fire_at)
        schedules_initialized_total.inc()

        logger.info(
            f"[Scheduler] Scheduled {len(times)} notifications for user {prefs.user_id}. "
            f"Next at: {next_fire.next_fire_at.isoformat() if next_fire.next_fire_at else None}"
        )
        return prefs

    def reinitialize(self, prefs: NotificationPreferences) -> NextFire:
        """Recompute cursor and next fire from the stored times, re-distributing when they are unusable."""
        try:
            times = self.repository.load_times(prefs)
        except MalformedStoredSchedule as e:
            logger.warning(f"[Scheduler] {e}; re-distributing from windows")
            times = []
        if len(times) != prefs.notifications_per_day:
            windows = self.repository.load_windows(prefs)
            times = distribute(prefs.notifications_per_day, windows) if windows else []

        next_fire = NextFireCalculator.reinitialize(times, prefs.timezone, self.clock.now())
        self.repository.save_schedule(self.db, prefs, times, next_fire.next_index, next_fire.next_fire_at)
        schedules_initialized_total.inc()
        return next_fire

    def deactivate(self, user_id: str) -> None:
        self.repository.clear_schedule(self.db, user_id)
        logger.info(f"[Scheduler] Cleared schedule for user {user_id}")

    def get_schedule_info(self, user_id: str) -> Optional[ScheduleInfo]:
        prefs = self.repository.get_by_user(self.db, user_id)
        if prefs is None:
            return None
        try:
            times = self.repository.load_times(prefs)
        except MalformedStoredSchedule:
            times = []
        return ScheduleInfo(
            scheduled_times=times,
            next_notification_at=to_utc_aware(prefs.next_notification_at),
            current_notification_index=prefs.current_notification_index or 0,
        )

    def initialize_missing(self, limit: Optional[int] = None) -> int:
        """Startup recovery for active schedules left without a next fire time."""
        pending = self.repository.get_uninitialized(self.db, limit=limit)
        initialized = 0
        for prefs in pending:
            try:
                self.reinitialize(prefs)
                initialized += 1
            except Exception:
                self.db.rollback()
                logger.exception(f"[Scheduler] Could not initialize schedule for user {prefs.user_id}")

        logger.info(f"[Scheduler] Initialized notification times for {initialized} users")
        return initialized
