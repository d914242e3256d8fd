"""
Periodic sweep that delivers due reminders and advances each schedule's cursor
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import Session

from rememberme.utils.timezone import is_valid_timezone, to_utc_aware

from .calculator import NextFireCalculator
from .clock import Clock, SystemClock
from .delivery import NotificationSender
from .exceptions import DeliveryFailed, MalformedStoredSchedule, RecordNotFound
from .metrics import (
    notifications_delivered_total,
    notifications_failed_total,
    notifications_skipped_total,
    scheduler_sweeps_skipped_total,
    scheduler_sweeps_total,
)
from .notes import RandomNotePicker
from .repository import ScheduleRepository, schedules
from .scheduler import NotificationSchedulerService

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "notification_sweep_job"


class Outcome(str, Enum):
    DELIVERED = "delivered"
    FAILED = "failed"
    NO_CONTENT = "no_content"
    REPAIRED = "repaired"
    MISSING = "missing"


@dataclass
class SweepReport:
    started_at: datetime
    due: int = 0
    delivered: int = 0
    no_content: int = 0
    repaired: int = 0
    missing: int = 0
    failed_user_ids: List[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_user_ids)

    def record(self, user_id: str, outcome: Outcome) -> None:
        if outcome == Outcome.DELIVERED:
            self.delivered += 1
        elif outcome == Outcome.FAILED:
            self.failed_user_ids.append(user_id)
        elif outcome == Outcome.NO_CONTENT:
            self.no_content += 1
        elif outcome == Outcome.REPAIRED:
            self.repaired += 1
        elif outcome == Outcome.MISSING:
            self.missing += 1


class SweepLoop:
    """Owns the single sweep timer; each tick delivers due reminders and advances cursors.

    Ticks never overlap: a tick requested while another is running is skipped.
    Within a tick, schedules are processed independently (up to `max_workers`
    at a time), each in its own session, and one failure never stops the rest.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        sender: NotificationSender,
        note_picker: Optional[RandomNotePicker] = None,
        clock: Optional[Clock] = None,
        batch_size: int = 100,
        max_workers: int = 4,
        interval_seconds: int = 60,
        repository: ScheduleRepository = schedules,
    ):
        self.session_factory = session_factory
        self.sender = sender
        self.note_picker = note_picker or RandomNotePicker(session_factory)
        self.clock = clock or SystemClock()
        self.batch_size = batch_size
        self.max_workers = max(1, max_workers)
        self.interval_seconds = interval_seconds
        self.repository = repository

        self._tick_lock = threading.Lock()
        self._scheduler: Optional[BackgroundScheduler] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def recover(self) -> int:
        """Re-initialize active schedules that have no next fire time."""
        db = self.session_factory()
        try:
            return NotificationSchedulerService(db, clock=self.clock, repository=self.repository).initialize_missing()
        finally:
            db.close()

    def start(self) -> None:
        if self._scheduler is not None:
            logger.debug("[Sweep] Scheduler already started")
            return
        self.recover()
        self._scheduler = BackgroundScheduler(timezone="UTC")
        self._scheduler.add_job(
            self.tick,
            "interval",
            seconds=self.interval_seconds,
            id=SWEEP_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(f"🚀 [Sweep] Scheduler started: sweeping every {self.interval_seconds}s, batch {self.batch_size}")

    def stop(self) -> None:
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("🛑 [Sweep] Scheduler stopped")

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    # ------------------------------------------------------------------
    # Sweep
    # ------------------------------------------------------------------
    def tick(self) -> Optional[SweepReport]:
        if not self._tick_lock.acquire(blocking=False):
            logger.warning("[Sweep] Previous sweep still running, skipping this tick")
            scheduler_sweeps_skipped_total.inc()
            return None
        try:
            return self._sweep()
        finally:
            self._tick_lock.release()

    def _sweep(self) -> SweepReport:
        now = self.clock.now()
        report = SweepReport(started_at=now)
        scheduler_sweeps_total.inc()

        db = self.session_factory()
        try:
            due_ids = [(p.id, p.user_id) for p in self.repository.get_due(db, now, limit=self.batch_size)]
        finally:
            db.close()

        report.due = len(due_ids)
        if not due_ids:
            return report
        logger.info(f"[Sweep] Processing {len(due_ids)} due notifications")

        if self.max_workers == 1 or len(due_ids) == 1:
            outcomes = [self._process_safely(schedule_id, user_id) for schedule_id, user_id in due_ids]
        else:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(due_ids))) as pool:
                outcomes = list(pool.map(lambda item: self._process_safely(*item), due_ids))

        for (_, user_id), outcome in zip(due_ids, outcomes):
            report.record(user_id, outcome)

        logger.info(
            f"✅ [Sweep] Done: {report.delivered} delivered, {report.failed} failed, "
            f"{report.no_content} without content, {report.repaired} repaired, {report.missing} missing"
        )
        return report

    def _process_safely(self, schedule_id: int, user_id: str) -> Outcome:
        try:
            return self._process_one(schedule_id)
        except RecordNotFound:
            logger.info(f"[Sweep] Schedule for user {user_id} removed before processing")
            notifications_skipped_total.inc()
            return Outcome.MISSING
        except Exception:
            logger.exception(f"[Sweep] Failed to process notification for user {user_id}")
            notifications_failed_total.inc()
            return Outcome.FAILED

    def _process_one(self, schedule_id: int) -> Outcome:
        db = self.session_factory()
        try:
            prefs = self.repository.get(db, schedule_id)
            if prefs is None or not prefs.is_active or prefs.next_notification_at is None:
                raise RecordNotFound(schedule_id)

            user_id = prefs.user_id
            fired_at = to_utc_aware(prefs.next_notification_at)
            cursor = prefs.current_notification_index or 0
            try:
                if not is_valid_timezone(prefs.timezone):
                    raise MalformedStoredSchedule(f"timezone {prefs.timezone!r} of user {user_id} cannot be resolved")
                times = self.repository.load_times(prefs)
                if not times or not 0 <= cursor < len(times):
                    raise MalformedStoredSchedule(
                        f"cursor {cursor} invalid for {len(times)} scheduled times of user {user_id}"
                    )
                next_fire = NextFireCalculator.after_delivery(
                    times, prefs.timezone, cursor, self.clock.now(), fired_at=fired_at
                )
            except MalformedStoredSchedule as e:
                # No delivery for a slot we cannot trust; rebuild the position from scratch
                scheduler = NotificationSchedulerService(db, clock=self.clock, repository=self.repository)
                if is_valid_timezone(prefs.timezone):
                    logger.warning(f"[Sweep] {e}; re-initializing")
                    scheduler.reinitialize(prefs)
                else:
                    logger.warning(f"[Sweep] {e}; clearing schedule until preferences are updated")
                    scheduler.deactivate(user_id)
                notifications_skipped_total.inc()
                return Outcome.REPAIRED

            outcome = self._deliver(user_id)

            if not self.repository.update_position(db, schedule_id, next_fire.next_index, next_fire.next_fire_at):
                raise RecordNotFound(schedule_id)
            return outcome
        finally:
            db.close()

    def _deliver(self, user_id: str) -> Outcome:
        try:
            content = self.note_picker.pick_one(user_id)
            if content is None:
                logger.warning(f"[Sweep] No notes found for user {user_id}")
                notifications_skipped_total.inc()
                return Outcome.NO_CONTENT
            self.sender.send(user_id, content)
        except DeliveryFailed as e:
            logger.error(f"❌ [Sweep] {e}")
            notifications_failed_total.inc()
            return Outcome.FAILED
        except Exception as e:
            logger.error(f"❌ [Sweep] Failed to send notification to user {user_id}: {e!r}")
            notifications_failed_total.inc()
            return Outcome.FAILED
        notifications_delivered_total.inc()
        return Outcome.DELIVERED
