"""
Next-fire calculation: which scheduled time-of-day fires next, and when
"""
import logging
from datetime import datetime
from typing import NamedTuple, Optional, Sequence

from .clock import instant_for, wall_clock_now
from .distribution import ScheduledTime
from .exceptions import MalformedStoredSchedule

logger = logging.getLogger(__name__)


class NextFire(NamedTuple):
    next_index: int
    next_fire_at: Optional[datetime]


class NextFireCalculator:
    """Computes the cursor and absolute next-fire instant for a sorted list of times."""

    @staticmethod
    def reinitialize(times: Sequence[ScheduledTime], tz_name: str, now: datetime) -> NextFire:
        """First time strictly after the wall clock in `tz_name`, else the first one tomorrow."""
        if not times:
            return NextFire(0, None)

        hour, minute = wall_clock_now(tz_name, now)
        for index, time in enumerate(times):
            if time.is_after(hour, minute):
                fire_at = instant_for(time.hour, time.minute, tz_name, day_offset=0, now=now)
                if fire_at > now:
                    return NextFire(index, fire_at)
                # DST gap pushed the instant behind us; keep looking
                logger.debug(f"[NextFire] {time} in {tz_name} resolved to the past, skipping")

        first = times[0]
        return NextFire(0, instant_for(first.hour, first.minute, tz_name, day_offset=1, now=now))

    @staticmethod
    def after_delivery(
        times: Sequence[ScheduledTime],
        tz_name: str,
        fired_index: int,
        now: datetime,
        fired_at: Optional[datetime] = None,
    ) -> NextFire:
        """Step the cursor past `fired_index`, wrapping to tomorrow after the last slot.

        The day offset is applied to the local date of `fired_at` (the slot
        that just fired) when known, otherwise to today's date.
        """
        if not times:
            return NextFire(0, None)
        if not 0 <= fired_index < len(times):
            raise MalformedStoredSchedule(
                f"cursor {fired_index} out of range for {len(times)} scheduled times"
            )

        next_index = (fired_index + 1) % len(times)
        day_offset = 1 if fired_index == len(times) - 1 else 0
        time = times[next_index]
        reference = fired_at or now
        fire_at = instant_for(time.hour, time.minute, tz_name, day_offset=day_offset, now=reference)
        if fire_at > now:
            return NextFire(next_index, fire_at)

        # Late sweep or several times in the same minute: never hand back a past slot
        logger.info(
            f"[NextFire] Slot {next_index} ({time}) already passed in {tz_name}; re-initializing from now"
        )
        return NextFireCalculator.reinitialize(times, tz_name, now)

    @classmethod
    def advance(
        cls,
        times: Sequence[ScheduledTime],
        tz_name: str,
        cursor: int,
        just_fired: bool,
        now: datetime,
        fired_at: Optional[datetime] = None,
    ) -> NextFire:
        if just_fired:
            return cls.after_delivery(times, tz_name, cursor, now, fired_at=fired_at)
        return cls.reinitialize(times, tz_name, now)
