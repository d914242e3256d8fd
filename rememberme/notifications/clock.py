"""
Timezone-aware wall clock helpers backed by the IANA database (zoneinfo)
"""
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Optional, Tuple

from rememberme.utils.timezone import get_zoneinfo, to_utc_aware


class Clock:
    """Source of the current instant. Always returns UTC-aware datetimes."""

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(dt_timezone.utc)


def wall_clock_now(tz_name: str, now: Optional[datetime] = None) -> Tuple[int, int]:
    """Current (hour, minute) as observed in `tz_name`."""
    now = to_utc_aware(now) if now is not None else datetime.now(dt_timezone.utc)
    local = now.astimezone(get_zoneinfo(tz_name))
    return local.hour, local.minute


def instant_for(
    hour: int,
    minute: int,
    tz_name: str,
    day_offset: int = 0,
    now: Optional[datetime] = None,
) -> datetime:
    """UTC instant of `hour:minute` on (today in `tz_name`) + `day_offset` days.

    The offset is taken for the target date, so the result stays correct
    across DST transitions. Non-existent local times (spring-forward gap)
    resolve with the pre-transition offset.
    """
    tz = get_zoneinfo(tz_name)
    now = to_utc_aware(now) if now is not None else datetime.now(dt_timezone.utc)
    target_date = now.astimezone(tz).date() + timedelta(days=day_offset)
    local = datetime(target_date.year, target_date.month, target_date.day, hour, minute, tzinfo=tz)
    return local.astimezone(dt_timezone.utc)
