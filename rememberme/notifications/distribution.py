"""
Even distribution of daily notification times across allowed windows
"""
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

MINUTES_PER_DAY = 24 * 60

TIME_OF_DAY_RE = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")


def parse_time_of_day(value: str) -> int:
    """'HH:mm' -> minutes since midnight."""
    if not isinstance(value, str) or not TIME_OF_DAY_RE.match(value):
        raise ValueError(f"Invalid time format {value!r}. Use HH:mm (24-hour)")
    hour, minute = value.split(":")
    return int(hour) * 60 + int(minute)


@dataclass(frozen=True)
class TimeWindow:
    """Allowed span of times-of-day, in minutes since midnight"""
    start: int
    end: int

    @property
    def duration(self) -> int:
        end = self.end
        if end <= self.start:
            end += MINUTES_PER_DAY
        return end - self.start

    def to_dict(self) -> Dict[str, str]:
        return {
            "start_time": f"{self.start // 60:02d}:{self.start % 60:02d}",
            "end_time": f"{self.end // 60:02d}:{self.end % 60:02d}",
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeWindow":
        return cls(
            start=parse_time_of_day(data["start_time"]),
            end=parse_time_of_day(data["end_time"]),
        )


@dataclass(frozen=True, order=True)
class ScheduledTime:
    """One fire time-of-day. Ordering is by minute of day."""
    hour: int
    minute: int

    @property
    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute

    def is_after(self, hour: int, minute: int) -> bool:
        return self.minute_of_day > hour * 60 + minute

    def to_dict(self) -> Dict[str, int]:
        return {"hour": self.hour, "minute": self.minute}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduledTime":
        hour = int(data["hour"])
        minute = int(data["minute"])
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValueError(f"Time of day out of range: {hour}:{minute}")
        return cls(hour=hour, minute=minute)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def distribute(count: int, windows: Iterable[TimeWindow]) -> List[ScheduledTime]:
    """Place `count` times at the centres of equal slices of the windows' combined duration.

    Windows are walked in the order given (overlaps count twice); the result
    is sorted ascending by minute of day, so a wrap-around window yields its
    after-midnight times first.
    """
    windows = list(windows)
    if count < 1:
        raise ValueError("count must be >= 1")
    if not windows:
        raise ValueError("at least one window is required")

    total = sum(w.duration for w in windows)
    spacing = total / count

    times: List[ScheduledTime] = []
    for i in range(count):
        target = spacing * i + spacing / 2
        accumulated = 0
        for window in windows:
            if target < accumulated + window.duration:
                absolute = (window.start + (target - accumulated)) % MINUTES_PER_DAY
                times.append(ScheduledTime(hour=int(absolute // 60), minute=int(absolute % 60)))
                break
            accumulated += window.duration

    times.sort(key=lambda t: t.minute_of_day)
    return times


def windows_from_dicts(items: Iterable[Dict[str, Any]]) -> List[TimeWindow]:
    return [TimeWindow.from_dict(item) for item in items]


def times_to_dicts(times: Iterable[ScheduledTime]) -> List[Dict[str, int]]:
    return [t.to_dict() for t in times]
