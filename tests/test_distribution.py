import pytest

from rememberme.notifications.distribution import (
    ScheduledTime,
    TimeWindow,
    distribute,
    parse_time_of_day,
    windows_from_dicts,
)


def window(start: str, end: str) -> TimeWindow:
    return TimeWindow(start=parse_time_of_day(start), end=parse_time_of_day(end))


WINDOW_SETS = [
    [window("09:00", "18:00")],
    [window("22:00", "02:00")],
    [window("07:30", "08:15"), window("12:00", "13:00"), window("19:00", "23:45")],
    [window("18:00", "20:00"), window("08:00", "10:00")],
    [window("00:00", "00:00")],
    [window("09:00", "09:01")],
]


@pytest.mark.parametrize("windows", WINDOW_SETS)
def test_distribute_returns_count_sorted_valid_times(windows):
    for count in range(1, 25):
        times = distribute(count, windows)
        assert len(times) == count
        minutes = [t.minute_of_day for t in times]
        assert minutes == sorted(minutes)
        for t in times:
            assert 0 <= t.hour <= 23
            assert 0 <= t.minute <= 59


def test_distribute_is_deterministic():
    windows = [window("07:30", "08:15"), window("19:00", "01:00")]
    assert distribute(7, windows) == distribute(7, windows)


def test_single_window_centres():
    times = distribute(3, [window("09:00", "18:00")])
    assert [str(t) for t in times] == ["10:30", "13:30", "16:30"]


def test_wraparound_window_sorted_by_minute_of_day():
    times = distribute(2, [window("22:00", "02:00")])
    assert times == [ScheduledTime(1, 0), ScheduledTime(23, 0)]


def test_windows_walked_in_input_order():
    # 240 minutes total, slices centred at 60 and 180 minutes into the walk
    times = distribute(2, [window("18:00", "20:00"), window("08:00", "10:00")])
    assert [str(t) for t in times] == ["09:00", "19:00"]


def test_two_windows_split_evenly():
    times = distribute(4, [window("08:00", "10:00"), window("18:00", "20:00")])
    assert [str(t) for t in times] == ["08:30", "09:30", "18:30", "19:30"]


def test_overlapping_windows_are_counted_twice():
    times = distribute(2, [window("09:00", "11:00"), window("09:00", "11:00")])
    assert [str(t) for t in times] == ["10:00", "10:00"]


def test_more_notifications_than_minutes_share_minutes():
    times = distribute(5, [window("09:00", "09:02")])
    assert [str(t) for t in times] == ["09:00", "09:00", "09:01", "09:01", "09:01"]


def test_equal_start_and_end_is_a_full_day():
    assert window("06:00", "06:00").duration == 24 * 60
    times = distribute(4, [window("06:00", "06:00")])
    assert [str(t) for t in times] == ["03:00", "09:00", "15:00", "21:00"]


def test_distribute_rejects_bad_input():
    with pytest.raises(ValueError):
        distribute(0, [window("09:00", "10:00")])
    with pytest.raises(ValueError):
        distribute(1, [])


def test_windows_from_dicts_accepts_single_digit_hours():
    windows = windows_from_dicts([{"start_time": "9:00", "end_time": "17:30"}])
    assert windows == [TimeWindow(start=540, end=1050)]
    assert windows[0].to_dict() == {"start_time": "09:00", "end_time": "17:30"}


@pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "", "1200"])
def test_parse_time_of_day_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_time_of_day(value)


def test_scheduled_time_from_dict_validates_range():
    assert ScheduledTime.from_dict({"hour": 23, "minute": 59}) == ScheduledTime(23, 59)
    with pytest.raises(ValueError):
        ScheduledTime.from_dict({"hour": 24, "minute": 0})
