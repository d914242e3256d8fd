from rememberme.notifications.repository import schedules
from rememberme.notifications.scheduler import NotificationSchedulerService
from rememberme.utils.timezone import to_utc_aware

from .conftest import utc


def test_reschedule_distributes_and_points_at_next_time(db, clock, make_preferences):
    prefs = make_preferences()
    service = NotificationSchedulerService(db, clock=clock)

    prefs = service.reschedule(prefs)

    assert prefs.scheduled_times == [
        {"hour": 10, "minute": 30},
        {"hour": 13, "minute": 30},
        {"hour": 16, "minute": 30},
    ]
    assert prefs.current_notification_index == 2
    assert to_utc_aware(prefs.next_notification_at) == utc(2026, 1, 15, 16, 30)


def test_reschedule_inactive_clears_schedule(db, clock, make_preferences):
    prefs = make_preferences(
        is_active=False,
        scheduled_times=[{"hour": 9, "minute": 0}],
        next_notification_at=utc(2026, 1, 15, 9, 0),
    )

    prefs = NotificationSchedulerService(db, clock=clock).reschedule(prefs)

    assert prefs.scheduled_times == []
    assert prefs.current_notification_index == 0
    assert prefs.next_notification_at is None


def test_deactivate_and_schedule_info(db, clock, make_preferences):
    service = NotificationSchedulerService(db, clock=clock)
    service.reschedule(make_preferences())

    info = service.get_schedule_info("user-1")
    assert [str(t) for t in info.scheduled_times] == ["10:30", "13:30", "16:30"]
    assert info.next_notification_at == utc(2026, 1, 15, 16, 30)
    assert info.to_dict()["scheduled_times"][0] == {"hour": 10, "minute": 30}

    service.deactivate("user-1")
    db.expire_all()
    info = service.get_schedule_info("user-1")
    assert info.scheduled_times == []
    assert info.next_notification_at is None

    assert service.get_schedule_info("nobody") is None


def test_initialize_missing_recovers_active_schedules(db, clock, make_preferences):
    make_preferences(
        "user-1",
        scheduled_times=[{"hour": 9, "minute": 0}, {"hour": 13, "minute": 0}, {"hour": 17, "minute": 0}],
    )
    make_preferences("user-2", scheduled_times=[{"hour": "x"}])
    make_preferences("user-3", is_active=False)

    initialized = NotificationSchedulerService(db, clock=clock).initialize_missing()

    assert initialized == 2
    db.expire_all()
    first = schedules.get_by_user(db, "user-1")
    assert first.current_notification_index == 2
    assert to_utc_aware(first.next_notification_at) == utc(2026, 1, 15, 17, 0)

    # unreadable times are rebuilt from the windows
    second = schedules.get_by_user(db, "user-2")
    assert len(second.scheduled_times) == 3
    assert second.next_notification_at is not None

    assert schedules.get_by_user(db, "user-3").next_notification_at is None


def test_reinitialize_redistributes_when_count_changed(db, clock, make_preferences):
    prefs = make_preferences(
        notifications_per_day=2,
        scheduled_times=[{"hour": 9, "minute": 0}, {"hour": 13, "minute": 0}, {"hour": 17, "minute": 0}],
    )

    next_fire = NotificationSchedulerService(db, clock=clock).reinitialize(prefs)

    assert prefs.scheduled_times == [{"hour": 11, "minute": 15}, {"hour": 15, "minute": 45}]
    assert next_fire.next_index == 1
    assert next_fire.next_fire_at == utc(2026, 1, 15, 15, 45)
