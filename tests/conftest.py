from datetime import datetime, timedelta, timezone as dt_timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import rememberme.models  # noqa: F401
from rememberme.db.base import Base
from rememberme.models import Note, NotificationPreferences
from rememberme.notifications.clock import Clock
from rememberme.notifications.delivery import NotificationSender
from rememberme.notifications.exceptions import DeliveryFailed


class FixedClock(Clock):
    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> None:
        self._now = self._now + timedelta(**kwargs)


class RecordingSender(NotificationSender):
    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.sent = []

    def send(self, user_id, content):
        if user_id in self.fail_for:
            raise DeliveryFailed(user_id, reason="transport down")
        self.sent.append((user_id, content.text))


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=dt_timezone.utc)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'notifications.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    # Thursday 2026-01-15 14:00 UTC
    return FixedClock(utc(2026, 1, 15, 14, 0))


@pytest.fixture
def make_preferences(db):
    def _make(user_id="user-1", **overrides):
        values = dict(
            user_id=user_id,
            notifications_per_day=3,
            timezone="UTC",
            time_intervals=[{"start_time": "09:00", "end_time": "18:00"}],
            is_active=True,
            scheduled_times=[],
            current_notification_index=0,
            next_notification_at=None,
        )
        values.update(overrides)
        prefs = NotificationPreferences(**values)
        db.add(prefs)
        db.commit()
        db.refresh(prefs)
        return prefs

    return _make


@pytest.fixture
def make_note(db):
    def _make(owner_id="user-1", text="Stay curious", source="book"):
        note = Note(owner_id=owner_id, text=text, source=source)
        db.add(note)
        db.commit()
        return note

    return _make
