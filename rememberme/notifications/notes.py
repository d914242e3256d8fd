from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rememberme.models.note import Note


@dataclass(frozen=True)
class ReminderContent:
    """Text shown in a reminder, taken from one of the user's notes"""
    text: str
    source: Optional[str] = None
    note_id: Optional[int] = None


class RandomNotePicker:
    """Picks one random note for a user at delivery time."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def pick_one(self, user_id: str) -> Optional[ReminderContent]:
        db = self.session_factory()
        try:
            note = db.execute(
                select(Note)
                .where(Note.owner_id == user_id)
                .order_by(func.random())
                .limit(1)
            ).scalars().first()
        finally:
            db.close()
        if note is None:
            return None
        return ReminderContent(text=note.text, source=note.source, note_id=note.id)
