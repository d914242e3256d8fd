from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from rememberme.db.base import Base


class Note(Base):
    """Read-only view of the notes owned by the notes service."""
    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String, nullable=False, index=True)
    text = Column(Text, nullable=False)
    source = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
