"""Database schema for the message archive."""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class ArchivedMessage(Base):
    """A message seen in a mirrored room."""
    __tablename__ = "matrix_messages"

    id = Column(Integer, primary_key=True)
    room_id = Column(String(255), nullable=False, index=True)
    sender = Column(String(255), nullable=False, index=True)
    message_type = Column(String(50), nullable=True)
    content = Column(Text, nullable=True)
    formatted_content = Column(Text, nullable=True)
    content_length = Column(Integer, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
