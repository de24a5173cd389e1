"""Optional archive of mirrored messages in a relational database."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from .config import DatabaseConfig
from .logger import get_logger
from .schema import ArchivedMessage, Base

if TYPE_CHECKING:
    from .message import Message
    from .room import Room

logger = get_logger(__name__)


class MessageArchive:
    """Stores every message notification it receives as a database row.

    Subscribe :meth:`record` to a room's (or the mirror's) ``message``
    notification. Bodies are kept only when ``store_content`` is enabled;
    the length is always recorded.
    """

    def __init__(self, config: DatabaseConfig, engine: Optional[Engine] = None) -> None:
        self.config = config
        self.engine = engine or create_engine(config.url)
        Base.metadata.create_all(self.engine)

    def record(self, room: "Room", message: "Message") -> None:
        """Store a message seen in ``room``"""
        body = message.body or ""
        with Session(self.engine) as session:
            row = ArchivedMessage(
                room_id=room.id,
                sender=message.sender.id,
                message_type=message.type.value if message.type else None,
                content=body if self.config.store_content else None,
                formatted_content=message.formatted_body if self.config.store_content else None,
                content_length=len(body),
                timestamp=datetime.fromtimestamp(message.timestamp / 1000, tz=timezone.utc),
            )
            session.add(row)
            session.commit()
        logger.debug(f"Archived message from {message.sender.id} in {room.id}")

    def messages(self, room_id: Optional[str] = None) -> list[ArchivedMessage]:
        """Archived messages, oldest first, optionally for a single room"""
        query = select(ArchivedMessage).order_by(ArchivedMessage.timestamp, ArchivedMessage.id)
        if room_id is not None:
            query = query.where(ArchivedMessage.room_id == room_id)
        with Session(self.engine, expire_on_commit=False) as session:
            return list(session.scalars(query))

    def close(self) -> None:
        self.engine.dispose()
