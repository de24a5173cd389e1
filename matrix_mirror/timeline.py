"""Decoding of room timeline events."""

from typing import TYPE_CHECKING, Any, Mapping

from .errors import InvalidEventError, InvalidIdentifierError, MalformedEventError
from .logger import get_logger
from .message import Message
from .state import section_events
from .users import Users

if TYPE_CHECKING:
    from .events import EventDeduplicator
    from .room import Room

logger = get_logger(__name__)


class Timeline:
    """Turns ``m.room.message`` events into Message notifications on a room."""

    def __init__(self, room: "Room", users: Users, events: "EventDeduplicator") -> None:
        self.room = room
        self.users = users
        self.events = events

    def update(self, section: Mapping[str, Any]) -> None:
        """Process timeline events, then hand the section to the room state.

        State events may appear in the timeline, so every event not consumed
        here is offered to the state machine as well.
        """
        for event in section_events(section):
            self.process_event(event)

        self.room.state.update(section)

    def process_event(self, event: Mapping[str, Any]) -> None:
        if not isinstance(event, Mapping):
            logger.warning(f"Skipping non-object timeline event in {self.room.id}")
            return
        try:
            if self.events.is_processed(event):
                return
        except InvalidEventError:
            logger.warning(f"Skipping timeline event without ID in {self.room.id}")
            return

        if event.get("type") == "m.room.message":
            self.handle_message(event)

    def handle_message(self, event: Mapping[str, Any]) -> None:
        content = event.get("content")
        if not isinstance(content, Mapping):
            logger.warning(f"Skipping message {event['event_id']} without content")
            return
        try:
            sender = self.users.resolve(event.get("sender"))
        except InvalidIdentifierError:
            logger.warning(f"Skipping message {event['event_id']} with invalid sender")
            return
        try:
            message = Message.from_content(sender, content, event.get("origin_server_ts"))
        except MalformedEventError as e:
            logger.warning(f"Skipping malformed message {event['event_id']} in {self.room.id}: {e}")
            return

        logger.debug(f"New {message.type} message in {self.room.id} from {sender.id}")
        self.room.emit("message", self.room, message)
        self.events.mark(event)
