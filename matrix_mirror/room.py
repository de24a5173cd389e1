"""A Matrix room as seen by the mirror."""

from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Set

from .emitter import Emitter
from .errors import InvalidEventError
from .logger import get_logger
from .permissions import Permissions
from .state import RoomState, section_events
from .timeline import Timeline
from .user import INVITE, User
from .users import Users, is_user_id

if TYPE_CHECKING:
    from .events import EventDeduplicator

logger = get_logger(__name__)


class Room(Emitter):
    """A room known to the client.

    State notifications (``creator``, ``name``, ``topic``, ``join``, ...),
    ``permissions``, ``message`` and ``invited`` are all emitted on the room
    itself, with the room as the first argument.
    """

    def __init__(self, room_id: str, users: Users, events: "EventDeduplicator") -> None:
        self.id = room_id
        self.users = users
        self.events = events
        self.state = RoomState(self, users, events)
        self.timeline = Timeline(self, users, events)

    @property
    def canonical_alias(self) -> Optional[str]:
        return self.state.canonical_alias

    @property
    def aliases(self) -> List[str]:
        return self.state.aliases

    @property
    def name(self) -> Optional[str]:
        return self.state.name

    @property
    def topic(self) -> Optional[str]:
        return self.state.topic

    @property
    def creator(self) -> Optional[User]:
        return self.state.creator

    @property
    def guest_access(self) -> bool:
        return self.state.guest_access

    @property
    def history_visibility(self) -> Optional[str]:
        return self.state.history_visibility

    @property
    def join_rule(self) -> Optional[str]:
        return self.state.join_rule

    @property
    def members(self) -> Set[User]:
        return self.state.members

    @property
    def permissions(self) -> Permissions:
        return self.state.permissions

    def is_member(self, user: User) -> bool:
        return self.state.is_member(user)

    def process_join(self, data: Mapping[str, Any]) -> None:
        """Process a joined room's sync payload, state before timeline"""
        if "state" in data:
            self.state.update(data["state"])
        if "timeline" in data:
            self.timeline.update(data["timeline"])

    def process_invite(self, data: Mapping[str, Any]) -> None:
        """Process the stripped state of a room we've been invited to"""
        for event in section_events(data.get("invite_state")):
            self.process_invite_event(event)

    def process_leave(self, data: Mapping[str, Any]) -> None:
        """Process the last state and timeline seen before leaving the room"""
        if "state" in data:
            self.state.update(data["state"])
        if "timeline" in data:
            self.timeline.update(data["timeline"])

    def process_invite_event(self, event: Mapping[str, Any]) -> None:
        if not isinstance(event, Mapping) or event.get("type") != "m.room.member":
            return
        content = event.get("content")
        if not isinstance(content, Mapping) or content.get("membership") != INVITE:
            return
        # Stripped invite state usually has no event ID to deduplicate on
        has_id = True
        try:
            if self.events.is_processed(event):
                return
        except InvalidEventError:
            has_id = False

        sender_id, invitee_id = event.get("sender"), event.get("state_key")
        if not (is_user_id(sender_id) and is_user_id(invitee_id)):
            logger.warning(f"Skipping invite in {self.id} with invalid sender or invitee")
            return
        sender = self.users.resolve(sender_id)
        invitee = self.users.resolve(invitee_id)

        if not self.is_member(invitee) and invitee.process_invite(self, sender):
            logger.info(f"{sender.id} invited {invitee.id} to {self.id}")
            self.emit("invited", self, sender, invitee)

        if has_id:
            self.events.mark(event)

    def __str__(self) -> str:
        return self.name or self.canonical_alias or self.id

    def __repr__(self) -> str:
        return f"<Room {self.id}>"
