"""Folding of state events into a room."""

from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Set

from .errors import InvalidEventError, MalformedEventError
from .logger import get_logger
from .permissions import Permissions
from .user import INVITE, JOIN, User
from .users import Users, is_user_id

if TYPE_CHECKING:
    from .events import EventDeduplicator
    from .room import Room

logger = get_logger(__name__)

Event = Mapping[str, Any]


def content_of(event: Event) -> Mapping[str, Any]:
    content = event.get("content")
    if not isinstance(content, Mapping):
        raise MalformedEventError(f"Event {event.get('event_id')} has no content")
    return content


def string_field(event: Event, key: str) -> Optional[str]:
    """A content field that must be a string when present"""
    value = content_of(event).get(key)
    if value is not None and not isinstance(value, str):
        raise MalformedEventError(f"Event {event.get('event_id')} has a non-string {key}: {value!r}")
    return value


def section_events(section: Any) -> List[Any]:
    """The ``events`` list of a sync section, empty if the section is malformed"""
    events = section.get("events") if isinstance(section, Mapping) else None
    return events if isinstance(events, list) else []


class RoomState:
    """Mutable state of a single room.

    Members and the creator are stored by user ID and resolved through the
    Users directory on access. Notifications are emitted through the owning
    room.
    """

    def __init__(self, room: "Room", users: Users, events: "EventDeduplicator") -> None:
        self.room = room
        self.users = users
        self.events = events
        self.permissions = Permissions(room)

        self.canonical_alias: Optional[str] = None
        self.aliases: List[str] = []
        self.name: Optional[str] = None
        self.topic: Optional[str] = None
        self.guest_access: bool = False
        self.history_visibility: Optional[str] = None
        self.join_rule: Optional[str] = None
        self.creator_id: Optional[str] = None
        self._member_ids: Set[str] = set()

        self._handlers: Dict[str, Callable[[Event], None]] = {
            "m.room.create": self.handle_create,
            "m.room.canonical_alias": self.handle_canonical_alias,
            "m.room.aliases": self.handle_aliases,
            "m.room.name": self.handle_name,
            "m.room.topic": self.handle_topic,
            "m.room.guest_access": self.handle_guest_access,
            "m.room.history_visibility": self.handle_history_visibility,
            "m.room.join_rules": self.handle_join_rules,
            "m.room.power_levels": self.handle_power_levels,
            "m.room.member": self.handle_member,
        }

    @property
    def creator(self) -> Optional[User]:
        return self.users.lookup(self.creator_id) if self.creator_id else None

    @property
    def members(self) -> Set[User]:
        return {self.users.resolve(user_id) for user_id in self._member_ids}

    def is_member(self, user: User) -> bool:
        return user.id in self._member_ids

    def update(self, section: Mapping[str, Any]) -> None:
        """Apply the ``events`` of a state (or timeline) section in order"""
        for event in section_events(section):
            self.process_event(event)

    def process_event(self, event: Event) -> None:
        if not isinstance(event, Mapping):
            logger.warning(f"Skipping non-object state event in {self.room.id}")
            return
        try:
            if self.events.is_processed(event):
                return
        except InvalidEventError:
            logger.warning(f"Skipping state event without ID in {self.room.id}")
            return

        event_type = event.get("type")
        handler = self._handlers.get(event_type) if isinstance(event_type, str) else None
        if handler is None:
            logger.debug(f"Ignoring unhandled event type {event_type!r} in {self.room.id}")
        else:
            try:
                handler(event)
            except MalformedEventError as e:
                logger.warning(f"Skipping malformed event in {self.room.id}: {e}")
                return

        self.events.mark(event)

    def _user(self, event: Event, user_id: Any) -> User:
        if not is_user_id(user_id):
            raise MalformedEventError(f"Event {event.get('event_id')} refers to invalid user {user_id!r}")
        return self.users.resolve(user_id)

    def handle_create(self, event: Event) -> None:
        content = content_of(event)
        # Room versions 11+ drop content.creator in favour of the sender
        creator = self._user(event, content.get("creator", event.get("sender")))
        self.creator_id = creator.id
        self.room.emit("creator", self.room, creator)

    def handle_canonical_alias(self, event: Event) -> None:
        self.canonical_alias = string_field(event, "alias")
        self.room.emit("canonical_alias", self.room, self.canonical_alias)

    def handle_aliases(self, event: Event) -> None:
        aliases = content_of(event).get("aliases") or []
        if not isinstance(aliases, list) or not all(isinstance(alias, str) for alias in aliases):
            raise MalformedEventError(f"Aliases event {event.get('event_id')} has no list of aliases")
        self.aliases = list(aliases)
        self.room.emit("aliases", self.room, self.aliases)

    def handle_name(self, event: Event) -> None:
        self.name = string_field(event, "name")
        self.room.emit("name", self.room, self.name)

    def handle_topic(self, event: Event) -> None:
        self.topic = string_field(event, "topic")
        self.room.emit("topic", self.room, self.topic)

    def handle_guest_access(self, event: Event) -> None:
        self.guest_access = content_of(event).get("guest_access") == "can_join"
        self.room.emit("guest_access", self.room, self.guest_access)

    def handle_history_visibility(self, event: Event) -> None:
        self.history_visibility = string_field(event, "history_visibility")
        self.room.emit("history_visibility", self.room, self.history_visibility)

    def handle_join_rules(self, event: Event) -> None:
        self.join_rule = string_field(event, "join_rule")
        self.room.emit("join_rule", self.room, self.join_rule)

    def handle_power_levels(self, event: Event) -> None:
        content = content_of(event)
        levels = content.get("users") or {}
        if not isinstance(levels, Mapping):
            raise MalformedEventError(f"Power levels {event.get('event_id')} have no user table")
        self.permissions.update(content)
        self.room.emit("permissions", self.room)

        for user_id, level in levels.items():
            if not is_user_id(user_id) or not isinstance(level, int):
                logger.warning(f"Ignoring power level {level!r} for {user_id!r} in {self.room.id}")
                continue
            self.users.resolve(user_id).set_power_level(self.room, level)

    def handle_member(self, event: Event) -> None:
        content = content_of(event)
        membership = content.get("membership")
        if not isinstance(membership, str):
            raise MalformedEventError(f"Member event {event.get('event_id')} has no membership")

        # state_key names the affected user, sender the one who acted
        user = self._user(event, event.get("state_key", event.get("sender")))
        self._user(event, event.get("sender"))
        string_field(event, "displayname")
        string_field(event, "avatar_url")

        if membership == INVITE and self.is_member(user):
            logger.debug(f"Ignoring invite for {user.id}, already joined to {self.room.id}")
            return

        user.set_membership(self.room, membership)
        user.update_profile(content)

        if membership == JOIN:
            self._member_ids.add(user.id)
        else:
            self._member_ids.discard(user.id)

        self.room.emit(membership, self.room, user)
