"""Directory of the rooms known to the client."""

from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

from .emitter import Emitter
from .errors import InvalidIdentifierError
from .events import EventDeduplicator
from .logger import get_logger
from .room import Room
from .users import Users

logger = get_logger(__name__)


def is_room_id(value: object) -> bool:
    return isinstance(value, str) and value.startswith("!") and len(value) > 1


class Rooms(Emitter):
    """Maps room IDs to exactly one Room instance each.

    Emits ``discovered(room)`` whenever a new room is created. When
    ``room_ids`` is given, sync payloads for any other room are skipped.
    """

    def __init__(
        self,
        users: Users,
        events: EventDeduplicator,
        room_ids: Optional[Iterable[str]] = None,
    ) -> None:
        self.users = users
        self.events = events
        self.room_ids = set(room_ids) if room_ids else None
        # room_id => room
        self._rooms: Dict[str, Room] = {}

    def resolve(self, room_id: str) -> Room:
        """Get the Room for ``room_id``, creating it on first reference"""
        if not is_room_id(room_id):
            raise InvalidIdentifierError(f"Invalid room ID: {room_id!r}")
        room = self._rooms.get(room_id)
        if room is not None:
            return room
        room = Room(room_id, self.users, self.events)
        self._rooms[room_id] = room
        logger.debug(f"Discovered room {room_id}")
        self.emit("discovered", room)
        return room

    def lookup(self, key: str) -> Optional[Room]:
        """Find a room by ID, canonical alias or name without creating one"""
        if key.startswith("!"):
            return self._rooms.get(key)
        if key.startswith("#"):
            room = next((r for r in self._rooms.values() if r.canonical_alias == key), None)
            if room is not None:
                return room
        return next((r for r in self._rooms.values() if r.name == key), None)

    def process_events(self, rooms: Mapping[str, Any]) -> None:
        """Dispatch the ``rooms`` section of a sync response"""
        if not isinstance(rooms, Mapping):
            logger.warning(f"Ignoring malformed rooms section {rooms!r}")
            return
        for room_id, data in self._wanted(rooms.get("join")):
            self.resolve(room_id).process_join(data)
        for room_id, data in self._wanted(rooms.get("invite")):
            self.resolve(room_id).process_invite(data)
        for room_id, data in self._wanted(rooms.get("leave")):
            self.resolve(room_id).process_leave(data)

    def _wanted(self, category: Optional[Mapping[str, Any]]) -> Iterator:
        if not isinstance(category, Mapping):
            return
        for room_id, data in category.items():
            if self.room_ids is not None and room_id not in self.room_ids:
                continue
            if not is_room_id(room_id):
                logger.warning(f"Skipping sync data for invalid room ID {room_id!r}")
                continue
            if not isinstance(data, Mapping):
                logger.warning(f"Skipping malformed sync data for {room_id}")
                continue
            yield room_id, data

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def __iter__(self) -> Iterator[Room]:
        return iter(list(self._rooms.values()))

    def __len__(self) -> int:
        return len(self._rooms)
