"""Power level thresholds for a room."""

import re
from typing import TYPE_CHECKING, Any, Dict, Mapping

from .errors import MalformedEventError

if TYPE_CHECKING:
    from .room import Room
    from .user import User

ACTIONS = ("ban", "kick", "invite", "redact")

_KIND = re.compile(r"\w+$")


def event_kind(event_type: str) -> str:
    """Short kind of an event type, e.g. ``m.room.name`` -> ``name``"""
    match = _KIND.search(event_type)
    return match.group(0) if match else event_type


class Permissions:
    """Answers whether users may perform actions or set state in a room.

    Actions and event kinds without a configured threshold are denied to
    everyone.
    """

    def __init__(self, room: "Room") -> None:
        self.room = room
        self.actions: Dict[str, int] = {}
        self.events: Dict[str, int] = {}

    def update(self, content: Mapping[str, Any]) -> None:
        """Replace the thresholds with those from ``m.room.power_levels`` content.

        Raises MalformedEventError, leaving the thresholds untouched, when
        ``events`` is not a mapping.
        """
        events = content.get("events") or {}
        if not isinstance(events, Mapping):
            raise MalformedEventError(f"Power level events must be a mapping, got {events!r}")
        self.actions = {
            action: content[action]
            for action in ACTIONS
            if isinstance(content.get(action), int)
        }
        self.events = {
            event_kind(event_type): level
            for event_type, level in events.items()
            if isinstance(event_type, str) and isinstance(level, int)
        }

    def can(self, user: "User", action: str) -> bool:
        """Check if ``user`` may perform ``action`` (ban, kick, invite, redact)"""
        if action not in self.actions:
            return False
        return user.power_in(self.room) >= self.actions[action]

    def can_set(self, user: "User", event: str) -> bool:
        """Check if ``user`` may send the state event ``event``"""
        kind = event_kind(event)
        if kind not in self.events:
            return False
        return user.power_in(self.room) >= self.events[kind]
