"""A Matrix user as seen by the mirror."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Union

from .emitter import Emitter

if TYPE_CHECKING:
    from .room import Room

JOIN = "join"
INVITE = "invite"
LEAVE = "leave"
BAN = "ban"

RoomRef = Union["Room", str]


def _room_id(room: RoomRef) -> str:
    return room if isinstance(room, str) else room.id


@dataclass
class Membership:
    """A user's relationship to one room."""

    type: Optional[str] = None
    power: int = 0


class User(Emitter):
    """A user known to the client.

    Notifications: ``membership(user, room, membership)``,
    ``power_level(user, room, level)``, ``invited(user, room, sender)``,
    ``displayname(user, name)`` and ``avatar(user, url)``.
    """

    def __init__(self, user_id: str) -> None:
        self.id = user_id
        self.display_name: Optional[str] = None
        self.avatar_url: Optional[str] = None
        # room_id => membership
        self.memberships: Dict[str, Membership] = {}

    def membership_in(self, room: RoomRef) -> Optional[Membership]:
        return self.memberships.get(_room_id(room))

    def membership_type(self, room: RoomRef) -> Optional[str]:
        membership = self.membership_in(room)
        return membership.type if membership else None

    def power_in(self, room: RoomRef) -> int:
        """Get this user's power level in a room, 0 if none is recorded"""
        membership = self.membership_in(room)
        return membership.power if membership else 0

    def set_membership(self, room: "Room", membership_type: str) -> Membership:
        membership = self.memberships.setdefault(room.id, Membership())
        membership.type = membership_type
        self.emit("membership", self, room, membership)
        return membership

    def set_power_level(self, room: "Room", level: int) -> None:
        membership = self.memberships.setdefault(room.id, Membership())
        membership.power = level
        self.emit("power_level", self, room, level)

    def process_invite(self, room: "Room", sender: "User") -> bool:
        """Record an invite to ``room``; returns False if already joined there"""
        if self.membership_type(room) == JOIN:
            return False
        self.set_membership(room, INVITE)
        self.emit("invited", self, room, sender)
        return True

    def update_profile(self, content: Mapping[str, Any]) -> None:
        """Apply ``displayname``/``avatar_url`` from member event content"""
        if "avatar_url" in content:
            self.avatar_url = content["avatar_url"]
            self.emit("avatar", self, self.avatar_url)
        if "displayname" in content:
            self.display_name = content["displayname"]
            self.emit("displayname", self, self.display_name)

    def __str__(self) -> str:
        return self.id

    def __repr__(self) -> str:
        return f"<User {self.id}>"
