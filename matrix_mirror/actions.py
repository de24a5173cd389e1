"""Outbound room actions, each a single request through nio."""

import html
import re
from typing import Any, Dict, Optional, Union

from nio import AsyncClient, ErrorResponse

from .errors import error_for_errcode
from .logger import get_logger
from .message import HTML_FORMAT
from .room import Room
from .user import User

logger = get_logger(__name__)

_TAG = re.compile(r"</?[^>]*>")

RoomRef = Union[Room, str]
UserRef = Union[User, str]


def _id(entity: Union[Room, User, str]) -> str:
    return entity if isinstance(entity, str) else entity.id


def strip_html(markup: str) -> str:
    """Plain-text rendering of an HTML message body"""
    return html.unescape(_TAG.sub("", markup))


def _check(response: Any) -> Any:
    if isinstance(response, ErrorResponse):
        raise error_for_errcode(
            response.status_code, response.message, retry_after_ms=response.retry_after_ms
        )
    return response


class RoomActions:
    """Formats and fires requests that act on rooms.

    Results show up in the mirror through sync like any other change; these
    helpers never touch local state.
    """

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def _send(self, room: RoomRef, content: Dict[str, Any]) -> str:
        room_id = _id(room)
        response = _check(await self.client.room_send(room_id, "m.room.message", content))
        logger.debug(f"Sent {content['msgtype']} to {room_id}: {response.event_id}")
        return response.event_id

    async def send_message(self, room: RoomRef, body: str, msgtype: str = "m.text") -> str:
        """Send a plain message and return its event ID"""
        return await self._send(room, {"msgtype": msgtype, "body": body})

    async def send_notice(self, room: RoomRef, body: str) -> str:
        return await self.send_message(room, body, "m.notice")

    async def send_emote(self, room: RoomRef, body: str) -> str:
        return await self.send_message(room, body, "m.emote")

    async def send_html(self, room: RoomRef, markup: str, clean: Optional[str] = None) -> str:
        """Send an HTML message; ``clean`` defaults to the markup with tags stripped"""
        return await self._send(
            room,
            {
                "msgtype": "m.text",
                "body": clean if clean is not None else strip_html(markup),
                "format": HTML_FORMAT,
                "formatted_body": markup,
            },
        )

    async def join(self, room: RoomRef) -> str:
        """Join a room by ID or alias and return the joined room's ID"""
        response = _check(await self.client.join(_id(room)))
        return response.room_id

    async def leave(self, room: RoomRef) -> None:
        _check(await self.client.room_leave(_id(room)))

    async def invite(self, room: RoomRef, user: UserRef) -> None:
        _check(await self.client.room_invite(_id(room), _id(user)))

    async def kick(self, room: RoomRef, user: UserRef, reason: Optional[str] = None) -> None:
        _check(await self.client.room_kick(_id(room), _id(user), reason))

    async def ban(self, room: RoomRef, user: UserRef, reason: Optional[str] = None) -> None:
        _check(await self.client.room_ban(_id(room), _id(user), reason))

    async def unban(self, room: RoomRef, user: UserRef) -> None:
        _check(await self.client.room_unban(_id(room), _id(user)))
