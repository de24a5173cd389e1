"""Messages decoded from room timelines."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from .errors import MalformedEventError

if TYPE_CHECKING:
    from .user import User

HTML_FORMAT = "org.matrix.custom.html"


class MessageType(str, Enum):
    TEXT = "text"
    EMOTE = "emote"
    NOTICE = "notice"
    HTML = "html"


MSGTYPES = {
    "m.text": MessageType.TEXT,
    "m.emote": MessageType.EMOTE,
    "m.notice": MessageType.NOTICE,
}


@dataclass(frozen=True)
class Message:
    """A message sent in a room.

    ``type`` is None when the msgtype is not one we understand. For HTML
    messages ``body`` is the plain-text fallback sent alongside the markup,
    which is available as ``formatted_body``.
    """

    sender: "User"
    timestamp: int
    type: Optional[MessageType]
    body: Optional[str]
    formatted_body: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_content(
        cls, sender: "User", content: Mapping[str, Any], timestamp: Optional[int] = None
    ) -> "Message":
        """Build a message from an ``m.room.message`` content mapping.

        Raises MalformedEventError when a known field has the wrong type.
        """
        if timestamp is None:
            timestamp = int(time.time() * 1000)
        elif not isinstance(timestamp, int):
            raise MalformedEventError(f"Invalid message timestamp {timestamp!r}")
        for key in ("msgtype", "body", "format", "formatted_body"):
            if content.get(key) is not None and not isinstance(content[key], str):
                raise MalformedEventError(f"Message {key} must be a string, got {content[key]!r}")

        msg_type = MSGTYPES.get(content.get("msgtype"))
        formatted_body = None
        if content.get("format") == HTML_FORMAT:
            msg_type = MessageType.HTML
            formatted_body = content.get("formatted_body")
        return cls(
            sender=sender,
            timestamp=timestamp,
            type=msg_type,
            body=content.get("body"),
            formatted_body=formatted_body,
            raw=dict(content),
        )
