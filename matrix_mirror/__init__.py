"""Matrix mirror - keeps a local, observable copy of Matrix room state in sync with a homeserver."""

from importlib import metadata

__version__ = "0.1.0"
__license__ = "MIT"

try:
    __version__ = metadata.version("matrix-mirror")
except metadata.PackageNotFoundError:
    # Package is not installed
    pass

from .config import Settings, MatrixConfig, SyncConfig, DatabaseConfig, LogConfig
from .logger import setup_logging, get_logger
from .errors import (
    MirrorError,
    InvalidEventError,
    InvalidIdentifierError,
    ApiError,
    RequestError,
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    TransportError,
)
from .events import EventDeduplicator
from .message import Message, MessageType
from .permissions import Permissions
from .user import User, Membership
from .users import Users
from .room import Room
from .rooms import Rooms
from .sync import SyncDriver
from .transport import MatrixTransport
from .actions import RoomActions
from .archive import MessageArchive
from .client import MatrixMirror

__all__ = [
    "Settings",
    "MatrixConfig",
    "SyncConfig",
    "DatabaseConfig",
    "LogConfig",
    "setup_logging",
    "get_logger",
    "MirrorError",
    "InvalidEventError",
    "InvalidIdentifierError",
    "ApiError",
    "RequestError",
    "AuthenticationError",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitError",
    "TransportError",
    "EventDeduplicator",
    "Message",
    "MessageType",
    "Permissions",
    "User",
    "Membership",
    "Users",
    "Room",
    "Rooms",
    "SyncDriver",
    "MatrixTransport",
    "RoomActions",
    "MessageArchive",
    "MatrixMirror",
]
