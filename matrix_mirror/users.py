"""Directory of the users known to the client."""

from typing import Dict, Iterator, Optional

from .emitter import Emitter
from .errors import InvalidIdentifierError
from .logger import get_logger
from .user import User

logger = get_logger(__name__)


def is_user_id(value: object) -> bool:
    return isinstance(value, str) and value.startswith("@") and len(value) > 1


class Users(Emitter):
    """Maps user IDs to exactly one User instance each.

    Emits ``discovered(user)`` whenever a new user is created.
    """

    def __init__(self) -> None:
        # user_id => user
        self._users: Dict[str, User] = {}

    def resolve(self, user_id: str) -> User:
        """Get the User for ``user_id``, creating it on first reference"""
        if not is_user_id(user_id):
            raise InvalidIdentifierError(f"Invalid user ID: {user_id!r}")
        user = self._users.get(user_id)
        if user is not None:
            return user
        user = User(user_id)
        self._users[user_id] = user
        logger.debug(f"Discovered user {user_id}")
        self.emit("discovered", user)
        return user

    def lookup(self, key: str) -> Optional[User]:
        """Find a user by ID or display name without creating one.

        When several users share a display name the first one seen wins.
        """
        if key.startswith("@"):
            return self._users.get(key)
        return next((u for u in self._users.values() if u.display_name == key), None)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._users

    def __iter__(self) -> Iterator[User]:
        return iter(list(self._users.values()))

    def __len__(self) -> int:
        return len(self._users)
