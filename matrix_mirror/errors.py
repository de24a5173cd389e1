"""Error types raised by the mirror and its transport."""

from typing import Any, Dict, Optional


class MirrorError(Exception):
    """Base class for all errors raised by matrix_mirror."""


class InvalidEventError(MirrorError):
    """An event object has no usable event ID."""


class InvalidIdentifierError(MirrorError, ValueError):
    """A room or user ID passed to a directory is not valid."""


class MalformedEventError(MirrorError):
    """An event is missing data required to apply it."""


class ApiError(MirrorError):
    """A request to the homeserver failed."""

    default_message = "An unknown API error occurred"

    def __init__(self, error: Optional[Dict[str, Any]] = None, status: Optional[int] = None) -> None:
        self.error: Dict[str, Any] = dict(error or {})
        self.status = status
        self.code: str = self.error.get("errcode", "E_UNKNOWN")
        self.api_message: str = self.error.get("error", self.default_message)
        super().__init__(f"{self.code}: {self.api_message}")


class RequestError(ApiError):
    default_message = "Request failed"


class AuthenticationError(ApiError):
    """Authentication failed or the server asks for more authentication data."""

    default_message = "Server requests additional authentication"

    def __init__(self, error: Optional[Dict[str, Any]] = None, status: Optional[int] = None) -> None:
        super().__init__(error, status)
        # Whatever is left after errcode/error describes the next auth stage
        self.data = {k: v for k, v in self.error.items() if k not in ("errcode", "error")}


class ForbiddenError(ApiError):
    default_message = "You do not have access to that resource"


class NotFoundError(ApiError):
    default_message = "The resource was not found"


class RateLimitError(ApiError):
    default_message = "The request was rate limited"

    def __init__(self, error: Optional[Dict[str, Any]] = None, status: Optional[int] = None) -> None:
        super().__init__(error, status)
        self.retry_after_ms: Optional[int] = self.error.get("retry_after_ms")


class TransportError(ApiError):
    """The request never produced an HTTP response (connection or timeout)."""

    default_message = "Could not reach the homeserver"


STATUS_ERRORS = {
    400: RequestError,
    401: AuthenticationError,
    403: ForbiddenError,
    404: NotFoundError,
    429: RateLimitError,
}

ERRCODE_ERRORS = {
    "M_BAD_JSON": RequestError,
    "M_NOT_JSON": RequestError,
    "M_UNKNOWN_TOKEN": AuthenticationError,
    "M_MISSING_TOKEN": AuthenticationError,
    "M_FORBIDDEN": ForbiddenError,
    "M_NOT_FOUND": NotFoundError,
    "M_LIMIT_EXCEEDED": RateLimitError,
}


def error_for_status(status: int, error: Optional[Dict[str, Any]] = None) -> ApiError:
    """Build the error matching an HTTP status code"""
    cls = STATUS_ERRORS.get(status, ApiError)
    return cls(error, status)


def error_for_errcode(errcode: Optional[str], message: Optional[str] = None, **extra: Any) -> ApiError:
    """Build the error matching a Matrix errcode"""
    cls = ERRCODE_ERRORS.get(errcode or "", ApiError)
    error: Dict[str, Any] = {k: v for k, v in extra.items() if v is not None}
    if errcode:
        error["errcode"] = errcode
    if message:
        error["error"] = message
    return cls(error)
