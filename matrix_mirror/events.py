"""Tracking of events that have already been folded into local state."""

from collections import OrderedDict
from typing import Any, Mapping, Optional

from .errors import InvalidEventError

EventLike = Any


def event_id_of(event: EventLike) -> str:
    """Extract the event ID from an ID string or an event mapping.

    Raises InvalidEventError when ``event`` is neither a string nor a
    mapping carrying an ``event_id``.
    """
    if isinstance(event, str):
        return event
    if isinstance(event, Mapping) and isinstance(event.get("event_id"), str):
        return event["event_id"]
    raise InvalidEventError(f"Invalid event object: {event!r}")


class EventDeduplicator:
    """Remembers which events have been processed.

    With ``max_size`` left as None every ID is kept for the lifetime of the
    object. When set, the least recently marked IDs are forgotten once the
    limit is reached.
    """

    def __init__(self, max_size: Optional[int] = None) -> None:
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be a positive integer")
        self.max_size = max_size
        self._processed: "OrderedDict[str, None]" = OrderedDict()

    def mark(self, event: EventLike) -> None:
        """Record an event as processed"""
        event_id = event_id_of(event)
        self._processed[event_id] = None
        self._processed.move_to_end(event_id)
        if self.max_size is not None:
            while len(self._processed) > self.max_size:
                self._processed.popitem(last=False)

    def is_processed(self, event: EventLike) -> bool:
        """Check whether an event has been processed"""
        return event_id_of(event) in self._processed

    def __contains__(self, event: EventLike) -> bool:
        return self.is_processed(event)

    def __len__(self) -> int:
        return len(self._processed)
