"""Minimal publish/subscribe support for mirror entities."""

from collections import defaultdict
from typing import Any, Callable, DefaultDict, List

Handler = Callable[..., Any]


class Emitter:
    """Mixin giving an object its own set of named notifications.

    Handlers run synchronously, in subscription order, inside the call that
    produced the notification. Exceptions raised by a handler propagate to
    the emitter.
    """

    def _handlers(self) -> DefaultDict[str, List[Handler]]:
        # Created lazily so subclasses don't need to call an initializer
        try:
            return self.__handlers
        except AttributeError:
            self.__handlers: DefaultDict[str, List[Handler]] = defaultdict(list)
            return self.__handlers

    def on(self, name: str, handler: Handler) -> Handler:
        """Subscribe ``handler`` to the ``name`` notification"""
        self._handlers()[name].append(handler)
        return handler

    def off(self, name: str, handler: Handler) -> None:
        """Remove a previously subscribed handler, if present"""
        handlers = self._handlers().get(name)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def emit(self, name: str, *args: Any) -> None:
        # Copy so handlers may unsubscribe themselves while running
        for handler in list(self._handlers().get(name, ())):
            handler(*args)
