"""Synchronous application events for session lifecycle notifications."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class SessionEvent(BaseModel):
    """Base class for events whose payload is a session."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    session: Any

    @property
    def session_id(self) -> str:
        return self.session.id


class SessionStarted(SessionEvent):
    """Emitted when a session enters its command loop."""


class SessionTerminated(SessionEvent):
    """Emitted once a session's command loop has exited and cleaned up."""


Listener = Callable[[SessionEvent], None]


class EventBus:
    """Dispatches events to listeners subscribed by event type.

    Listeners subscribed to a base class also receive its subclasses.
    """

    def __init__(self) -> None:
        self._listeners: dict[type[SessionEvent], list[Listener]] = defaultdict(list)

    def subscribe(self, event_type: type[SessionEvent], listener: Listener) -> None:
        self._listeners[event_type].append(listener)

    def unsubscribe(self, event_type: type[SessionEvent], listener: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def emit_sync(self, event: SessionEvent) -> int:
        """Call every matching listener in subscription order.

        A failing listener is logged and does not prevent the remaining
        listeners from running.

        Returns:
            Number of listeners called.
        """
        called = 0
        for event_type in type(event).__mro__:
            for listener in list(self._listeners.get(event_type, ())):
                called += 1
                try:
                    listener(event)
                except Exception:
                    logger.exception(
                        "Listener %r failed on %s", listener, type(event).__name__
                    )
        logger.debug("Emitted %s to %d listener(s)", type(event).__name__, called)
        return called

