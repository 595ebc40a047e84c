"""Tracks which command handler ran last in a session.

A cursor belongs to the command that produced it. Running the same
command again (or continuing the cursor) keeps it; running a different
command discards it so it cannot be resumed against the wrong result.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clisession.commands.base import CommandHandler

logger = logging.getLogger(__name__)


class HandlerTracker:
    """Remembers the last executed handler by its display identity."""

    def __init__(self) -> None:
        self._current: CommandHandler | None = None

    @property
    def current(self) -> CommandHandler | None:
        return self._current

    def record(self, handler: CommandHandler) -> bool:
        """Record ``handler`` as executed.

        Handlers are compared by ``str()``, so two handler objects with the
        same display identity count as the same command.

        Returns:
            True if a different command ran and the session's cursor must
            be discarded.
        """
        from clisession.commands.builtin import ITERATE_CURSOR

        if handler is ITERATE_CURSOR:
            return False
        if self._current is None or str(self._current) == str(handler):
            self._current = handler
            return False
        logger.debug("Handler changed from %s to %s", self._current, handler)
        self._current = handler
        return True

    def clear(self) -> None:
        self._current = None
