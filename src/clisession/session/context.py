"""Execution context for a single command line."""

from __future__ import annotations

import logging
import shlex
from typing import TYPE_CHECKING, Any

from clisession.domain.models import Continue, InternalError, Message, Terminate, as_outcome

if TYPE_CHECKING:
    from clisession.commands.base import CommandResolver
    from clisession.session.session import Session
    from clisession.terminal.base import Terminal

logger = logging.getLogger(__name__)


class CommandContext:
    """Binds one raw input line to the terminal and session it came from.

    A fresh context is built for every non-blank line and becomes the
    session's current context until the next line replaces it.
    """

    def __init__(
        self,
        line: str,
        terminal: Terminal,
        session: Session,
        resolver: CommandResolver,
    ) -> None:
        self._line = line
        self._terminal = terminal
        self._session = session
        self._resolver = resolver
        self._command, self._arguments = _split(line)

    @property
    def line(self) -> str:
        return self._line

    @property
    def command(self) -> str:
        return self._command

    @property
    def arguments(self) -> list[str]:
        return list(self._arguments)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def terminal(self) -> Terminal:
        return self._terminal

    @property
    def disconnected(self) -> bool:
        """True once the terminal is closed or detached from the session."""
        return self._terminal.closed or self._session.terminal is not self._terminal

    def println(self, text: str = "") -> None:
        self._terminal.println(text)

    def attribute(self, key: str, default: Any = None) -> Any:
        return self._session.attribute(key, default)

    async def handle(self) -> Continue | Terminate | Message | InternalError:
        """Resolve and run the command, returning its outcome."""
        handler = self._resolver.resolve(self._command)
        if handler is None:
            logger.debug("Unknown command %r in session %s", self._command, self._session.id)
            return Message(text=f"Command not recognized: {self._command}")
        self._session.handler(handler)
        logger.debug("Session %s running %s", self._session.id, handler)
        return as_outcome(await handler.execute(self))


def _split(line: str) -> tuple[str, list[str]]:
    try:
        words = shlex.split(line)
    except ValueError:
        # Unbalanced quotes
        words = line.split()
    if not words:
        return "", []
    return words[0], words[1:]
