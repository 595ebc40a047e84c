"""Abstract interfaces for command handlers and their resolution.

The session never knows which commands exist. It hands each line to a
:class:`CommandResolver`, which maps the command name to a
:class:`CommandHandler`; the handler runs against a command context and
returns its outcome.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clisession.session.context import CommandContext


class CommandHandler(ABC):
    """A command that can be run from a session.

    ``execute`` may return ``None`` (continue), a bool (exit request), a
    string (message to print) or one of the outcome models in
    :mod:`clisession.domain.models`.

    ``str(handler)`` is the handler's display identity; the session uses it
    to decide whether two consecutive lines ran the same command.
    """

    name: str = ""
    help: str = ""

    @abstractmethod
    async def execute(self, context: CommandContext) -> object:
        ...

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class CommandResolver(ABC):
    """Maps a command name to its handler."""

    @abstractmethod
    def resolve(self, name: str) -> CommandHandler | None:
        """Return the handler for ``name``, or None if unknown."""
        ...

    @abstractmethod
    def names(self) -> list[str]:
        """All resolvable command names, for completion and help."""
        ...
