"""Abstract base class for the terminal a session talks to.

The session treats its terminal as an opaque line source: it reads whole
lines, sets the prompt, registers completion providers, controls local
echo, and writes lines back. Implementations adapt that to a concrete
transport (asyncio streams of a TCP connection, an in-memory buffer for
the HTTP bridge, etc.).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

from clisession.terminal.cancel import CancelToken

logger = logging.getLogger(__name__)


@runtime_checkable
class Completer(Protocol):
    """Supplies completion candidates for a partially typed line."""

    def complete(self, buffer: str) -> list[str]:
        ...


class Terminal(ABC):
    """Abstract line-oriented terminal.

    Example usage::

        terminal.prompt = "app[42]>"
        terminal.echo_enabled = False
        line = await terminal.read_line(token)
        if line is None:
            ...  # read was cancelled
        terminal.println("ok")
        await terminal.flush()
    """

    def __init__(self) -> None:
        self._prompt = ""
        self._echo_enabled = True
        self._completers: list[Completer] = []

    @property
    def prompt(self) -> str:
        return self._prompt

    @prompt.setter
    def prompt(self, value: str) -> None:
        self._prompt = value

    @property
    def echo_enabled(self) -> bool:
        """Whether typed input is echoed back by this side.

        Sessions turn this off because the remote terminal echoes
        locally.
        """
        return self._echo_enabled

    @echo_enabled.setter
    def echo_enabled(self, value: bool) -> None:
        self._echo_enabled = value

    def add_completer(self, completer: Completer) -> None:
        self._completers.append(completer)

    def complete(self, buffer: str) -> list[str]:
        """Collect candidates from all registered completers."""
        candidates: set[str] = set()
        for completer in self._completers:
            candidates.update(completer.complete(buffer))
        return sorted(candidates)

    @abstractmethod
    async def read_line(self, cancel: CancelToken) -> str | None:
        """Block until a full line is available.

        Args:
            cancel: Token that aborts the read when cancelled.

        Returns:
            The line without its line terminator, or None if the read
            was cancelled.

        Raises:
            TerminalClosedError: If the input stream has ended.
            TransportError: If the underlying connection failed.
        """
        ...

    @abstractmethod
    def println(self, text: str = "") -> None:
        """Queue a line of output. Output after close is discarded."""
        ...

    @abstractmethod
    async def flush(self) -> None:
        """Push queued output to the remote end."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the terminal and its transport. Safe to call repeatedly."""
        ...

    @property
    @abstractmethod
    def closed(self) -> bool:
        ...

    def _show_completions(self, buffer: str) -> None:
        candidates = self.complete(buffer)
        if candidates:
            self.println("  ".join(candidates))
        else:
            logger.debug("No completion for %r", buffer)
