"""Resumable command output.

A cursor holds the rest of a result that did not fit on one screen. The
session keeps at most one; the ``it`` command prints its next page.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from clisession.session.context import CommandContext

CONTINUE_HINT = "-- type 'it' for more --"


class Cursor(ABC):
    """Paused, resumable command result."""

    @abstractmethod
    def has_next(self) -> bool:
        ...

    @abstractmethod
    async def output(self, context: CommandContext) -> None:
        """Write the next chunk of the result to the context's terminal."""
        ...


class PagedCursor(Cursor):
    """Pages through a fixed sequence of lines."""

    def __init__(self, lines: Sequence[str], page_size: int = 20) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._lines = list(lines)
        self._page_size = page_size
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    def has_next(self) -> bool:
        return self._position < len(self._lines)

    async def output(self, context: CommandContext) -> None:
        page = self._lines[self._position:self._position + self._page_size]
        self._position += len(page)
        for line in page:
            context.println(line)
        if self.has_next():
            context.println(CONTINUE_HINT)
