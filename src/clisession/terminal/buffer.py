"""In-memory terminal.

Input lines are fed programmatically and output lines are captured in a
list. Backs the HTTP bridge, where each request carries one line and the
response returns the collected output.
"""

from __future__ import annotations

import asyncio
import logging

from clisession.errors import TerminalClosedError
from clisession.terminal.base import Terminal
from clisession.terminal.cancel import CancelToken

logger = logging.getLogger(__name__)

_EOF = None


class BufferTerminal(Terminal):
    """Terminal with a queue of pending input lines and captured output."""

    def __init__(self) -> None:
        super().__init__()
        self._input: asyncio.Queue[str | None] = asyncio.Queue()
        self._output: list[str] = []
        self._closed = False
        self.flush_count = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def output(self) -> list[str]:
        return list(self._output)

    def feed(self, *lines: str) -> None:
        """Queue input lines for subsequent reads."""
        for line in lines:
            self._input.put_nowait(line)

    def feed_eof(self) -> None:
        """Mark the end of input; the next read past queued lines fails."""
        self._input.put_nowait(_EOF)

    def take_output(self) -> list[str]:
        """Return and clear the captured output."""
        lines, self._output = self._output, []
        return lines

    async def read_line(self, cancel: CancelToken) -> str | None:
        if self._closed:
            raise TerminalClosedError("Terminal is closed")
        cancelled, line = await cancel.race(self._input.get())
        if cancelled:
            return None
        if line is _EOF:
            raise TerminalClosedError("End of input")
        if self.echo_enabled:
            self.println(line)
        return line

    def println(self, text: str = "") -> None:
        if self._closed:
            logger.debug("Dropping output on closed terminal: %s", text[:50])
            return
        self._output.append(text)

    async def flush(self) -> None:
        self.flush_count += 1

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._input.put_nowait(_EOF)
