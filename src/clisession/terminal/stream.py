"""Terminal over the asyncio streams of a network connection.

Speaks plain newline-delimited text: the prompt is written before each
read, lines are decoded with the configured encoding, and output lines
are terminated with CRLF so raw telnet/netcat clients render them.
"""

from __future__ import annotations

import asyncio
import logging

from clisession.errors import TerminalClosedError, TransportError
from clisession.terminal.base import Terminal
from clisession.terminal.cancel import CancelToken

logger = logging.getLogger(__name__)


class StreamTerminal(Terminal):
    """Line terminal backed by an ``asyncio`` reader/writer pair."""

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        encoding: str = "utf-8",
        newline: str = "\r\n",
    ) -> None:
        super().__init__()
        self._reader = reader
        self._writer = writer
        self._encoding = encoding
        self._newline = newline
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed or self._writer.is_closing()

    @property
    def peer(self) -> str:
        peer = self._writer.get_extra_info("peername")
        return str(peer) if peer else "unknown"

    async def read_line(self, cancel: CancelToken) -> str | None:
        """Read one line, re-prompting after a completion request.

        A line ending with TAB is a completion request: the candidates
        are printed and the user is prompted again.
        """
        while True:
            self._write(self.prompt)
            await self.flush()
            try:
                cancelled, data = await cancel.race(self._reader.readline())
            except (ConnectionError, OSError) as e:
                raise TransportError(f"Read from {self.peer} failed: {e}") from e
            except ValueError as e:
                # Line longer than the reader limit
                raise TransportError(f"Oversized line from {self.peer}: {e}") from e
            if cancelled:
                return None
            if not data:
                raise TerminalClosedError(f"Connection closed by {self.peer}")

            text = data.decode(self._encoding, errors="replace").rstrip("\r\n")
            if self.echo_enabled:
                self.println(text)
            if text.endswith("\t"):
                self._show_completions(text.rstrip("\t"))
                continue
            return text

    def println(self, text: str = "") -> None:
        self._write(text + self._newline)

    async def flush(self) -> None:
        if self.closed:
            return
        try:
            await self._writer.drain()
        except (ConnectionError, OSError) as e:
            raise TransportError(f"Write to {self.peer} failed: {e}") from e

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        logger.debug("Closed terminal for %s", self.peer)

    def _write(self, text: str) -> None:
        if self.closed:
            logger.debug("Dropping output on closed terminal: %s", text[:50])
            return
        self._writer.write(text.encode(self._encoding, errors="replace"))
