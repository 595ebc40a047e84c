"""Tests for the asyncio stream terminal."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from clisession.errors import TerminalClosedError, TransportError
from clisession.terminal.cancel import CancelToken
from clisession.terminal.stream import StreamTerminal


def make_writer() -> MagicMock:
    writer = MagicMock()
    writer.drain = AsyncMock()
    writer.is_closing.return_value = False
    writer.get_extra_info.return_value = ("127.0.0.1", 40000)
    return writer


def written(writer: MagicMock) -> str:
    return b"".join(call.args[0] for call in writer.write.call_args_list).decode()


@pytest.fixture
def token() -> CancelToken:
    return CancelToken()


class TestStreamTerminal:
    @pytest.mark.asyncio
    async def test_prompt_written_before_read(self, token: CancelToken) -> None:
        token.bind()
        reader = asyncio.StreamReader()
        reader.feed_data(b"help\r\n")
        writer = make_writer()
        terminal = StreamTerminal(reader, writer)
        terminal.prompt = "app[1]>"
        terminal.echo_enabled = False

        assert await terminal.read_line(token) == "help"
        assert written(writer) == "app[1]>"
        writer.drain.assert_awaited()

    @pytest.mark.asyncio
    async def test_println_uses_crlf(self) -> None:
        writer = make_writer()
        terminal = StreamTerminal(asyncio.StreamReader(), writer)
        terminal.println("hi")
        await terminal.flush()
        assert written(writer) == "hi\r\n"

    @pytest.mark.asyncio
    async def test_echo_when_enabled(self, token: CancelToken) -> None:
        token.bind()
        reader = asyncio.StreamReader()
        reader.feed_data(b"ls\n")
        writer = make_writer()
        terminal = StreamTerminal(reader, writer)

        await terminal.read_line(token)
        assert written(writer) == "ls\r\n"

    @pytest.mark.asyncio
    async def test_eof_raises_closed(self, token: CancelToken) -> None:
        token.bind()
        reader = asyncio.StreamReader()
        reader.feed_eof()
        terminal = StreamTerminal(reader, make_writer())
        with pytest.raises(TerminalClosedError):
            await terminal.read_line(token)

    @pytest.mark.asyncio
    async def test_connection_error_is_transport_error(self, token: CancelToken) -> None:
        token.bind()
        reader = MagicMock()
        reader.readline = AsyncMock(side_effect=ConnectionResetError("reset"))
        terminal = StreamTerminal(reader, make_writer())
        with pytest.raises(TransportError):
            await terminal.read_line(token)

    @pytest.mark.asyncio
    async def test_oversized_line_is_transport_error(self, token: CancelToken) -> None:
        token.bind()
        reader = asyncio.StreamReader(limit=1024)
        reader.feed_data(b"x" * 5000 + b"\n")
        terminal = StreamTerminal(reader, make_writer())
        with pytest.raises(TransportError, match="Oversized line"):
            await terminal.read_line(token)

    @pytest.mark.asyncio
    async def test_tab_shows_completions_and_reprompts(self, token: CancelToken) -> None:
        token.bind()
        reader = asyncio.StreamReader()
        reader.feed_data(b"he\t\nhelp\n")
        writer = make_writer()
        terminal = StreamTerminal(reader, writer)
        terminal.prompt = ">"
        terminal.echo_enabled = False
        completer = MagicMock()
        completer.complete.return_value = ["help", "hello"]
        terminal.add_completer(completer)

        assert await terminal.read_line(token) == "help"
        completer.complete.assert_called_once_with("he")
        assert written(writer) == ">hello  help\r\n>"

    @pytest.mark.asyncio
    async def test_cancel_returns_none(self, token: CancelToken) -> None:
        token.bind()
        terminal = StreamTerminal(asyncio.StreamReader(), make_writer())

        async def cancel_soon() -> None:
            await asyncio.sleep(0.01)
            token.cancel()

        canceller = asyncio.create_task(cancel_soon())
        assert await terminal.read_line(token) is None
        await canceller

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        writer = make_writer()
        terminal = StreamTerminal(asyncio.StreamReader(), writer)
        terminal.close()
        terminal.close()
        writer.close.assert_called_once_with()
        assert terminal.closed

    @pytest.mark.asyncio
    async def test_output_after_close_is_dropped(self) -> None:
        writer = make_writer()
        terminal = StreamTerminal(asyncio.StreamReader(), writer)
        terminal.close()
        terminal.println("late")
        writer.write.assert_not_called()

    @pytest.mark.asyncio
    async def test_peer(self) -> None:
        terminal = StreamTerminal(asyncio.StreamReader(), make_writer())
        assert terminal.peer == "('127.0.0.1', 40000)"
