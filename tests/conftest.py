"""Shared test fixtures for the clisession test suite.

Provides a fake clock, an in-memory terminal, a command registry with a
few recording handlers, and a session wired to all of them.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from clisession.commands.base import CommandHandler
from clisession.commands.registry import HandlerRegistry
from clisession.events import EventBus, SessionEvent
from clisession.session.context import CommandContext
from clisession.session.cursor import PagedCursor
from clisession.session.session import Session
from clisession.terminal.buffer import BufferTerminal


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = 1_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class RecordingHandler(CommandHandler):
    """Records the lines it ran and returns a fixed result."""

    def __init__(self, name: str, result: object = None, pages: list[str] | None = None) -> None:
        self.name = name
        self.help = f"{name} command"
        self.result = result
        self.pages = pages
        self.lines: list[str] = []

    async def execute(self, context: CommandContext) -> object:
        self.lines.append(context.line)
        if self.pages is not None and context.session.cursor is None:
            cursor = PagedCursor(self.pages, page_size=1)
            await cursor.output(context)
            context.session.set_cursor(cursor)
        return self.result


class FailingHandler(CommandHandler):
    name = "boom"

    async def execute(self, context: CommandContext) -> object:
        raise RuntimeError("handler exploded")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def terminal() -> BufferTerminal:
    return BufferTerminal()


@pytest.fixture
def list_handler() -> RecordingHandler:
    """A command that opens a cursor over three lines."""
    return RecordingHandler("list", pages=["one", "two", "three"])


@pytest.fixture
def other_handler() -> RecordingHandler:
    return RecordingHandler("other")


@pytest.fixture
def resolver(list_handler: RecordingHandler, other_handler: RecordingHandler) -> HandlerRegistry:
    """Built-in commands plus ``list``, ``other``, ``say``, ``odd``, ``stay`` and ``boom``."""
    registry = HandlerRegistry.with_builtins(page_size=2)
    registry.register(list_handler)
    registry.register(other_handler)
    registry.register(RecordingHandler("say", result="said"))
    registry.register(RecordingHandler("odd", result=42))
    registry.register(RecordingHandler("stay", result=False))
    registry.register(FailingHandler())
    return registry


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def recorded_events(events: EventBus) -> list[SessionEvent]:
    """Every event emitted on the ``events`` bus, in order."""
    received: list[SessionEvent] = []
    events.subscribe(SessionEvent, received.append)
    return received


@pytest.fixture
def owner() -> MagicMock:
    """A mock session owner (registry)."""
    return MagicMock()


@pytest.fixture
def update_checker() -> MagicMock:
    return MagicMock()


@pytest.fixture
def session(
    terminal: BufferTerminal,
    resolver: HandlerRegistry,
    events: EventBus,
    owner: MagicMock,
    update_checker: MagicMock,
    clock: FakeClock,
) -> Session:
    """A session over a BufferTerminal with all collaborators injected."""
    return Session(
        "s1",
        terminal,
        resolver,
        app_name="test",
        events=events,
        owner=owner,
        update_checker=update_checker,
        banner="Hello\nWorld",
        clock=clock,
    )
