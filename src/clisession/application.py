"""Application wiring: builds sessions with their collaborators injected."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Callable

from clisession.commands.completion import CommandNameCompleter
from clisession.commands.registry import HandlerRegistry
from clisession.config.settings import Settings, read_banner
from clisession.events import EventBus
from clisession.registry import SessionRegistry
from clisession.session.session import Session, now_ms
from clisession.terminal.base import Terminal
from clisession.terminal.stream import StreamTerminal

logger = logging.getLogger(__name__)


class CliApplication:
    """Owns the shared facilities every session of one application uses."""

    def __init__(
        self,
        settings: Settings | None = None,
        commands: HandlerRegistry | None = None,
        events: EventBus | None = None,
        registry: SessionRegistry | None = None,
        update_checker: Callable[[], None] | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.settings = settings if settings is not None else Settings()
        page_size = self.settings.session.page_size
        self.commands = commands if commands is not None else HandlerRegistry.with_builtins(page_size)
        self.events = events if events is not None else EventBus()
        self.registry = registry if registry is not None else SessionRegistry()
        self.update_checker = update_checker
        self.clock = clock
        self._banner: str | None = None

    @property
    def name(self) -> str:
        return self.settings.session.app_name

    @property
    def banner(self) -> str:
        if self._banner is None:
            self._banner = read_banner(self.settings.session)
        return self._banner

    def cuid(self) -> str:
        """A new unique session id."""
        return uuid.uuid4().hex[:12]

    def new_session(self, terminal: Terminal, session_id: str | None = None) -> Session:
        """Build and register a session for a freshly accepted connection."""
        session = Session(
            session_id or self.cuid(),
            terminal,
            self.commands,
            app_name=self.name,
            events=self.events,
            owner=self.registry,
            update_checker=self.update_checker,
            clock=self.clock,
            banner=self.banner,
            completer=CommandNameCompleter(self.commands),
        )
        self.registry.add(session)
        return session

    def bridged_session(self, web_session_id: str, terminal: Terminal) -> Session:
        """Build and register a session driven over HTTP."""
        session = Session.bridged(
            web_session_id,
            terminal,
            self.commands,
            app_name=self.name,
            events=self.events,
            owner=self.registry,
            update_checker=self.update_checker,
            clock=self.clock,
        )
        self.registry.add(session)
        return session

    def start_sweeper(self) -> asyncio.Task[None]:
        """Start expiring idle sessions on the running loop."""
        cfg = self.settings.session
        return asyncio.create_task(self.registry.run_sweeper(cfg.sweep_interval, cfg.expiration))

    async def serve_connection(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        """Per-connection callback for ``asyncio.start_server``."""
        terminal = StreamTerminal(reader, writer, encoding=self.settings.server.encoding)
        session = self.new_session(terminal)
        logger.info("Accepted connection from %s as session %s", terminal.peer, session.id)
        await session.run()

    async def serve(self) -> None:
        """Accept connections and sweep expired sessions until cancelled."""
        cfg = self.settings.server
        server = await asyncio.start_server(self.serve_connection, cfg.host, cfg.port)
        sweeper = self.start_sweeper()
        logger.info("Listening for sessions on %s:%d", cfg.host, cfg.port)
        try:
            async with server:
                await server.serve_forever()
        finally:
            sweeper.cancel()
            stopped = self.registry.stop_all("server shutting down")
            logger.info("Server stopped (%d session(s) closed)", stopped)
