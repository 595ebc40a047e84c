"""FastAPI bridge that runs session commands over HTTP.

Each web client gets its own bridged session, identified by a cookie.
A request carries one command line; the response carries the output the
command produced::

    GET    /health    -> {"status": "ok", "sessions": 1}
    POST   /cli       <- {"line": "help"}
                      -> {"session_id": "...", "output": [...], "exit": false}
    DELETE /cli       -> ends the caller's session
    GET    /sessions  -> [SessionInfo, ...]
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, HTTPException, Request, Response
from pydantic import BaseModel, Field

from clisession import __version__
from clisession.application import CliApplication
from clisession.config.settings import load_settings
from clisession.domain.models import SessionInfo
from clisession.session.session import TERMINATED_NOTICE, Session
from clisession.terminal.buffer import BufferTerminal
from clisession.utils.logging import setup_logging

logger = logging.getLogger(__name__)


class CommandRequest(BaseModel):
    line: str = Field(description="Command line to run")


class CommandResponse(BaseModel):
    session_id: str
    output: list[str] = Field(default_factory=list)
    exit: bool = False


class BridgeStatus(BaseModel):
    status: str = "ok"
    sessions: int = 0


def create_app(application: CliApplication | None = None) -> FastAPI:
    """Create the HTTP bridge for ``application``.

    While the app is being served, idle bridged sessions are expired by
    the application's sweeper; shutdown stops the remaining sessions.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Startup
        cli: CliApplication = app.state.cli
        sweeper = cli.start_sweeper()
        logger.info("HTTP bridge started")
        yield
        # Shutdown
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass
        stopped = cli.registry.stop_all("server shutting down")
        logger.info("HTTP bridge stopped (%d session(s) closed)", stopped)

    app = FastAPI(
        title="clisession HTTP bridge",
        description="Run command session lines over HTTP",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.cli = application if application is not None else CliApplication()
    cookie_name = app.state.cli.settings.http.cookie_name

    def _lookup(request: Request) -> Session | None:
        session_id = request.cookies.get(cookie_name)
        if not session_id:
            return None
        session = app.state.cli.registry.get(session_id)
        if session is None or not isinstance(session.terminal, BufferTerminal):
            return None
        return session

    @app.get("/health")
    async def health_check() -> BridgeStatus:
        return BridgeStatus(status="ok", sessions=len(app.state.cli.registry))

    @app.get("/sessions")
    async def list_sessions() -> list[SessionInfo]:
        return app.state.cli.registry.infos()

    @app.post("/cli")
    async def run_line(body: CommandRequest, request: Request, response: Response) -> CommandResponse:
        cli: CliApplication = app.state.cli
        session = _lookup(request)
        if session is None:
            session = cli.bridged_session(cli.cuid(), BufferTerminal())
            logger.info("Opened bridged session %s", session.id)
        terminal: BufferTerminal = session.terminal  # type: ignore[assignment]

        try:
            exiting = await session.process_line(body.line)
        except Exception as e:
            logger.exception("Error processing bridged session %s", session.id)
            session.finish()
            response.delete_cookie(cookie_name)
            raise HTTPException(status_code=500, detail=f"Command failed: {e}") from e

        output = terminal.take_output()
        if exiting:
            output.append(TERMINATED_NOTICE)
            session.finish()
            response.delete_cookie(cookie_name)
        else:
            response.set_cookie(cookie_name, session.id, httponly=True)
        return CommandResponse(session_id=session.id, output=output, exit=exiting)

    @app.delete("/cli")
    async def end_session(request: Request, response: Response) -> dict[str, str]:
        session = _lookup(request)
        response.delete_cookie(cookie_name)
        if session is None:
            return {"status": "ignored", "reason": "No active session"}
        session.finish()
        return {"status": "ok", "session_id": session.id}

    return app


def main(config_path: Path | str | None = None) -> None:
    """Entry point for running the bridge standalone."""
    settings = load_settings(config_path)
    setup_logging(settings.logging)
    app = create_app(CliApplication(settings))
    uvicorn.run(app, host=settings.http.host, port=settings.http.port)


if __name__ == "__main__":
    main()
