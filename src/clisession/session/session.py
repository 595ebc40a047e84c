"""Interactive command session attached to one connection.

A session reads command lines from its terminal, runs each through the
command resolver, and reacts to the outcome each command returns. It owns
the terminal, a per-session attribute store, at most one cursor for paged
output, and the identity of the last command handler.

Lifecycle::

    CREATED --run()--> RUNNING --exit/stop()/failure--> TERMINATING
        --cleanup--> DESTROYED

``run()`` is driven by exactly one asyncio task. ``stop()`` is the only
cancellation primitive and may be called from any thread.
"""

from __future__ import annotations

import asyncio
import logging
import re
import threading
import time
from typing import TYPE_CHECKING, Any, Callable, Protocol

from clisession.config.settings import DEFAULT_APP_NAME
from clisession.domain.models import (
    Continue,
    InternalError,
    Message,
    SessionInfo,
    SessionState,
    Terminate,
)
from clisession.errors import SessionError, TransportError
from clisession.events import EventBus, SessionStarted, SessionTerminated
from clisession.session.attributes import AttributeStore
from clisession.session.context import CommandContext
from clisession.session.cursor import Cursor
from clisession.session.tracking import HandlerTracker
from clisession.terminal.cancel import CancelToken

if TYPE_CHECKING:
    from clisession.commands.base import CommandHandler, CommandResolver
    from clisession.terminal.base import Completer, Terminal

logger = logging.getLogger(__name__)

TERMINATED_NOTICE = "session terminated"


class SessionOwner(Protocol):
    """Whoever keeps track of active sessions (e.g. the session registry)."""

    def remove(self, session: Session) -> None:
        ...


def now_ms() -> int:
    return int(time.time() * 1000)


class Session:
    """One interactive connection's lifetime.

    Collaborators are injected rather than looked up: ``events`` receives
    the start/terminate notifications, ``owner`` is told when the session
    ends, ``update_checker`` is called for every processed line, and
    ``banner`` is printed when the session starts.
    """

    def __init__(
        self,
        session_id: str,
        terminal: Terminal,
        resolver: CommandResolver,
        *,
        app_name: str = DEFAULT_APP_NAME,
        events: EventBus | None = None,
        owner: SessionOwner | None = None,
        update_checker: Callable[[], None] | None = None,
        banner: str = "",
        completer: Completer | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._id = session_id
        self._io = terminal
        self._terminal: Terminal | None = terminal
        self._resolver = resolver
        self._app_name = app_name
        self._events = events if events is not None else EventBus()
        self._owner = owner
        self._update_checker = update_checker
        self._banner = banner
        self._completer = completer
        self._clock = clock

        self._lock = threading.Lock()
        self._processing = asyncio.Lock()
        self._cancel = CancelToken()
        self._state = SessionState.CREATED
        self._exiting = False
        self._finished = False
        self._bridged = False
        self._daemon = False
        self._last_activity = clock()

        self._attributes = AttributeStore()
        self._cursor: Cursor | None = None
        self._tracker = HandlerTracker()
        self._context: CommandContext | None = None

    @classmethod
    def bridged(
        cls,
        web_session_id: str,
        terminal: Terminal,
        resolver: CommandResolver,
        **kwargs: Any,
    ) -> Session:
        """Create a session driven line by line over HTTP.

        The session takes the web session's id and is running immediately;
        the caller feeds it with :meth:`process_line` and ends it with
        :meth:`finish`.
        """
        session = cls(web_session_id, terminal, resolver, **kwargs)
        session._bridged = True
        session._state = SessionState.RUNNING
        session._events.emit_sync(SessionStarted(session=session))
        return session

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def app_name(self) -> str:
        return self._app_name

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def exiting(self) -> bool:
        return self._exiting

    @property
    def daemon(self) -> bool:
        return self._daemon

    @daemon.setter
    def daemon(self, value: bool) -> None:
        self._daemon = value

    @property
    def last_activity(self) -> int:
        """Time of the last processed line, in epoch milliseconds."""
        return self._last_activity

    @property
    def terminal(self) -> Terminal | None:
        """The attached terminal, or None once stopped."""
        return self._terminal

    @property
    def current_context(self) -> CommandContext | None:
        return self._context

    @property
    def attributes(self) -> AttributeStore:
        return self._attributes

    @property
    def prompt(self) -> str:
        name = self._app_name.strip() or DEFAULT_APP_NAME
        return f"{name}[{self._id}]>"

    # ------------------------------------------------------------------
    # Attributes, cursor and handler identity
    # ------------------------------------------------------------------

    def attribute(self, key: str, default: Any = None) -> Any:
        return self._attributes.get(key, default)

    def set_attribute(self, key: str, value: Any) -> Session:
        self._attributes.set(key, value)
        return self

    def remove_attribute(self, key: str) -> Session:
        self._attributes.remove(key)
        return self

    @property
    def cursor(self) -> Cursor | None:
        return self._cursor

    def set_cursor(self, cursor: Cursor) -> Session:
        self._cursor = cursor
        return self

    def remove_cursor(self) -> None:
        self._cursor = None

    @property
    def current_handler(self) -> CommandHandler | None:
        return self._tracker.current

    def handler(self, handler: CommandHandler) -> None:
        """Record the handler about to run; drop the cursor if the command changed."""
        if self._tracker.record(handler):
            self.remove_cursor()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Start the session and process lines until it terminates.

        Cleanup (owner removal, transport close, terminate event) runs
        exactly once whichever way the loop ends.
        """
        with self._lock:
            if self._state is not SessionState.CREATED:
                raise SessionError(f"Session {self._id} already started", self._id)
            self._state = SessionState.TERMINATING if self._exiting else SessionState.RUNNING
        self._cancel.bind()
        try:
            self._events.emit_sync(SessionStarted(session=self))
            terminal = self._terminal
            if terminal is None:
                logger.info("Session %s stopped before it started", self._id)
                return
            self._present(terminal)
            await terminal.flush()
            logger.info("Session %s started", self._id)
            await self._dispatch_loop(terminal)
        except asyncio.CancelledError:
            logger.info("Session %s task cancelled", self._id)
            raise
        except (TransportError, ConnectionError) as e:
            logger.error("Session %s transport failure: %s", self._id, e)
        except Exception:
            logger.exception("Error processing cli session %s", self._id)
            await self._farewell()
        finally:
            self.finish()

    def stop(self, message: str | None = None) -> None:
        """Terminate the session. Idempotent and safe from any thread.

        Args:
            message: Written to the terminal first, if one is attached.
        """
        if message is not None:
            terminal = self._terminal
            if terminal is not None:
                self._cancel.call_soon(terminal.println, message)

        with self._lock:
            if self._state is SessionState.DESTROYED:
                return
            self._exiting = True
            if self._state is SessionState.RUNNING:
                self._state = SessionState.TERMINATING
            terminal, self._terminal = self._terminal, None

        if self._cancel.cancel():
            logger.info("Stopping session %s", self._id)
        if terminal is not None:
            self._cancel.call_soon(terminal.close)
        if self._bridged:
            # No loop will run the cleanup for us
            self._cancel.call_soon(self.finish)

    def finish(self) -> None:
        """Run end-of-session cleanup once: deregister, close, notify, destroy."""
        with self._lock:
            if self._finished:
                return
            self._finished = True
            self._exiting = True
            if self._state is not SessionState.DESTROYED:
                self._state = SessionState.TERMINATING
            self._terminal = None
        try:
            if self._owner is not None:
                self._owner.remove(self)
        finally:
            self._io.close()
            self._events.emit_sync(SessionTerminated(session=self))
            self.destroy()
        logger.info("Session %s terminated", self._id)

    def destroy(self) -> None:
        """Stop the session and release everything it holds. Idempotent."""
        self.stop()
        with self._lock:
            if self._state is SessionState.DESTROYED:
                return
            self._state = SessionState.DESTROYED
        destroyed = self._attributes.destroy_all()
        self._cursor = None
        self._tracker.clear()
        self._context = None
        logger.debug("Session %s destroyed (%d attribute(s) torn down)", self._id, destroyed)

    def expired(self, threshold_seconds: float) -> bool:
        """Check whether the session has been idle longer than the threshold.

        A daemon session whose current command context is still connected
        never expires.
        """
        context = self._context
        if self._daemon and context is not None and not context.disconnected:
            return False
        return self._clock() - self._last_activity > threshold_seconds * 1000

    def info(self) -> SessionInfo:
        current = self._tracker.current
        return SessionInfo(
            session_id=self._id,
            state=self._state,
            daemon=self._daemon,
            exiting=self._exiting,
            idle_ms=max(0, self._clock() - self._last_activity),
            has_cursor=self._cursor is not None,
            handler=str(current) if current is not None else None,
            attributes=sorted(self._attributes.keys()),
        )

    # ------------------------------------------------------------------
    # Command processing
    # ------------------------------------------------------------------

    async def process_line(self, line: str, terminal: Terminal | None = None) -> bool:
        """Process one input line.

        Refreshes the activity timestamp and runs the update checker for
        every line, then runs non-blank lines as commands.

        Lines are processed one at a time; a caller arriving while another
        line runs waits for it to finish.

        Returns:
            True if the session is exiting afterwards.
        """
        async with self._processing:
            terminal = terminal if terminal is not None else self._terminal
            if terminal is None or self._exiting:
                return True
            self._last_activity = self._clock()
            if self._update_checker is not None:
                self._update_checker()
            if not line.strip():
                return self._exiting

            context = CommandContext(line, terminal, self, self._resolver)
            self._context = context
            outcome = await context.handle()
            self._apply(outcome, terminal)
            await terminal.flush()
            return self._exiting

    async def _dispatch_loop(self, terminal: Terminal) -> None:
        while not self._exiting:
            line = await terminal.read_line(self._cancel)
            if line is None:
                logger.info("Session %s read interrupted", self._id)
                return
            if self._exiting:
                break
            await self.process_line(line, terminal)
        terminal.println(TERMINATED_NOTICE)
        await terminal.flush()

    def _apply(self, outcome: Continue | Terminate | Message | InternalError, terminal: Terminal) -> None:
        if isinstance(outcome, Continue):
            return
        if isinstance(outcome, Terminate):
            if outcome.should_exit:
                self._mark_exiting()
        elif isinstance(outcome, Message):
            terminal.println(outcome.text)
        elif isinstance(outcome, InternalError):
            logger.warning("Session %s: %s", self._id, outcome.diagnostic)
            terminal.println(outcome.diagnostic)
        else:
            raise TypeError(f"Not a command outcome: {outcome!r}")

    async def _farewell(self) -> None:
        """Best-effort termination notice before a failed session closes."""
        terminal = self._io
        if terminal.closed:
            return
        terminal.println(TERMINATED_NOTICE)
        try:
            await terminal.flush()
        except TransportError as e:
            logger.debug("Session %s: notice not delivered: %s", self._id, e)

    def _mark_exiting(self) -> None:
        with self._lock:
            self._exiting = True
            if self._state is SessionState.RUNNING:
                self._state = SessionState.TERMINATING

    def _present(self, terminal: Terminal) -> None:
        terminal.prompt = self.prompt
        # The remote terminal echoes locally
        terminal.echo_enabled = False
        if self._completer is not None:
            terminal.add_completer(self._completer)
        if self._banner:
            for line in re.split(r"[\n\r]", self._banner):
                terminal.println(line)

    def __repr__(self) -> str:
        return f"Session({self._id!r}, state={self._state.value})"
