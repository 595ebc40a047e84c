"""Thread-safe cancellation for the blocking line read.

A session's loop runs in one asyncio task, but ``Session.stop()`` may be
called from any thread (typically the registry's expiration sweeper).
:class:`CancelToken` carries that request across threads: it is bound to
the event loop running the session, and cancelling it wakes up the
pending read, which then reports "cancelled" instead of raising.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancelToken:
    """One-shot cancellation signal shared between a session and its owner."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread_id: int | None = None
        self._event: asyncio.Event | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def bound(self) -> bool:
        return self._loop is not None

    def bind(self) -> None:
        """Bind the token to the running loop and the calling thread.

        Must be called from inside the task that will perform the reads.
        A token cancelled before binding is bound already set.
        """
        loop = asyncio.get_running_loop()
        event = asyncio.Event()
        with self._lock:
            self._loop = loop
            self._thread_id = threading.get_ident()
            self._event = event
            if self._cancelled:
                event.set()

    def cancel(self) -> bool:
        """Request cancellation. Safe from any thread.

        Returns:
            True if this call cancelled the token, False if it was
            already cancelled.
        """
        with self._lock:
            if self._cancelled:
                return False
            self._cancelled = True
            event = self._event
        if event is not None:
            self.call_soon(event.set)
        return True

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        """Run ``callback`` on the bound loop.

        Runs inline when unbound or when already on the loop's thread,
        otherwise it is scheduled with ``call_soon_threadsafe``.
        """
        with self._lock:
            loop, owner = self._loop, self._thread_id
        if loop is None or owner == threading.get_ident():
            callback(*args)
            return
        try:
            loop.call_soon_threadsafe(callback, *args)
        except RuntimeError:
            # Loop already closed: the session task is gone
            logger.debug("Loop closed, dropping callback %r", callback)

    async def wait(self) -> None:
        """Wait until the token is cancelled."""
        if self._event is None:
            raise RuntimeError("CancelToken is not bound to a running loop")
        await self._event.wait()

    async def race(self, awaitable: Awaitable[T]) -> tuple[bool, T | None]:
        """Await ``awaitable`` unless the token is cancelled first.

        Returns:
            ``(True, None)`` when cancelled, otherwise ``(False, result)``.
            Exceptions raised by ``awaitable`` propagate.
        """
        if self._cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            return True, None

        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self.wait())
        try:
            await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (work, waiter):
                if not task.done():
                    task.cancel()

        if self._cancelled:
            if work.done() and not work.cancelled():
                # Retrieve so asyncio does not warn about it
                work.exception()
            return True, None
        return False, work.result()
