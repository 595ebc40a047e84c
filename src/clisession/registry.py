"""Registry of active sessions with idle-expiration sweeping."""

from __future__ import annotations

import asyncio
import logging
import threading

from clisession.domain.models import SessionInfo
from clisession.session.session import Session

logger = logging.getLogger(__name__)

EXPIRED_MESSAGE = "session expired"


class SessionRegistry:
    """Tracks active sessions and stops those that sit idle too long.

    Sessions remove themselves when their loop exits. The sweeper may run
    in a different thread than the sessions it stops.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def add(self, session: Session) -> None:
        with self._lock:
            self._sessions[session.id] = session
        logger.debug("Registered session %s (%d active)", session.id, len(self))

    def remove(self, session: Session) -> None:
        with self._lock:
            if self._sessions.get(session.id) is session:
                del self._sessions[session.id]
        logger.debug("Removed session %s (%d active)", session.id, len(self))

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(session_id)

    def sessions(self) -> list[Session]:
        with self._lock:
            return list(self._sessions.values())

    def infos(self) -> list[SessionInfo]:
        return [s.info() for s in sorted(self.sessions(), key=lambda s: s.id)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def prune_expired(self, threshold_seconds: float) -> list[str]:
        """Stop every session idle for longer than ``threshold_seconds``.

        Returns:
            Ids of the sessions stopped.
        """
        expired = [s for s in self.sessions() if s.expired(threshold_seconds)]
        for session in expired:
            logger.info("Session %s expired", session.id)
            session.stop(EXPIRED_MESSAGE)
            self.remove(session)
        return [s.id for s in expired]

    async def run_sweeper(self, interval: float, threshold_seconds: float) -> None:
        """Prune expired sessions every ``interval`` seconds until cancelled."""
        logger.info(
            "Session sweeper started (interval=%.1fs, expiration=%ss)",
            interval, threshold_seconds,
        )
        while True:
            try:
                await asyncio.sleep(interval)
                self.prune_expired(threshold_seconds)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Session sweep failed: %s", e)
        logger.info("Session sweeper stopped")

    def stop_all(self, message: str | None = None) -> int:
        """Stop every registered session (e.g. on shutdown)."""
        sessions = self.sessions()
        for session in sessions:
            session.stop(message)
        return len(sessions)
