"""Exception hierarchy for clisession."""

from __future__ import annotations


class SessionError(Exception):
    """Base class for session failures."""

    def __init__(self, message: str, session_id: str | None = None) -> None:
        super().__init__(message)
        self.session_id = session_id


class TransportError(SessionError):
    """Raised when the underlying connection is reset, broken or closed."""


class TerminalClosedError(TransportError):
    """Raised when the remote end closes its input stream."""


class CommandError(SessionError):
    """Raised on command registry misuse (e.g. duplicate command names)."""
