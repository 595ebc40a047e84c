"""Domain models for clisession.

This package contains the command outcome signal, session state
enumeration and session snapshot model. All models use Pydantic v2 for
validation and serialization.
"""

from clisession.domain.models import (
    CommandOutcome,
    Continue,
    InternalError,
    Message,
    SessionInfo,
    SessionState,
    Terminate,
    as_outcome,
)

__all__ = [
    "CommandOutcome",
    "Continue",
    "InternalError",
    "Message",
    "SessionInfo",
    "SessionState",
    "Terminate",
    "as_outcome",
]
