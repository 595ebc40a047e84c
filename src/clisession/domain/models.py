"""Core domain models for clisession.

These models represent the data flowing out of a command execution (the
command outcome signal) and the observable state of a session.
"""

from __future__ import annotations

import enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SessionState(str, enum.Enum):
    """Lifecycle state of a session."""

    CREATED = "created"
    RUNNING = "running"
    TERMINATING = "terminating"  # Termination flag observed, cleanup pending
    DESTROYED = "destroyed"


# ---------------------------------------------------------------------------
# Command Outcome (discriminated union)
# ---------------------------------------------------------------------------


class Continue(BaseModel):
    """The command ran; nothing else to do."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["continue"] = "continue"


class Terminate(BaseModel):
    """The command asks the session to end."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["terminate"] = "terminate"
    should_exit: bool = Field(default=True, description="Whether the session should exit")


class Message(BaseModel):
    """Informational text to show the user; the session continues."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["message"] = "message"
    text: str = Field(description="Text written to the terminal")


class InternalError(BaseModel):
    """A handler produced a result of a shape the session does not know."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["internal_error"] = "internal_error"
    payload_type: str = Field(description="Type name of the unrecognized payload")

    @property
    def diagnostic(self) -> str:
        return f"INTERNAL ERROR: unknown payload type: {self.payload_type}"


CommandOutcome = Annotated[
    Union[Continue, Terminate, Message, InternalError],
    Field(discriminator="kind"),
]

_OUTCOME_TYPES = (Continue, Terminate, Message, InternalError)


def as_outcome(value: object) -> Continue | Terminate | Message | InternalError:
    """Normalize a handler's return value into a command outcome.

    ``None`` means continue, a bool is an exit request, a string is a
    message. Outcome models pass through unchanged. Anything else becomes
    an :class:`InternalError` naming the value's type, so it is reported to
    the user instead of being dropped.
    """
    if value is None:
        return Continue()
    if isinstance(value, _OUTCOME_TYPES):
        return value
    if isinstance(value, bool):
        return Terminate(should_exit=value)
    if isinstance(value, str):
        return Message(text=value)
    cls = type(value)
    return InternalError(payload_type=f"{cls.__module__}.{cls.__qualname__}")


# ---------------------------------------------------------------------------
# Session snapshot
# ---------------------------------------------------------------------------


class SessionInfo(BaseModel):
    """Read-only snapshot of a session, for listings and health output."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    state: SessionState
    daemon: bool = False
    exiting: bool = False
    idle_ms: int = Field(ge=0, description="Milliseconds since the last processed line")
    has_cursor: bool = False
    handler: str | None = Field(default=None, description="Display identity of the last handler")
    attributes: list[str] = Field(default_factory=list)
