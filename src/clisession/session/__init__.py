"""Session module for clisession.

Public API:
    Session -- Lifecycle controller and command dispatch loop
    CommandContext -- Execution context for one command line
    AttributeStore -- Session-scoped attributes
    Cursor / PagedCursor -- Resumable command output
    HandlerTracker -- Last-handler identity tracking
"""

from clisession.session.attributes import (
    AttributeStore,
    Destroyable,
    application_scoped,
)
from clisession.session.context import CommandContext
from clisession.session.cursor import Cursor, PagedCursor
from clisession.session.session import TERMINATED_NOTICE, Session, SessionOwner
from clisession.session.tracking import HandlerTracker

__all__ = [
    "AttributeStore",
    "CommandContext",
    "Cursor",
    "Destroyable",
    "HandlerTracker",
    "PagedCursor",
    "Session",
    "SessionOwner",
    "TERMINATED_NOTICE",
    "application_scoped",
]
