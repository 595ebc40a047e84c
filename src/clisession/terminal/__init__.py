"""Terminal module for clisession.

The line source a session reads commands from and writes output to.

Public API:
    Terminal -- Abstract base class
    Completer -- Completion provider protocol
    CancelToken -- Thread-safe cancellation of a pending read
    StreamTerminal -- Terminal over asyncio connection streams
    BufferTerminal -- In-memory terminal
"""

from clisession.terminal.base import Completer, Terminal
from clisession.terminal.buffer import BufferTerminal
from clisession.terminal.cancel import CancelToken
from clisession.terminal.stream import StreamTerminal

__all__ = [
    "BufferTerminal",
    "CancelToken",
    "Completer",
    "StreamTerminal",
    "Terminal",
]
