"""Command handling module for clisession.

Public API:
    CommandHandler -- Abstract base class for commands
    CommandResolver -- Abstract name-to-handler resolution
    HandlerRegistry -- In-memory resolver with built-in commands
    CommandNameCompleter -- Completes command names
    ITERATE_CURSOR -- Sentinel handler that continues the current cursor
"""

from clisession.commands.base import CommandHandler, CommandResolver
from clisession.commands.builtin import ITERATE_CURSOR, Exit, Help, IterateCursor
from clisession.commands.completion import CommandNameCompleter
from clisession.commands.registry import HandlerRegistry

__all__ = [
    "CommandHandler",
    "CommandNameCompleter",
    "CommandResolver",
    "Exit",
    "HandlerRegistry",
    "Help",
    "ITERATE_CURSOR",
    "IterateCursor",
]
