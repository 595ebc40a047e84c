"""Built-in commands available in every session."""

from __future__ import annotations

from typing import TYPE_CHECKING

from clisession.commands.base import CommandHandler, CommandResolver
from clisession.domain.models import Message, Terminate
from clisession.session.cursor import PagedCursor

if TYPE_CHECKING:
    from clisession.commands.registry import HandlerRegistry
    from clisession.session.context import CommandContext


class IterateCursor(CommandHandler):
    """Prints the next page of the session's cursor.

    The single instance :data:`ITERATE_CURSOR` is a sentinel: running it
    does not count as a new command, so the cursor survives.
    """

    name = "it"
    help = "Show more of the previous command's output"

    async def execute(self, context: CommandContext) -> object:
        session = context.session
        cursor = session.cursor
        if cursor is None:
            return Message(text="no cursor")
        await cursor.output(context)
        if not cursor.has_next():
            session.remove_cursor()
        return None


ITERATE_CURSOR = IterateCursor()


class Exit(CommandHandler):
    name = "exit"
    help = "End this session"

    async def execute(self, context: CommandContext) -> object:
        return Terminate(should_exit=True)


class Help(CommandHandler):
    """Lists the commands known to a resolver, one page at a time."""

    name = "help"
    help = "List available commands"

    def __init__(self, resolver: CommandResolver, page_size: int = 20) -> None:
        self._resolver = resolver
        self._page_size = page_size

    async def execute(self, context: CommandContext) -> object:
        lines = []
        for name in self._resolver.names():
            handler = self._resolver.resolve(name)
            summary = handler.help if handler is not None else ""
            lines.append(f"{name:<16}{summary}".rstrip())
        cursor = PagedCursor(lines, page_size=self._page_size)
        await cursor.output(context)
        if cursor.has_next():
            context.session.set_cursor(cursor)
        return None


def register_builtins(registry: HandlerRegistry, page_size: int = 20) -> None:
    registry.register(ITERATE_CURSOR)
    registry.register(Exit(), "quit")
    registry.register(Help(registry, page_size=page_size))
