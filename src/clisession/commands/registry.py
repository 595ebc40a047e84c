"""In-memory command registry."""

from __future__ import annotations

import logging

from clisession.commands.base import CommandHandler, CommandResolver
from clisession.errors import CommandError

logger = logging.getLogger(__name__)


class HandlerRegistry(CommandResolver):
    """Resolves command names (and aliases) to registered handlers."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}

    def register(self, handler: CommandHandler, *aliases: str) -> None:
        """Register ``handler`` under its name and any aliases.

        Raises:
            CommandError: If a name is empty or already taken.
        """
        names = (handler.name, *aliases)
        for name in names:
            if not name:
                raise CommandError(f"Handler {handler!r} has no command name")
            if name in self._handlers:
                raise CommandError(f"Command already registered: {name}")
        for name in names:
            self._handlers[name] = handler
        logger.debug("Registered command %s", "/".join(names))

    def resolve(self, name: str) -> CommandHandler | None:
        return self._handlers.get(name)

    def names(self) -> list[str]:
        return sorted(self._handlers)

    def handlers(self) -> list[CommandHandler]:
        """Distinct handlers, ordered by primary name."""
        seen: dict[int, CommandHandler] = {}
        for handler in self._handlers.values():
            seen.setdefault(id(handler), handler)
        return sorted(seen.values(), key=lambda h: h.name)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    @classmethod
    def with_builtins(cls, page_size: int = 20) -> HandlerRegistry:
        """A registry pre-populated with the built-in commands."""
        from clisession.commands.builtin import register_builtins

        registry = cls()
        register_builtins(registry, page_size=page_size)
        return registry
