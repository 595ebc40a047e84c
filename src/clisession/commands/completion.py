"""Tab completion of command names."""

from __future__ import annotations

from clisession.commands.base import CommandResolver


class CommandNameCompleter:
    """Completes the first word of a line against the known command names."""

    def __init__(self, resolver: CommandResolver) -> None:
        self._resolver = resolver

    def complete(self, buffer: str) -> list[str]:
        prefix = buffer.lstrip()
        if " " in prefix:
            # Arguments are the handler's business
            return []
        return [name for name in self._resolver.names() if name.startswith(prefix)]
