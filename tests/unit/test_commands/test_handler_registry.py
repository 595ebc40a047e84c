"""Tests for the command registry."""

from __future__ import annotations

import pytest

from clisession.commands.base import CommandHandler
from clisession.commands.builtin import ITERATE_CURSOR
from clisession.commands.registry import HandlerRegistry
from clisession.errors import CommandError


class Echo(CommandHandler):
    name = "echo"
    help = "Print the arguments"

    async def execute(self, context):
        return " ".join(context.arguments)


class Nameless(CommandHandler):
    async def execute(self, context):
        return None


class TestHandlerRegistry:
    def test_register_and_resolve(self) -> None:
        registry = HandlerRegistry()
        handler = Echo()
        registry.register(handler, "say")
        assert registry.resolve("echo") is handler
        assert registry.resolve("say") is handler
        assert registry.resolve("nope") is None
        assert "say" in registry

    def test_names_sorted(self) -> None:
        registry = HandlerRegistry()
        registry.register(Echo(), "abc")
        assert registry.names() == ["abc", "echo"]

    def test_handlers_are_distinct(self) -> None:
        registry = HandlerRegistry()
        handler = Echo()
        registry.register(handler, "say", "print")
        assert registry.handlers() == [handler]

    def test_duplicate_name_rejected(self) -> None:
        registry = HandlerRegistry()
        registry.register(Echo())
        with pytest.raises(CommandError, match="already registered: echo"):
            registry.register(Echo())

    def test_failed_registration_registers_nothing(self) -> None:
        registry = HandlerRegistry()
        registry.register(Echo())
        other = Echo()
        other.name = "shout"
        with pytest.raises(CommandError):
            registry.register(other, "echo")
        assert "shout" not in registry

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(CommandError):
            HandlerRegistry().register(Nameless())

    def test_with_builtins(self) -> None:
        registry = HandlerRegistry.with_builtins()
        assert registry.names() == ["exit", "help", "it", "quit"]
        assert registry.resolve("it") is ITERATE_CURSOR
        assert registry.resolve("quit") is registry.resolve("exit")
