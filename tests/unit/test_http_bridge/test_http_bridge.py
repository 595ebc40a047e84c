"""Tests for the HTTP bridge."""

from __future__ import annotations

import time

import pytest
from fastapi.testclient import TestClient

from clisession.application import CliApplication
from clisession.commands.base import CommandHandler
from clisession.commands.registry import HandlerRegistry
from clisession.config.settings import SessionConfig, Settings
from clisession import http_bridge
from clisession.http_bridge import create_app
from clisession.session.session import TERMINATED_NOTICE


class Remember(CommandHandler):
    """Stores its argument as a session attribute."""

    name = "remember"

    async def execute(self, context):
        context.session.set_attribute("memo", " ".join(context.arguments))
        return None


class Recall(CommandHandler):
    name = "recall"

    async def execute(self, context):
        return context.attribute("memo", "nothing")


class Explode(CommandHandler):
    name = "explode"

    async def execute(self, context):
        raise RuntimeError("kaboom")


@pytest.fixture
def application() -> CliApplication:
    commands = HandlerRegistry.with_builtins()
    commands.register(Remember())
    commands.register(Recall())
    commands.register(Explode())
    settings = Settings(session=SessionConfig(app_name="web"))
    return CliApplication(settings, commands=commands)


@pytest.fixture
def client(application: CliApplication) -> TestClient:
    return TestClient(create_app(application))


class TestHttpBridge:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "sessions": 0}

    def test_first_line_opens_session(self, client: TestClient, application: CliApplication) -> None:
        response = client.post("/cli", json={"line": "help"})
        assert response.status_code == 200
        body = response.json()
        assert body["exit"] is False
        assert any(line.startswith("recall") for line in body["output"])
        assert response.cookies.get("cli_session") == body["session_id"]
        assert body["session_id"] in application.registry

    def test_cookie_reuses_session(self, client: TestClient) -> None:
        first = client.post("/cli", json={"line": "remember milk"}).json()
        second = client.post("/cli", json={"line": "recall"}).json()
        assert second["session_id"] == first["session_id"]
        assert second["output"] == ["milk"]

    def test_unknown_command(self, client: TestClient) -> None:
        body = client.post("/cli", json={"line": "frobnicate"}).json()
        assert body["output"] == ["Command not recognized: frobnicate"]

    def test_blank_line(self, client: TestClient) -> None:
        body = client.post("/cli", json={"line": "   "}).json()
        assert body["output"] == []
        assert body["exit"] is False

    def test_exit_ends_session(self, client: TestClient, application: CliApplication) -> None:
        session_id = client.post("/cli", json={"line": "help"}).json()["session_id"]
        body = client.post("/cli", json={"line": "exit"}).json()

        assert body["exit"] is True
        assert body["output"] == [TERMINATED_NOTICE]
        assert session_id not in application.registry

        after = client.post("/cli", json={"line": "recall"}).json()
        assert after["session_id"] != session_id

    def test_handler_failure_returns_500(self, client: TestClient, application: CliApplication) -> None:
        response = client.post("/cli", json={"line": "explode"})
        assert response.status_code == 500
        assert "kaboom" in response.json()["detail"]
        assert len(application.registry) == 0

    def test_delete_without_session(self, client: TestClient) -> None:
        assert client.delete("/cli").json()["status"] == "ignored"

    def test_delete_ends_session(self, client: TestClient, application: CliApplication) -> None:
        session_id = client.post("/cli", json={"line": "remember x"}).json()["session_id"]
        body = client.delete("/cli").json()
        assert body == {"status": "ok", "session_id": session_id}
        assert len(application.registry) == 0

    def test_list_sessions(self, client: TestClient) -> None:
        session_id = client.post("/cli", json={"line": "remember x"}).json()["session_id"]
        sessions = client.get("/sessions").json()
        assert len(sessions) == 1
        assert sessions[0]["session_id"] == session_id
        assert sessions[0]["state"] == "running"
        assert sessions[0]["attributes"] == ["memo"]
        assert sessions[0]["handler"] == "remember"


class TestSessionExpiry:
    def test_idle_bridged_session_is_pruned(self, clock) -> None:
        settings = Settings(session=SessionConfig(expiration=1, sweep_interval=0.01))
        application = CliApplication(settings, clock=clock)

        with TestClient(create_app(application)) as client:
            session_id = client.post("/cli", json={"line": "help"}).json()["session_id"]
            assert session_id in application.registry

            clock.advance(1_001)
            deadline = time.monotonic() + 2
            while session_id in application.registry and time.monotonic() < deadline:
                time.sleep(0.01)

            assert session_id not in application.registry
            assert client.get("/health").json()["sessions"] == 0

    def test_shutdown_stops_open_sessions(self) -> None:
        application = CliApplication(Settings())
        with TestClient(create_app(application)) as client:
            client.post("/cli", json={"line": "help"})
            assert len(application.registry) == 1
        assert len(application.registry) == 0


class TestMain:
    def test_main_uses_configured_address(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        config = tmp_path / "cfg.yaml"
        config.write_text("http:\n  host: 0.0.0.0\n  port: 9090\n")
        calls = {}

        def fake_run(app, host, port) -> None:
            calls.update(app=app, host=host, port=port)

        monkeypatch.setattr(http_bridge.uvicorn, "run", fake_run)
        monkeypatch.setattr(http_bridge, "setup_logging", lambda config: None)
        http_bridge.main(config)

        assert calls["host"] == "0.0.0.0"
        assert calls["port"] == 9090
        assert calls["app"].state.cli.settings.http.port == 9090
