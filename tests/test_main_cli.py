from __future__ import annotations

import logging

import httpx
import pytest

import main
from main import _parse_args


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


def test_healthcheck_subcommand_available() -> None:
    args = _parse_args(["healthcheck", "--url", "http://localhost:3000/health"])
    assert args.command == "healthcheck"
    assert args.url == "http://localhost:3000/health"
    assert args.timeout == 3.0


def test_healthcheck_succeeds_on_ok(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_get(url: str, *, timeout: float) -> httpx.Response:
        calls.append((url, timeout))
        return httpx.Response(200, json={"status": "healthy"})

    monkeypatch.setattr(main.httpx, "get", fake_get)

    assert main._healthcheck("http://127.0.0.1:3000/health", timeout=1.5) == 0
    assert calls == [("http://127.0.0.1:3000/health", 1.5)]


def test_healthcheck_fails_on_error_status(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main.httpx, "get", lambda url, *, timeout: httpx.Response(503))

    assert main._healthcheck("http://127.0.0.1:3000/health", timeout=1.0) == 1


def test_healthcheck_fails_when_unreachable(monkeypatch: pytest.MonkeyPatch) -> None:
    def refuse(url: str, *, timeout: float) -> httpx.Response:
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(main.httpx, "get", refuse)

    assert main._healthcheck("http://127.0.0.1:3000/health", timeout=1.0) == 1


def test_main_healthcheck_uses_configured_port(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = []

    def fake_get(url: str, *, timeout: float) -> httpx.Response:
        seen.append(url)
        return httpx.Response(200)

    monkeypatch.setenv("PORT", "4321")
    monkeypatch.delenv("USERS_API_CONFIG", raising=False)
    monkeypatch.setattr(main.httpx, "get", fake_get)

    with pytest.raises(SystemExit) as excinfo:
        main.main(["healthcheck"])

    assert excinfo.value.code == 0
    assert seen == ["http://127.0.0.1:4321/health"]


def test_serve_runs_uvicorn_with_resolved_port(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    import uvicorn

    captured = {}

    def fake_run(app, **kwargs) -> None:
        captured["app"] = app
        captured.update(kwargs)

    monkeypatch.setenv("PORT", "3100")
    monkeypatch.delenv("USERS_API_CONFIG", raising=False)
    monkeypatch.setattr(uvicorn, "run", fake_run)

    caplog.set_level(logging.INFO, logger="usersapi.main")

    main.main(["--host", "127.0.0.1"])

    assert captured["host"] == "127.0.0.1"
    assert captured["port"] == 3100
    assert captured["app"].title == "Users API"
    assert "Starting server on port 3100" in caplog.text


def test_invalid_configuration_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "not-a-port")

    with pytest.raises(SystemExit) as excinfo:
        main.main(["healthcheck"])

    assert "Invalid configuration" in str(excinfo.value.code)
