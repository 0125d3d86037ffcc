from __future__ import annotations

import os

import pytest

from entity_mcp.errors import StartupError
from entity_mcp.server import StdioToolServer
from entity_mcp.servers import entity_enum


@pytest.fixture
def no_env_file(tmp_path) -> list[str]:
    return ["--env-file", str(tmp_path / "missing.env")]


def test_clean_transport_close_exits_zero(monkeypatch, no_env_file) -> None:
    started: list[StdioToolServer] = []
    monkeypatch.setattr(StdioToolServer, "run", lambda self: started.append(self))

    assert entity_enum.main(no_env_file) == 0
    assert len(started) == 1
    assert len(started[0].handlers) == 5


def test_startup_error_exits_one(monkeypatch, no_env_file, caplog) -> None:
    def fail(self):
        raise StartupError("Failed to bind stdio transport: closed")

    monkeypatch.setattr(StdioToolServer, "run", fail)

    assert entity_enum.main(no_env_file) == 1
    assert "Server failed to start" in caplog.text


def test_uncaught_error_exits_one(monkeypatch, no_env_file) -> None:
    def crash(self):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(StdioToolServer, "run", crash)

    assert entity_enum.main(no_env_file) == 1


def test_keyboard_interrupt_exits_zero(monkeypatch, no_env_file) -> None:
    def interrupt(self):
        raise KeyboardInterrupt

    monkeypatch.setattr(StdioToolServer, "run", interrupt)

    assert entity_enum.main(no_env_file) == 0


def test_missing_endpoint_is_not_a_startup_error(backend_env, monkeypatch, no_env_file) -> None:
    backend_env.delenv("ENDPOINT")
    monkeypatch.setattr(StdioToolServer, "run", lambda self: None)

    assert entity_enum.main(no_env_file) == 0


def test_env_file_fills_missing_variables(backend_env, monkeypatch, tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("ENDPOINT=https://from-file.example.com\nAPI_KEY=file-key\n", encoding="utf-8")
    backend_env.delenv("ENDPOINT")
    backend_env.setenv("API_KEY", "placeholder")
    backend_env.delenv("API_KEY")

    seen: dict[str, str | None] = {}

    def capture(self):
        seen["ENDPOINT"] = os.environ.get("ENDPOINT")
        seen["API_KEY"] = os.environ.get("API_KEY")

    monkeypatch.setattr(StdioToolServer, "run", capture)

    assert entity_enum.main(["--env-file", str(env_file)]) == 0
    assert seen == {"ENDPOINT": "https://from-file.example.com", "API_KEY": "file-key"}


def test_env_file_does_not_override_real_environment(backend_env, monkeypatch, tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("ENDPOINT=https://from-file.example.com\n", encoding="utf-8")

    seen: dict[str, str | None] = {}
    monkeypatch.setattr(StdioToolServer, "run", lambda self: seen.update(ENDPOINT=os.environ.get("ENDPOINT")))

    assert entity_enum.main(["--env-file", str(env_file)]) == 0
    assert seen == {"ENDPOINT": "https://api.example.com"}


def test_cli_passes_exit_code_to_sys_exit(monkeypatch) -> None:
    monkeypatch.setattr(entity_enum, "main", lambda argv=None: 1)

    with pytest.raises(SystemExit) as exc_info:
        entity_enum.cli()

    assert exc_info.value.code == 1
