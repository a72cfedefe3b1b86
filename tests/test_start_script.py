"""Tests for the uvicorn launcher script."""

import os

import pytest

from scripts import start


@pytest.fixture
def uvicorn_calls(monkeypatch):
    calls = {}
    monkeypatch.setattr(start, "configure_logging", lambda level: None)
    monkeypatch.setattr(start.uvicorn, "run", lambda app, **kwargs: calls.update(app=app, **kwargs))
    return calls


def test_storage_flag_overrides_environment(monkeypatch, uvicorn_calls):
    monkeypatch.setenv("STORAGE_BACKEND", "auto")
    monkeypatch.setattr("sys.argv", ["start.py", "--storage", "sql", "--port", "9001", "--reload"])

    start.main()

    assert os.environ["STORAGE_BACKEND"] == "sql"
    assert uvicorn_calls["app"] == "app.main:app"
    assert uvicorn_calls["port"] == 9001
    assert uvicorn_calls["reload"] is True


def test_defaults_come_from_settings(monkeypatch, uvicorn_calls):
    monkeypatch.setenv("STORAGE_BACKEND", "auto")
    monkeypatch.setenv("PORT", "8100")
    monkeypatch.delenv("HOST", raising=False)
    monkeypatch.delenv("RELOAD", raising=False)
    monkeypatch.setattr("sys.argv", ["start.py"])

    start.main()

    assert os.environ["STORAGE_BACKEND"] == "auto"
    assert uvicorn_calls["host"] == "0.0.0.0"
    assert uvicorn_calls["port"] == 8100
    assert uvicorn_calls["reload"] is False


def test_unknown_storage_is_rejected(monkeypatch, uvicorn_calls):
    monkeypatch.setattr("sys.argv", ["start.py", "--storage", "mongo"])
    with pytest.raises(SystemExit):
        start.main()
    assert uvicorn_calls == {}
