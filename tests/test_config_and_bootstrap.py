# tests/test_config_and_bootstrap.py

from __future__ import annotations

import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from request_tracker.cli.bootstrap import create_backend, create_initial_state
from request_tracker.config import Settings
from request_tracker.logging_setup import _ConsoleNoiseFilter, setup_logging
from request_tracker.records.backends import JsonFileBackend, MemoryBackend, SqliteBackend
from request_tracker.records.models import TaskDraft

from .fakes import RecordingBackend


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in (
        "TRACKER_APP_NAME",
        "TRACKER_LOG_LEVEL",
        "TRACKER_CONSOLE_ENABLED",
        "TRACKER_STORAGE_BACKEND",
        "TRACKER_STORAGE_KEY",
        "TRACKER_DATA_DIR",
        "TRACKER_RECORDS_PATH",
        "TRACKER_RECORDS_DB_PATH",
        "TRACKER_EXPORT_DIR",
        "TRACKER_DEFAULT_SORT",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_settings_defaults(clean_env: pytest.MonkeyPatch) -> None:
    s = Settings.from_env()

    assert s.app_name == "request-tracker"
    assert s.storage_backend == "json"
    assert s.storage_key == "events"
    assert s.console_enabled is True
    assert s.data_dir == Path(".local/tracker")
    assert s.records_path == Path(".local/tracker/records.json")
    assert s.export_dir == Path(".local/tracker/exports")
    assert s.default_sort_key == "date"


def test_settings_from_env(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    clean_env.setenv("TRACKER_DATA_DIR", str(tmp_path))
    clean_env.setenv("TRACKER_STORAGE_BACKEND", "SQLite")
    clean_env.setenv("TRACKER_CONSOLE_ENABLED", "off")
    clean_env.setenv("TRACKER_DEFAULT_SORT", "Client")

    s = Settings.from_env()

    assert s.storage_backend == "sqlite"
    assert s.console_enabled is False
    assert s.records_db_path == tmp_path / "records.sqlite3"
    assert s.default_sort_key == "client"


def test_unknown_backend_falls_back_to_json(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("TRACKER_STORAGE_BACKEND", "redis")
    assert Settings.from_env().storage_backend == "json"


@pytest.mark.parametrize(
    "kind, expected",
    [("json", JsonFileBackend), ("sqlite", SqliteBackend), ("memory", MemoryBackend)],
)
def test_create_backend(settings: SimpleNamespace, kind: str, expected: type) -> None:
    settings.storage_backend = kind
    assert isinstance(create_backend(settings), expected)


def test_create_initial_state_loads_persisted_records(settings: SimpleNamespace) -> None:
    backend = RecordingBackend()
    first = create_initial_state(settings=settings, backend=backend)
    first.store.add(TaskDraft(title="persisted", date="2025-04-08"))

    settings.default_sort_key = "client"
    second = create_initial_state(settings=settings, backend=backend)

    assert [r.title for r in second.store.records] == ["persisted"]
    assert second.view.sort_key == "client"
    assert settings.export_dir.is_dir()


def test_console_filter_keeps_app_logs_and_quiets_storage() -> None:
    f = _ConsoleNoiseFilter()

    def rec(name: str, level: int) -> logging.LogRecord:
        return logging.LogRecord(name, level, __file__, 1, "msg", None, None)

    assert f.filter(rec("request_tracker.records.store", logging.DEBUG))
    assert not f.filter(rec("request_tracker.records.backends", logging.INFO))
    assert f.filter(rec("request_tracker.records.backends", logging.WARNING))
    assert not f.filter(rec("urllib3", logging.WARNING))
    assert f.filter(rec("urllib3", logging.ERROR))


def test_setup_logging_writes_log_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        log_file = setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)
        logging.getLogger("request_tracker.test").debug("hello file")
        for h in root.handlers:
            h.flush()
        assert log_file == tmp_path / "logs" / "tracker.log"
        assert "hello file" in log_file.read_text("utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)
