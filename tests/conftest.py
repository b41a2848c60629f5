# tests/conftest.py

from __future__ import annotations

from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pytest

from request_tracker.core.state import AppState
from request_tracker.records.models import TaskDraft
from request_tracker.records.store import RecordStore

from .fakes import FixedClock, RecordingBackend

TODAY = date(2025, 4, 8)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and .env files.
    """
    return SimpleNamespace(
        app_name="tracker-test",
        log_level="DEBUG",
        console_enabled=False,
        storage_backend="memory",
        storage_key="events",
        data_dir=tmp_path,
        records_path=tmp_path / "records.json",
        records_db_path=tmp_path / "records.sqlite3",
        export_dir=tmp_path / "exports",
        default_sort_key="date",
    )


@pytest.fixture()
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture()
def store(backend: RecordingBackend) -> RecordStore:
    return RecordStore(backend)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture()
def seeded_store(store: RecordStore) -> RecordStore:
    """Four records in insertion order, the second one completed."""
    store.add(TaskDraft(title="Quote for brackets", date="2025-05-01", client="Acme", owner="Kim"))
    store.add(TaskDraft(title="Invoice March", date="2025-01-10", client="beta corp", owner="Lee", status="done"))
    store.add(TaskDraft(title="Sample shipment", date="2025-03-20", client="Ćelik", owner="Park", status="pending"))
    store.add(TaskDraft(title="Call supplier", date="2025-04-09", client="Acme", owner="Choi", status="on_hold"))
    store.toggle_completed(1)
    return store


@pytest.fixture()
def state(settings: SimpleNamespace, seeded_store: RecordStore, clock: FixedClock) -> AppState:
    """AppState wired with an in-memory backend and a pinned clock."""
    return AppState(settings=settings, store=seeded_store, clock=clock)
