# src/request_tracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the persistence backend and wires it into a RecordStore,
- restores the persisted records into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import BlobBackend
from ..core.state import AppState
from ..records.backends import JsonFileBackend, MemoryBackend, SqliteBackend
from ..records.store import RecordStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.export_dir.mkdir(parents=True, exist_ok=True)
    settings.records_path.parent.mkdir(parents=True, exist_ok=True)
    settings.records_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_backend(settings) -> BlobBackend:
    kind = str(getattr(settings, "storage_backend", "json")).lower()
    if kind == "sqlite":
        return SqliteBackend(settings.records_db_path)
    if kind == "memory":
        logger.warning("Using in-memory storage; records will not survive this process.")
        return MemoryBackend()
    return JsonFileBackend(settings.records_path)


def create_initial_state(*, settings=None, backend: BlobBackend | None = None) -> AppState:
    """
    Create AppState from the provided settings and load persisted records.

    Keeping settings and backend injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if backend is None:
        backend = create_backend(settings)

    store = RecordStore(backend, key=getattr(settings, "storage_key", "events"))
    store.load()

    state = AppState(settings=settings, store=store)
    state.view.set_sort_key(getattr(settings, "default_sort_key", "date"))
    return state
