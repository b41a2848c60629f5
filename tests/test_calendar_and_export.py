# tests/test_calendar_and_export.py

from __future__ import annotations

import csv
from pathlib import Path

import pytest

from request_tracker.export.csv_export import CSV_COLUMNS, DEFAULT_EXPORT_NAME, export_csv, render_csv
from request_tracker.records.models import TaskDraft, TaskRecord
from request_tracker.records.store import RecordStore
from request_tracker.views.calendar import CalendarEntry, project
from request_tracker.views.engine import ViewParams, derive_view

from .fakes import FixedClock


def test_projection_labels_and_order(seeded_store: RecordStore) -> None:
    entries = project(seeded_store.records)

    assert entries[0] == CalendarEntry(label="Quote for brackets (Acme/Kim)", date="2025-05-01")
    assert [e.date for e in entries] == [r.date for r in seeded_store.records]
    assert entries[1].to_dict() == {"title": "Invoice March (beta corp/Lee)", "date": "2025-01-10"}


def test_projection_with_empty_client_and_owner(store: RecordStore) -> None:
    store.add(TaskDraft(title="Solo", date="2025-02-02"))
    assert project(store.records)[0].label == "Solo (/)"


def test_projection_ignores_view_parameters(seeded_store: RecordStore, clock: FixedClock) -> None:
    params = ViewParams(search_term="invoice", sort_key="client")
    visible = derive_view(seeded_store.records, params, clock).records

    assert len(visible) == 1
    assert len(project(seeded_store.records)) == 4


def test_render_csv_uses_given_order(seeded_store: RecordStore, clock: FixedClock) -> None:
    visible = derive_view(seeded_store.records, ViewParams(sort_key="date"), clock).records

    rows = list(csv.reader(render_csv(visible).splitlines()))

    assert tuple(rows[0]) == CSV_COLUMNS
    assert [r[1] for r in rows[1:]] == ["2025-01-10", "2025-03-20", "2025-04-09", "2025-05-01"]
    assert rows[1] == ["2", "2025-01-10", "beta corp", "Lee", "Invoice March", "done", "true"]


def test_render_csv_quotes_commas() -> None:
    text = render_csv([TaskRecord(id=1, title="Bolts, nuts", date="2025-01-01", client='Say "hi"')])
    row = list(csv.reader(text.splitlines()))[1]
    assert row[4] == "Bolts, nuts"
    assert row[2] == 'Say "hi"'


def test_export_csv_into_directory(tmp_path: Path, seeded_store: RecordStore) -> None:
    path = export_csv(seeded_store.records, tmp_path)

    assert path == tmp_path / DEFAULT_EXPORT_NAME
    with open(path, encoding="utf-8-sig", newline="") as f:
        rows = list(csv.reader(f))
    assert len(rows) == 5
    assert rows[3][3] == "Park"
    assert rows[3][2] == "Ćelik"


def test_export_csv_to_explicit_file(tmp_path: Path, seeded_store: RecordStore) -> None:
    target = tmp_path / "nested" / "out.csv"
    assert export_csv(seeded_store.records[:1], target) == target
    assert not target.with_suffix(".csv.tmp").exists()


def test_export_csv_failed_replace_leaves_no_temp_file(
    tmp_path: Path, seeded_store: RecordStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    target = tmp_path / "out.csv"

    def boom(src, dst):
        raise OSError("rename failed")

    monkeypatch.setattr("request_tracker.export.csv_export.os.replace", boom)

    with pytest.raises(OSError):
        export_csv(seeded_store.records, target)

    assert not target.exists()
    assert not target.with_suffix(".csv.tmp").exists()
