# src/request_tracker/export/csv_export.py

from __future__ import annotations

import contextlib
import csv
import io
import logging
import os
from collections.abc import Iterable
from pathlib import Path

from ..records.models import TaskRecord

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_NAME = "request_list.csv"
CSV_COLUMNS = ("id", "date", "client", "owner", "title", "status", "completed")


def _row(record: TaskRecord) -> list[str]:
    return [
        str(record.id),
        record.date,
        record.client,
        record.owner,
        record.title,
        record.status.value,
        "true" if record.completed else "false",
    ]


def write_csv(records: Iterable[TaskRecord], stream) -> int:
    """Write header + one row per record to a text stream. Returns the row count."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    n = 0
    for record in records:
        writer.writerow(_row(record))
        n += 1
    return n


def render_csv(records: Iterable[TaskRecord]) -> str:
    buf = io.StringIO()
    write_csv(records, buf)
    return buf.getvalue()


def export_csv(records: Iterable[TaskRecord], destination: str | Path) -> Path:
    """
    Export records (already filtered and sorted by the caller) to `destination`.

    A directory destination gets DEFAULT_EXPORT_NAME inside it.
    The file is written with a BOM so spreadsheet apps detect UTF-8.
    """
    path = Path(destination)
    if path.is_dir():
        path = path / DEFAULT_EXPORT_NAME
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        with open(tmp, "w", encoding="utf-8-sig", newline="") as f:
            n = write_csv(records, f)
        os.replace(tmp, path)
    except OSError:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise
    logger.info("Exported %d records to %s", n, path)
    return path
