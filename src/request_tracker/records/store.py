# src/request_tracker/records/store.py

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from ..core.ports import BlobBackend
from .errors import IndexOutOfRange, RecordNotFound, ValidationError, ValidationErrorKind
from .models import TaskDraft, TaskRecord, TaskStatus, is_valid_date

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "events"


def dump_records(records: Iterable[TaskRecord]) -> str:
    """Serialize a collection into the persisted blob format (JSON list)."""
    return json.dumps([r.to_dict() for r in records], ensure_ascii=False)


def parse_records(blob: str | None) -> list[TaskRecord]:
    """
    Restore records from a blob.

    - absent / empty / unparseable blob -> []
    - entries that are not objects or lack a text title/date are skipped
    - missing or duplicate ids are reassigned after the highest valid id
    """
    if not blob:
        return []
    try:
        data = json.loads(blob)
    except ValueError:
        logger.warning("Persisted records are not valid JSON; starting empty.")
        return []
    if not isinstance(data, list):
        logger.warning("Persisted records are not a list (got %s); starting empty.", type(data).__name__)
        return []

    parsed: list[tuple[Any, TaskRecord]] = []
    for pos, raw in enumerate(data):
        if not isinstance(raw, dict):
            logger.warning("Skipping persisted entry #%d: not an object.", pos)
            continue
        title = raw.get("title")
        date_s = raw.get("date")
        if not isinstance(title, str) or not title or not isinstance(date_s, str):
            logger.warning("Skipping persisted entry #%d: missing title or date.", pos)
            continue

        status = TaskStatus.parse(raw.get("status"))
        if status is None:
            logger.warning("Persisted entry #%d has unknown status %r; using in_progress.", pos, raw.get("status"))
            status = TaskStatus.IN_PROGRESS

        completed = raw.get("completed")
        parsed.append(
            (
                raw.get("id"),
                TaskRecord(
                    id=0,
                    title=title,
                    date=date_s,
                    client=_text(raw.get("client")),
                    owner=_text(raw.get("owner")),
                    status=status,
                    completed=completed if isinstance(completed, bool) else False,
                ),
            )
        )

    seen: set[int] = set()
    for raw_id, rec in parsed:
        if isinstance(raw_id, int) and not isinstance(raw_id, bool) and raw_id > 0 and raw_id not in seen:
            rec.id = raw_id
            seen.add(raw_id)

    next_id = max(seen, default=0) + 1
    for _, rec in parsed:
        if rec.id == 0:
            rec.id = next_id
            next_id += 1

    return [rec for _, rec in parsed]


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class RecordStore:
    """
    Ordered, persisted collection of task records.

    - insertion order is the only order the store knows about
    - every mutation writes the whole collection through the backend
    - ids are stable; positions shift when earlier records are deleted

    Records handed out are copies; mutate only through the store.
    """

    def __init__(self, backend: BlobBackend, *, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._backend = backend
        self._key = key
        self._records: list[TaskRecord] = []
        self._next_id = 1

    # ---- persistence ----

    def load(self) -> list[TaskRecord]:
        """Replace the in-memory collection with the persisted one."""
        try:
            blob = self._backend.read(self._key)
        except Exception:
            logger.exception("Failed to read persisted records key=%s; starting empty.", self._key)
            blob = None

        self._records = parse_records(blob)
        self._next_id = max((r.id for r in self._records), default=0) + 1
        logger.info("RecordStore loaded key=%s total=%d", self._key, len(self._records))
        return self.records_list()

    def save(self, records: Iterable[TaskRecord] | None = None) -> None:
        """
        Persist the whole collection, replacing the previous blob.

        With `records`, that collection replaces the in-memory one once the
        write succeeded; without, the store's own collection is written.
        """
        if records is None:
            self._backend.write(self._key, dump_records(self._records))
            return

        incoming = [replace(r) for r in records]
        self._backend.write(self._key, dump_records(incoming))
        self._records = incoming
        self._next_id = max(self._next_id, max((r.id for r in incoming), default=0) + 1)

    # ---- queries ----

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> tuple[TaskRecord, ...]:
        return tuple(replace(r) for r in self._records)

    def records_list(self) -> list[TaskRecord]:
        return [replace(r) for r in self._records]

    def index_of(self, record_id: int) -> int:
        for idx, rec in enumerate(self._records):
            if rec.id == record_id:
                return idx
        raise RecordNotFound(record_id)

    def get(self, record_id: int) -> TaskRecord:
        return replace(self._records[self.index_of(record_id)])

    # ---- mutations ----

    def add(self, draft: TaskDraft) -> TaskRecord:
        """
        Validate a draft and append it.

        Raises ValidationError (collection untouched) when:
        - title or date is missing        -> MISSING_FIELD
        - date is not exactly YYYY-MM-DD  -> INVALID_DATE_FORMAT
        - status is not a known status    -> INVALID_STATUS
        """
        title = (draft.title or "").strip()
        date_s = draft.date or ""

        if not title or not date_s:
            missing = "title" if not title else "date"
            raise ValidationError(
                ValidationErrorKind.MISSING_FIELD,
                "Please fill in all required fields (title and date).",
                field=missing,
            )
        if not is_valid_date(date_s):
            raise ValidationError(
                ValidationErrorKind.INVALID_DATE_FORMAT,
                f"Malformed date {date_s!r}; expected YYYY-MM-DD (e.g. 2025-04-08).",
                field="date",
            )

        if draft.status is None or (isinstance(draft.status, str) and not draft.status.strip()):
            status = TaskStatus.IN_PROGRESS
        else:
            parsed = TaskStatus.parse(draft.status)
            if parsed is None:
                raise ValidationError(
                    ValidationErrorKind.INVALID_STATUS,
                    f"Unknown status {draft.status!r}; use one of: "
                    + ", ".join(s.value for s in TaskStatus),
                    field="status",
                )
            status = parsed

        record = TaskRecord(
            id=self._allocate_id(),
            title=title,
            date=date_s,
            client=(draft.client or "").strip(),
            owner=(draft.owner or "").strip(),
            status=status,
            completed=False,
        )
        self._records.append(record)
        try:
            self.save()
        except Exception:
            self._records.pop()
            raise
        logger.debug("Record added id=%s date=%s status=%s", record.id, record.date, record.status.value)
        return replace(record)

    def delete(self, index: int) -> TaskRecord:
        """Remove the record at `index`; later records shift down by one."""
        self._check_index(index)
        record = self._records.pop(index)
        try:
            self.save()
        except Exception:
            self._records.insert(index, record)
            raise
        logger.debug("Record deleted id=%s position=%d", record.id, index)
        return record

    def toggle_completed(self, index: int) -> TaskRecord:
        """Flip `completed` at `index`. `status` is left alone."""
        self._check_index(index)
        record = self._records[index]
        record.completed = not record.completed
        try:
            self.save()
        except Exception:
            record.completed = not record.completed
            raise
        logger.debug("Record toggled id=%s completed=%s", record.id, record.completed)
        return replace(record)

    def delete_by_id(self, record_id: int) -> TaskRecord:
        return self.delete(self.index_of(record_id))

    def toggle_completed_by_id(self, record_id: int) -> TaskRecord:
        return self.toggle_completed(self.index_of(record_id))

    # ---- helpers ----

    def _allocate_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    def _check_index(self, index: int) -> None:
        # Negative indices are rejected rather than counted from the end.
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._records):
            raise IndexOutOfRange(index, len(self._records))
