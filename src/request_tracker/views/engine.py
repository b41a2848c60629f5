# src/request_tracker/views/engine.py

from __future__ import annotations

"""
View engine.

Pure derivation over the store's records plus transient view parameters:
- search (case-insensitive substring over "title client owner"),
- completion filter,
- stable sort,
- per-row urgency and aggregate statistics over the visible set.

Nothing here mutates records or touches persistence. Urgency depends on
"today", so results must be recomputed on every render.
"""

import math
import unicodedata
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Any

from ..core.ports import Clock, SystemClock
from ..records.models import TaskRecord, TaskStatus


class FilterStatus(StrEnum):
    ALL = "all"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"


class SortKey(StrEnum):
    DATE = "date"
    CLIENT = "client"
    STATUS = "status"


class ActiveView(StrEnum):
    CALENDAR = "calendar"
    ALL = "all"
    STATUS = "status"


@dataclass(slots=True)
class ViewParams:
    """Transient view inputs. Changing them never touches the store."""

    search_term: str = ""
    filter_status: FilterStatus = FilterStatus.ALL
    sort_key: str = SortKey.DATE.value
    active_view: ActiveView = ActiveView.CALENDAR

    def set_search_term(self, term: str | None) -> None:
        self.search_term = term or ""

    def set_filter_status(self, value: FilterStatus | str) -> None:
        try:
            self.filter_status = FilterStatus(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown filter {value!r}; use one of: " + ", ".join(f.value for f in FilterStatus)
            ) from None

    def set_sort_key(self, value: SortKey | str) -> None:
        # Unknown keys are allowed and mean "keep store order".
        self.sort_key = str(value).strip().lower()

    def set_active_view(self, value: ActiveView | str) -> None:
        try:
            self.active_view = ActiveView(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown view {value!r}; use one of: " + ", ".join(v.value for v in ActiveView)
            ) from None


@dataclass(slots=True, frozen=True)
class ViewStats:
    total_count: int
    completed_count: int
    completion_rate: int


@dataclass(slots=True, frozen=True)
class ViewRow:
    record: TaskRecord
    position: int  # index in the store, not in the visible list
    urgent: bool


@dataclass(slots=True, frozen=True)
class ViewResult:
    rows: list[ViewRow] = field(default_factory=list)
    stats: ViewStats = field(default_factory=lambda: ViewStats(0, 0, 0))

    @property
    def records(self) -> list[TaskRecord]:
        return [row.record for row in self.rows]


# ---- pipeline steps ----


def matches_search(record: TaskRecord, term: str) -> bool:
    if not term:
        return True
    haystack = f"{record.title} {record.client} {record.owner}".lower()
    return term.lower() in haystack


def matches_filter(record: TaskRecord, filter_status: FilterStatus | str) -> bool:
    fs = FilterStatus(filter_status)
    if fs is FilterStatus.COMPLETED:
        return record.completed
    if fs is FilterStatus.INCOMPLETE:
        return not record.completed
    return True


def parse_date(value: str) -> date | None:
    """Calendar date for a YYYY-MM-DD string, or None if it is not a real date."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def collation_key(text: str) -> tuple[str, str]:
    """
    Locale-style ordering key: case and accents are ignored first,
    the raw text only breaks ties.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return folded, text


def _date_sort_key(record: TaskRecord) -> tuple[int, date]:
    parsed = parse_date(record.date)
    if parsed is None:
        return 1, date.min
    return 0, parsed


def _sort_key_fn(sort_key: str) -> Callable[[TaskRecord], Any] | None:
    if sort_key == SortKey.DATE:
        return _date_sort_key
    if sort_key == SortKey.CLIENT:
        return lambda r: collation_key(r.client)
    if sort_key == SortKey.STATUS:
        return lambda r: collation_key(r.status.value)
    return None


def sort_records(records: Iterable[TaskRecord], sort_key: str) -> list[TaskRecord]:
    """Stable sort; unknown keys keep the incoming order."""
    items = list(records)
    key_fn = _sort_key_fn(sort_key)
    return sorted(items, key=key_fn) if key_fn else items


def is_due_soon(record: TaskRecord, today: date) -> bool:
    """Due today or tomorrow, and not yet completed."""
    if record.completed:
        return False
    due = parse_date(record.date)
    if due is None:
        return False
    return 0 <= (due - today).days <= 1


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_stats(records: Sequence[TaskRecord]) -> ViewStats:
    total = len(records)
    done = sum(1 for r in records if r.completed)
    rate = _round_half_up(done / total * 100) if total else 0
    return ViewStats(total_count=total, completed_count=done, completion_rate=rate)


# ---- entry points ----


def derive_view(
    records: Sequence[TaskRecord],
    params: ViewParams | None = None,
    clock: Clock | None = None,
) -> ViewResult:
    """
    Run search -> filter -> sort over `records` (store order) and
    attach urgency plus statistics for the visible set.
    """
    params = params or ViewParams()
    today = (clock or SystemClock()).today()

    indexed = [
        (pos, rec)
        for pos, rec in enumerate(records)
        if matches_search(rec, params.search_term) and matches_filter(rec, params.filter_status)
    ]
    key_fn = _sort_key_fn(params.sort_key)
    if key_fn is not None:
        indexed.sort(key=lambda pair: key_fn(pair[1]))

    rows = [ViewRow(record=rec, position=pos, urgent=is_due_soon(rec, today)) for pos, rec in indexed]
    return ViewResult(rows=rows, stats=compute_stats([row.record for row in rows]))


def visible_records(
    records: Sequence[TaskRecord],
    search_term: str = "",
    filter_status: FilterStatus | str = FilterStatus.ALL,
    sort_key: str = SortKey.DATE.value,
) -> tuple[list[TaskRecord], ViewStats]:
    """Functional form of the pipeline: (visible records, stats)."""
    params = ViewParams()
    params.set_search_term(search_term)
    params.set_filter_status(filter_status)
    params.set_sort_key(sort_key)
    result = derive_view(records, params)
    return result.records, result.stats


def group_by_status(rows: Iterable[ViewRow]) -> dict[TaskStatus, list[ViewRow]]:
    """Bucket visible rows per status, in enum order, keeping row order inside each bucket."""
    groups: dict[TaskStatus, list[ViewRow]] = {s: [] for s in TaskStatus}
    for row in rows:
        groups[row.record.status].append(row)
    return groups
