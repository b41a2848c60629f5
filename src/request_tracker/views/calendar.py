# src/request_tracker/views/calendar.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..records.models import TaskRecord


@dataclass(slots=True, frozen=True)
class CalendarEntry:
    label: str
    date: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.label, "date": self.date}


def calendar_label(record: TaskRecord) -> str:
    return f"{record.title} ({record.client}/{record.owner})"


def project(records: Iterable[TaskRecord]) -> list[CalendarEntry]:
    """
    One calendar entry per record, in the order given.

    The calendar always shows the full store; search, filter and sort do not apply.
    """
    return [CalendarEntry(label=calendar_label(r), date=r.date) for r in records]
