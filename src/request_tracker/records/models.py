# src/request_tracker/records/models.py

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


class TaskStatus(StrEnum):
    """
    Workflow status of a request.

    Notes:
    - independent of TaskRecord.completed; nothing derives one from the other
    - labels are display-only, the stored value is always the enum value
    """

    IN_PROGRESS = "in_progress"
    PENDING = "pending"
    ON_HOLD = "on_hold"
    DONE = "done"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @classmethod
    def parse(cls, raw: str | None) -> TaskStatus | None:
        """Accept enum values, display labels and legacy localized labels."""
        if raw is None:
            return None
        key = str(raw).strip()
        if not key:
            return None
        try:
            return cls(key.lower())
        except ValueError:
            pass
        for status, label in STATUS_LABELS.items():
            if key.lower() == label.lower():
                return status
        return LEGACY_STATUS_LABELS.get(key)


STATUS_LABELS: dict[TaskStatus, str] = {
    TaskStatus.IN_PROGRESS: "In progress",
    TaskStatus.PENDING: "Pending",
    TaskStatus.ON_HOLD: "On hold",
    TaskStatus.DONE: "Done",
}

# Blobs written by the first version of the tracker stored the Korean labels.
LEGACY_STATUS_LABELS: dict[str, TaskStatus] = {
    "진행중": TaskStatus.IN_PROGRESS,
    "대기": TaskStatus.PENDING,
    "보류": TaskStatus.ON_HOLD,
    "완료": TaskStatus.DONE,
}


@dataclass(slots=True)
class TaskRecord:
    id: int
    title: str
    date: str
    client: str = ""
    owner: str = ""
    status: TaskStatus = TaskStatus.IN_PROGRESS
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass(slots=True)
class TaskDraft:
    """
    What the add form submits.

    Every field is optional here; RecordStore.add decides what is acceptable.
    """

    title: str | None = None
    date: str | None = None
    client: str | None = None
    owner: str | None = None
    status: TaskStatus | str | None = None


def is_valid_date(value: str) -> bool:
    """Strict YYYY-MM-DD shape check (no calendar validation)."""
    return bool(DATE_PATTERN.fullmatch(value))
