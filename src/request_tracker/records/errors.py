# src/request_tracker/records/errors.py

from __future__ import annotations

from enum import StrEnum


class TrackerError(Exception):
    """Base class for errors raised by the record engine."""


class ValidationErrorKind(StrEnum):
    MISSING_FIELD = "missing_field"
    INVALID_DATE_FORMAT = "invalid_date_format"
    INVALID_STATUS = "invalid_status"


class ValidationError(TrackerError, ValueError):
    """A draft was rejected; the collection was not touched."""

    def __init__(self, kind: ValidationErrorKind, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.field = field
        self.message = message


class IndexOutOfRange(TrackerError, IndexError):
    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"No record at position {index} (store holds {size}).")
        self.index = index
        self.size = size


class RecordNotFound(TrackerError, KeyError):
    def __init__(self, record_id: int) -> None:
        super().__init__(record_id)
        self.record_id = record_id

    def __str__(self) -> str:
        return f"Record id {self.record_id} not found."
