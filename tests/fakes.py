# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date


@dataclass(slots=True)
class FixedClock:
    """Clock pinned to a given day so urgency is deterministic."""

    day: date

    def today(self) -> date:
        return self.day


@dataclass(slots=True)
class RecordingBackend:
    """
    In-memory BlobBackend that keeps every write for assertions.

    - `blobs` holds the latest value per key
    - `writes` holds (key, blob) in call order
    - `fail_writes` makes write() raise, to test rollback
    """

    blobs: dict[str, str] = field(default_factory=dict)
    writes: list[tuple[str, str]] = field(default_factory=list)
    fail_writes: bool = False

    def read(self, key: str) -> str | None:
        return self.blobs.get(key)

    def write(self, key: str, blob: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.writes.append((key, blob))
        self.blobs[key] = blob


class ExplodingBackend:
    """Backend whose reads always fail."""

    def read(self, key: str) -> str | None:
        raise OSError("backend unavailable")

    def write(self, key: str, blob: str) -> None:
        raise OSError("backend unavailable")
