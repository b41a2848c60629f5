# src/request_tracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The record store and the view engine depend on Protocols instead of concrete
implementations, so storage and time can be swapped out in tests.
"""

from datetime import date
from typing import Protocol


class BlobBackend(Protocol):
    """
    Opaque key-value text store.

    read() returns None when nothing was ever written under `key`.
    write() replaces the previous blob entirely.
    """

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, blob: str) -> None: ...


class Clock(Protocol):
    """Source of "today" for urgency checks."""

    def today(self) -> date: ...


class SystemClock:
    """Wall-clock date in the local timezone."""

    def today(self) -> date:
        return date.today()
