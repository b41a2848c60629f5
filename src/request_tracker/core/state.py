# src/request_tracker/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..records.store import RecordStore
from ..views.engine import ViewParams, ViewResult, derive_view
from .ports import Clock, SystemClock


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    store: RecordStore
    view: ViewParams = field(default_factory=ViewParams)
    clock: Clock = field(default_factory=SystemClock)

    def current_view(self) -> ViewResult:
        """Recompute the visible set; never cached because urgency depends on today."""
        return derive_view(self.store.records, self.view, self.clock)
