"""
Append-only event log for external observers and indexers.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from ..core.types import Event, RewardEvent
from .journal import Journal


class EventLog:
    def __init__(self, journal: Optional[Journal] = None) -> None:
        self._entries: List[RewardEvent] = []
        self._journal = journal if journal is not None else Journal()

    def bind(self, journal: Journal) -> None:
        self._journal = journal

    def emit(self, kind: Event, asset_index: int, **data: Any) -> RewardEvent:
        entry = RewardEvent(kind=kind, asset_index=asset_index, data=data)
        self._entries.append(entry)
        self._journal.record(self._entries.pop)
        return entry

    def entries(self, kind: Optional[Event] = None) -> Tuple[RewardEvent, ...]:
        if kind is None:
            return tuple(self._entries)
        return tuple(e for e in self._entries if e.kind == kind)

    def __len__(self) -> int:
        return len(self._entries)
