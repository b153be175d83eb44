"""
Undo journal shared by the distributor's tables.

Tables record the previous value of every key they overwrite while a journal
is open. `rollback()` replays those records in reverse, so a failed operation
leaves no partial writes behind regardless of how many tables it touched.
"""

from __future__ import annotations

from typing import Callable, Dict, Generic, Hashable, Iterator, List, Optional, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


class Journal:
    """Ordered list of undo callbacks for the currently open operation."""

    def __init__(self) -> None:
        self._undo: List[Callable[[], None]] = []
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def begin(self) -> None:
        if self._open:
            raise RuntimeError("journal already open")
        self._undo.clear()
        self._open = True

    def record(self, undo: Callable[[], None]) -> None:
        if self._open:
            self._undo.append(undo)

    def commit(self) -> None:
        self._undo.clear()
        self._open = False

    def rollback(self) -> int:
        """Undo every recorded write; returns the number of writes undone."""
        undone = len(self._undo)
        while self._undo:
            self._undo.pop()()
        self._open = False
        return undone


class JournaledTable(Generic[K, V]):
    """
    Small key-value table whose writes are undoable through a `Journal`.

    Values are expected to be immutable records; the table never copies them.
    """

    def __init__(self, journal: Optional[Journal] = None) -> None:
        self._rows: Dict[K, V] = {}
        self._journal = journal if journal is not None else Journal()

    def bind(self, journal: Journal) -> None:
        self._journal = journal

    def _lookup(self, key: K, default: V) -> V:
        return self._rows.get(key, default)

    def _store(self, key: K, value: V) -> None:
        previous = self._rows.get(key, _MISSING)
        self._journal.record(lambda: self._restore(key, previous))
        self._rows[key] = value

    def _restore(self, key: K, previous: object) -> None:
        if previous is _MISSING:
            self._rows.pop(key, None)
        else:
            self._rows[key] = previous  # type: ignore[assignment]

    def load(self, key: K, value: V) -> None:
        """Bulk restore outside any operation; no validation."""
        self._rows[key] = value

    def items(self) -> Iterator[Tuple[K, V]]:
        # Copy so callers may write while iterating.
        return iter(list(self._rows.items()))

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, key: object) -> bool:
        return key in self._rows
