"""
Global accumulator table: reward asset index -> `Accumulator`.
"""

from __future__ import annotations

from ..core.types import Accumulator
from .journal import JournaledTable

_ZERO = Accumulator()


class AccumulatorTable(JournaledTable[int, Accumulator]):
    def get(self, index: int) -> Accumulator:
        return self._lookup(index, _ZERO)

    def put(self, index: int, acc: Accumulator) -> None:
        self._store(index, acc)
