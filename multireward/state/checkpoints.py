"""
User ledger table: (reward asset index, holder) -> `UserCheckpoint`.

Rows are created lazily on first settlement and never removed.
"""

from __future__ import annotations

from typing import Dict, Tuple

from ..core.types import Holder, UserCheckpoint
from .journal import JournaledTable

_ZERO = UserCheckpoint()


class CheckpointTable(JournaledTable[Tuple[int, Holder], UserCheckpoint]):
    def get(self, index: int, holder: Holder) -> UserCheckpoint:
        return self._lookup((index, holder), _ZERO)

    def put(self, index: int, holder: Holder, cp: UserCheckpoint) -> None:
        self._store((index, holder), cp)

    def get_for_asset(self, index: int) -> Dict[Holder, UserCheckpoint]:
        """All stored checkpoints of one reward asset."""
        return {holder: cp for (i, holder), cp in self.items() if i == index}

    def __repr__(self) -> str:
        return f"CheckpointTable({len(self)} entries)"
