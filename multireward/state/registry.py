"""
Fixed-capacity registry of reward assets.

Indices are assigned in registration order and never reused. Registering the
same asset twice yields two independent accounting slots; callers must avoid
duplicates themselves.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from ..core.errors import CapacityExceeded, UnknownRewardAsset
from ..core.types import MAX_REWARD_ASSETS, AssetId, RegisteredAsset
from .journal import Journal


class RewardRegistry:
    def __init__(self, capacity: int = MAX_REWARD_ASSETS, journal: Optional[Journal] = None) -> None:
        if not isinstance(capacity, int) or isinstance(capacity, bool):
            raise TypeError("capacity must be an int")
        if not 1 <= capacity <= MAX_REWARD_ASSETS:
            raise ValueError(f"capacity must be in [1, {MAX_REWARD_ASSETS}]: {capacity}")
        self._capacity = capacity
        self._assets: List[AssetId] = []
        self._journal = journal if journal is not None else Journal()

    def bind(self, journal: Journal) -> None:
        self._journal = journal

    @property
    def capacity(self) -> int:
        return self._capacity

    def register(self, asset: AssetId) -> int:
        """
        Append ``asset`` and return its index.

        Raises:
            CapacityExceeded: The registry is full.
        """
        if not isinstance(asset, str) or not asset:
            raise TypeError("asset must be a non-empty str")
        if len(self._assets) >= self._capacity:
            raise CapacityExceeded(f"reward asset registry is full ({self._capacity})")
        self._assets.append(asset)
        self._journal.record(self._assets.pop)
        return len(self._assets) - 1

    def asset(self, index: int) -> AssetId:
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(self._assets):
            raise UnknownRewardAsset(f"no reward asset at index {index!r}")
        return self._assets[index]

    def indices(self) -> range:
        return range(len(self._assets))

    def entries(self) -> Tuple[RegisteredAsset, ...]:
        return tuple(RegisteredAsset(index=i, asset=a) for i, a in enumerate(self._assets))

    def __len__(self) -> int:
        return len(self._assets)
