"""
In-memory reward treasury: the transfer-out collaborator.

Holds per-asset funded balances and pays claims out of them. A payout either
completes in full or raises `TransferFailed` without moving anything.
"""

from __future__ import annotations

from typing import Dict, Set, Tuple

from ..core.errors import TransferFailed
from ..core.types import AssetId, Holder


class RewardTreasury:
    def __init__(self) -> None:
        self._funds: Dict[AssetId, int] = {}
        self._paid: Dict[Tuple[Holder, AssetId], int] = {}
        self._blocked: Set[Holder] = set()

    def fund(self, asset: AssetId, amount: int) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise ValueError(f"amount must be a non-negative int: {amount!r}")
        self._funds[asset] = self._funds.get(asset, 0) + amount

    def balance(self, asset: AssetId) -> int:
        return self._funds.get(asset, 0)

    def block(self, recipient: Holder) -> None:
        """Make every future payout to ``recipient`` fail (recipient rejection)."""
        self._blocked.add(recipient)

    def unblock(self, recipient: Holder) -> None:
        self._blocked.discard(recipient)

    def transfer_out(self, asset: AssetId, recipient: Holder, amount: int) -> None:
        if recipient in self._blocked:
            raise TransferFailed(f"recipient {recipient!r} rejected {asset}")
        available = self._funds.get(asset, 0)
        if amount > available:
            raise TransferFailed(f"insufficient {asset} in treasury: {available} < {amount}")
        self._funds[asset] = available - amount
        key = (recipient, asset)
        self._paid[key] = self._paid.get(key, 0) + amount

    def paid_to(self, recipient: Holder, asset: AssetId) -> int:
        return self._paid.get((recipient, asset), 0)

    def __repr__(self) -> str:
        return f"RewardTreasury({len(self._funds)} assets, {len(self._paid)} payouts)"
