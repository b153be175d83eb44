"""
Collaborator interfaces consumed by the distributor.

The balance ledger, the access-control gate and the reward transfer mechanism
live outside the reward accounting core; these protocols are the whole surface
the core relies on.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from .core.types import AssetId, Holder


class BalanceChangeListener(Protocol):
    def before_balance_change(self, *holders: Optional[Holder]) -> None:
        """Called synchronously before the ledger commits a balance mutation.

        ``None`` entries stand for the mint source / burn destination.
        """
        ...


class BalanceLedger(Protocol):
    def balance_of(self, holder: Holder) -> int: ...

    def total_supply(self) -> int: ...

    def subscribe(self, listener: BalanceChangeListener) -> None: ...


class AccessGate(Protocol):
    """Decides admin calls.

    A gate that consumes state while authorizing (a nonce) may also expose
    ``release(caller)``; it is called when the authorized operation rolls back.
    """

    def is_authorized(self, caller: Any, request: Mapping[str, Any]) -> bool: ...


class RewardTransfer(Protocol):
    def transfer_out(self, asset: AssetId, recipient: Holder, amount: int) -> None:
        """Move ``amount`` of ``asset`` to ``recipient`` or raise without moving anything."""
        ...


class Clock(Protocol):
    def __call__(self) -> int: ...
