"""
Reference balance ledger for the reward-bearing asset.

Implements HolderLedger[Holder] -> Amount with mint / burn / transfer /
transfer_from and a pre-mutation listener hook. Every mutation is validated
first, then announced to listeners with the PRE-mutation balances still in
place, then committed.
"""

from typing import Dict, List, Optional, Tuple

from ..core.types import Holder
from ..interfaces import BalanceChangeListener


Amount = int  # Non-negative integer (arbitrary precision)


def _require_amount(amount: Amount) -> Amount:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError(f"amount must be an int, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {amount}")
    return amount


class HolderLedger:
    """
    Balance table mapping holder -> amount, plus total supply and allowances.

    Zero balances are dropped to keep the table sparse.
    """

    def __init__(self):
        self._balances: Dict[Holder, Amount] = {}
        self._allowances: Dict[Tuple[Holder, Holder], Amount] = {}
        self._total_supply: Amount = 0
        self._listeners: List[BalanceChangeListener] = []

    def subscribe(self, listener: BalanceChangeListener) -> None:
        """Register a listener notified before every balance mutation."""
        self._listeners.append(listener)

    def balance_of(self, holder: Holder) -> Amount:
        """Get balance for holder. Returns 0 if not found."""
        return self._balances.get(holder, 0)

    def total_supply(self) -> Amount:
        return self._total_supply

    def allowance(self, owner: Holder, spender: Holder) -> Amount:
        return self._allowances.get((owner, spender), 0)

    def approve(self, owner: Holder, spender: Holder, amount: Amount) -> None:
        _require_amount(amount)
        if amount == 0:
            self._allowances.pop((owner, spender), None)
        else:
            self._allowances[(owner, spender)] = amount

    def mint(self, holder: Holder, amount: Amount) -> None:
        """
        Create ``amount`` units for ``holder``.

        Raises:
            ValueError: If amount is negative
        """
        _require_amount(amount)
        self._notify(None, holder)
        self._set(holder, self.balance_of(holder) + amount)
        self._total_supply += amount

    def burn(self, holder: Holder, amount: Amount) -> None:
        """
        Destroy ``amount`` units held by ``holder``.

        Raises:
            ValueError: If amount is negative or exceeds the balance
        """
        _require_amount(amount)
        current = self.balance_of(holder)
        if amount > current:
            raise ValueError(f"Insufficient balance: {current} < {amount}")
        self._notify(holder, None)
        self._set(holder, current - amount)
        self._total_supply -= amount

    def transfer(self, src: Holder, dst: Holder, amount: Amount) -> None:
        """
        Move ``amount`` from ``src`` to ``dst``.

        Raises:
            ValueError: If amount is negative or exceeds the source balance
        """
        _require_amount(amount)
        src_balance = self.balance_of(src)
        if amount > src_balance:
            raise ValueError(f"Insufficient balance: {src_balance} < {amount}")
        self._notify(src, dst)
        self._set(src, src_balance - amount)
        self._set(dst, self.balance_of(dst) + amount)

    def transfer_from(self, spender: Holder, src: Holder, dst: Holder, amount: Amount) -> None:
        """
        Move ``amount`` from ``src`` to ``dst`` on behalf of ``spender``.

        Raises:
            ValueError: If the allowance or the source balance is insufficient
        """
        _require_amount(amount)
        allowed = self.allowance(src, spender)
        if amount > allowed:
            raise ValueError(f"Insufficient allowance: {allowed} < {amount}")
        src_balance = self.balance_of(src)
        if amount > src_balance:
            raise ValueError(f"Insufficient balance: {src_balance} < {amount}")
        self._notify(src, dst)
        self.approve(src, spender, allowed - amount)
        self._set(src, src_balance - amount)
        self._set(dst, self.balance_of(dst) + amount)

    def get_all_balances(self) -> Dict[Holder, Amount]:
        return dict(self._balances)

    def _notify(self, *holders: Optional[Holder]) -> None:
        for listener in self._listeners:
            listener.before_balance_change(*holders)

    def _set(self, holder: Holder, amount: Amount) -> None:
        if amount == 0:
            self._balances.pop(holder, None)
        else:
            self._balances[holder] = amount

    def __repr__(self) -> str:
        return f"HolderLedger({len(self._balances)} holders, supply={self._total_supply})"
