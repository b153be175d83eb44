"""
Registry & admin surface of the multi-reward distributor.

`RewardDistributor` wires the collaborators together:
- subscribes the settlement engine to the balance ledger's pre-mutation hook,
- gates registration and schedule configuration through the access gate,
  inside the same engine operation as the change it authorizes,
- exposes the two claim entry points and the read-only projections.

Claim entry points:
- `claim(caller, index, recipient)`: the caller claims its own full owed
  balance and may direct it to any recipient.
- `claim_for(index, holder)`: anyone may trigger it; the payout always goes
  to ``holder``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from ..config import DistributorConfig
from ..core.errors import Unauthorized
from ..core.types import AssetId, Holder, RegisteredAsset, Schedule
from ..engine.settlement import SettlementEngine
from ..interfaces import AccessGate, BalanceLedger, RewardTransfer
from .access import OwnerGate
from .clock import SystemClock

logger = logging.getLogger(__name__)


class RewardDistributor:
    def __init__(
        self,
        ledger: BalanceLedger,
        transfer: RewardTransfer,
        *,
        gate: Optional[AccessGate] = None,
        config: Optional[DistributorConfig] = None,
        clock: Optional[Callable[[], int]] = None,
        engine: Optional[SettlementEngine] = None,
    ) -> None:
        self.config = config if config is not None else DistributorConfig()
        if gate is None:
            if self.config.owner is None:
                raise ValueError("either an access gate or config.owner is required")
            gate = OwnerGate(self.config.owner)
        self._gate = gate

        if engine is None:
            engine = SettlementEngine(
                ledger,
                transfer,
                clock=clock if clock is not None else SystemClock(),
                capacity=self.config.max_reward_assets,
                allow_backdated_schedules=self.config.allow_backdated_schedules,
                check_invariants=self.config.check_invariants,
            )
        elif engine.ledger is not ledger:
            raise ValueError("engine is bound to a different ledger")
        self.engine = engine
        ledger.subscribe(self.engine)

    def _authorize(self, caller: Any, action: str, args: Dict[str, Any]) -> None:
        """Authorize ``caller`` inside the open engine operation.

        Whatever the gate consumed (a nonce) is handed back if the operation
        rolls back.
        """
        request = {"action": action, "args": args}
        if not self._gate.is_authorized(caller, request):
            logger.warning(
                "Unauthorized admin call",
                extra={"event": "rewards.unauthorized", "action": action},
            )
            raise Unauthorized(f"caller is not authorized for {action}")
        release = getattr(self._gate, "release", None)
        if release is not None:
            self.engine.record_undo(lambda: release(caller))

    # -- Admin -----------------------------------------------------------------

    def register_reward_asset(self, caller: Any, asset: AssetId) -> int:
        """
        Raises:
            Unauthorized: The gate rejected ``caller``.
            CapacityExceeded: All slots are in use.
        """
        with self.engine.operation("register_reward_asset"):
            self._authorize(caller, "register_reward_asset", {"asset": asset})
            return self.engine.register_asset(asset)

    def configure_schedule(self, caller: Any, index: int, start: int, end: int, total_rewards: int) -> Schedule:
        """
        Raises:
            Unauthorized: The gate rejected ``caller``.
            InvalidInterval: ``start >= end`` (or a disallowed backdated start).
            ScheduleStillActive: The current schedule window contains now.
        """
        with self.engine.operation("configure_schedule"):
            self._authorize(
                caller,
                "configure_schedule",
                {"index": index, "start": start, "end": end, "total_rewards": total_rewards},
            )
            return self.engine.set_schedule(index, start, end, total_rewards)

    # -- Claims ----------------------------------------------------------------

    def claim(self, caller: Holder, index: int, recipient: Holder) -> int:
        return self.engine.claim_all(index, caller, recipient)

    def claim_for(self, index: int, holder: Holder) -> int:
        return self.engine.claim_all(index, holder, holder)

    # -- Views -----------------------------------------------------------------

    def current_reward_per_unit(self, index: int) -> int:
        return self.engine.current_reward_per_unit(index)

    def current_owed(self, index: int, holder: Holder) -> int:
        return self.engine.current_owed(index, holder)

    def reward_assets(self) -> Tuple[RegisteredAsset, ...]:
        return self.engine.reward_assets()

    def schedule(self, index: int) -> Schedule:
        return self.engine.schedule(index)
