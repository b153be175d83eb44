"""Settlement engine for the multi-reward distributor.

The engine is the only writer of the schedule, accumulator and checkpoint
tables. Every public mutation runs inside ``operation()``:

1. takes the global writer lock (re-entrant),
2. reads the clock once and reuses that instant for every refresh,
3. opens the undo journal shared by all tables and the event log,
4. checks asset/holder invariants on everything the operation touched,
5. commits, or rolls every write back and re-raises.

Settlement order is fixed: accumulator before user checkpoint.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Callable, Iterator, Optional, Set, Tuple

from ..core.accrual import accrue, build_schedule, restart, settle_user
from ..core.errors import InsufficientOwed, RewardInvariantError, TransferFailed
from ..core.fixed_point import to_u32
from ..core.invariants import check_asset, check_checkpoint
from ..core.types import (
    MAX_REWARD_ASSETS,
    Accumulator,
    AssetId,
    Event,
    Holder,
    RegisteredAsset,
    RewardEvent,
    Schedule,
    UserCheckpoint,
)
from ..interfaces import BalanceLedger, RewardTransfer
from ..state.accumulators import AccumulatorTable
from ..state.checkpoints import CheckpointTable
from ..state.events import EventLog
from ..state.journal import Journal
from ..state.registry import RewardRegistry
from ..state.schedules import ScheduleTable

logger = logging.getLogger(__name__)


class SettlementEngine:
    """Lazily-evaluated per-unit reward accounting over up to ten reward assets."""

    def __init__(
        self,
        ledger: BalanceLedger,
        transfer: RewardTransfer,
        *,
        clock: Callable[[], int],
        capacity: int = MAX_REWARD_ASSETS,
        allow_backdated_schedules: bool = True,
        check_invariants: bool = True,
        registry: Optional[RewardRegistry] = None,
        schedules: Optional[ScheduleTable] = None,
        accumulators: Optional[AccumulatorTable] = None,
        checkpoints: Optional[CheckpointTable] = None,
        events: Optional[EventLog] = None,
    ) -> None:
        self._ledger = ledger
        self._transfer = transfer
        self._clock = clock
        self._allow_backdated = allow_backdated_schedules
        self._check_invariants = check_invariants

        self._journal = Journal()
        self._registry = registry if registry is not None else RewardRegistry(capacity)
        self._schedules = schedules if schedules is not None else ScheduleTable()
        self._accumulators = accumulators if accumulators is not None else AccumulatorTable()
        self._checkpoints = checkpoints if checkpoints is not None else CheckpointTable()
        self._events = events if events is not None else EventLog()
        for table in (self._registry, self._schedules, self._accumulators, self._checkpoints, self._events):
            table.bind(self._journal)

        self._lock = threading.RLock()
        self._depth = 0
        self._now: Optional[int] = None
        self._touched_assets: Set[int] = set()
        self._touched_users: Set[Tuple[int, Holder]] = set()

    # -- Operation scope -----------------------------------------------------

    @contextmanager
    def operation(self, name: str = "operation") -> Iterator[int]:
        """Atomic operation scope; yields the operation's single clock reading."""
        with self._lock:
            if self._depth:
                # Nested call joins the outer operation and its clock reading.
                self._depth += 1
                try:
                    yield self._now  # type: ignore[misc]
                finally:
                    self._depth -= 1
                return

            now = to_u32(self._clock(), "now")
            self._journal.begin()
            self._now = now
            self._depth = 1
            try:
                yield now
                if self._check_invariants:
                    self._verify_touched()
            except BaseException as exc:
                undone = self._journal.rollback()
                logger.warning(
                    "Reward operation rolled back",
                    extra={
                        "event": "rewards.rollback",
                        "operation": name,
                        "writes_undone": undone,
                        "error": type(exc).__name__,
                    },
                )
                raise
            else:
                self._journal.commit()
            finally:
                self._depth = 0
                self._now = None
                self._touched_assets.clear()
                self._touched_users.clear()

    def _verify_touched(self) -> None:
        violations: list[str] = []
        for index in sorted(self._touched_assets):
            violations.extend(
                f"{inv}[{index}]"
                for inv in check_asset(self._schedules.get(index), self._accumulators.get(index))
            )
        for index, holder in sorted(self._touched_users):
            violations.extend(
                f"{inv}[{index}:{holder}]"
                for inv in check_checkpoint(self._checkpoints.get(index, holder), self._accumulators.get(index))
            )
        if violations:
            raise RewardInvariantError(violations)

    def record_undo(self, undo: Callable[[], None]) -> None:
        """Attach an external undo step to the open operation.

        ``undo`` runs if the operation rolls back and is dropped on commit.
        """
        if not self._depth:
            raise RuntimeError("record_undo requires an open operation")
        self._journal.record(undo)

    def _read_time(self) -> int:
        if self._now is not None:
            return self._now
        return to_u32(self._clock(), "now")

    # -- Settlement steps (caller holds the operation scope) ------------------

    def _refresh_accumulator(self, index: int, now: int) -> Accumulator:
        acc = self._accumulators.get(index)
        refreshed = accrue(acc, self._schedules.get(index), self._ledger.total_supply(), now)
        if refreshed.last_updated == acc.last_updated:
            return acc
        self._accumulators.put(index, refreshed)
        self._touched_assets.add(index)
        self._events.emit(Event.ACCUMULATOR_UPDATED, index, accumulated=refreshed.accumulated)
        logger.debug(
            "Accumulator updated",
            extra={
                "event": "rewards.accumulator_updated",
                "asset_index": index,
                "accumulated": refreshed.accumulated,
                "last_updated": refreshed.last_updated,
            },
        )
        return refreshed

    def _refresh_user(self, index: int, holder: Holder, now: int) -> UserCheckpoint:
        acc = self._refresh_accumulator(index, now)
        cp = self._checkpoints.get(index, holder)
        settled = settle_user(cp, acc.accumulated, self._ledger.balance_of(holder))
        if settled is cp:
            return cp
        self._checkpoints.put(index, holder, settled)
        self._touched_users.add((index, holder))
        self._events.emit(
            Event.USER_REWARDS_UPDATED, index,
            holder=holder, owed=settled.owed, checkpoint=settled.checkpoint,
        )
        logger.debug(
            "User rewards updated",
            extra={"event": "rewards.user_updated", "asset_index": index, "holder": holder, "owed": settled.owed},
        )
        return settled

    # -- Registry / schedules ------------------------------------------------

    def register_asset(self, asset: AssetId) -> int:
        """Append ``asset`` to the registry and return its index."""
        with self.operation("register_asset"):
            index = self._registry.register(asset)
            self._events.emit(Event.REWARD_ASSET_REGISTERED, index, asset=asset)
        logger.info(
            "Reward asset registered",
            extra={"event": "rewards.asset_registered", "asset_index": index, "asset": asset},
        )
        return index

    def set_schedule(self, index: int, start: int, end: int, total_rewards: int) -> Schedule:
        """Install a new payout window for reward asset ``index``.

        The accumulator is first brought forward under the old schedule, so
        accrued reward is kept. ``last_updated`` is then reset to ``start``;
        a ``start`` in the past credits the whole span up to now on the next
        refresh.
        """
        with self.operation("set_schedule") as now:
            self._registry.asset(index)
            schedule = build_schedule(start, end, total_rewards)
            self._schedules.check_replaceable(index, now)
            acc = self._refresh_accumulator(index, now)
            self._schedules.install(index, schedule, now, allow_backdated=self._allow_backdated)
            self._accumulators.put(index, restart(acc, schedule))
            self._touched_assets.add(index)
            self._events.emit(
                Event.SCHEDULE_SET, index,
                start=schedule.start, end=schedule.end, rate=schedule.rate,
            )
        logger.info(
            "Reward schedule set",
            extra={
                "event": "rewards.schedule_set",
                "asset_index": index,
                "start": schedule.start,
                "end": schedule.end,
                "rate": schedule.rate,
                "backdated": schedule.start < now,
            },
        )
        return schedule

    # -- Settlement ----------------------------------------------------------

    def refresh_accumulator(self, index: int) -> Accumulator:
        with self.operation("refresh_accumulator") as now:
            self._registry.asset(index)
            return self._refresh_accumulator(index, now)

    def refresh_user(self, index: int, holder: Holder) -> UserCheckpoint:
        with self.operation("refresh_user") as now:
            self._registry.asset(index)
            return self._refresh_user(index, holder, now)

    def before_balance_change(self, *holders: Optional[Holder]) -> None:
        """Settle every affected holder on every registered asset.

        Must run while the ledger still reports PRE-mutation balances.
        """
        with self.operation("before_balance_change") as now:
            for index in self._registry.indices():
                for holder in holders:
                    if holder is not None:
                        self._refresh_user(index, holder, now)

    def claim(self, index: int, holder: Holder, recipient: Holder, amount: int) -> int:
        """Deduct ``amount`` from ``holder``'s owed balance and pay it to ``recipient``.

        Raises:
            InsufficientOwed: ``amount`` exceeds the settled owed balance.
            TransferFailed: The transfer collaborator rejected the payout; the
                whole claim is rolled back.
        """
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise TypeError("amount must be an int")
        if amount < 0:
            raise ValueError(f"amount must be non-negative: {amount}")

        with self.operation("claim") as now:
            asset = self._registry.asset(index)
            cp = self._refresh_user(index, holder, now)
            if amount > cp.owed:
                raise InsufficientOwed(f"claim of {amount} exceeds owed {cp.owed} for {holder!r}")
            self._checkpoints.put(index, holder, replace(cp, owed=cp.owed - amount))
            self._touched_users.add((index, holder))
            try:
                self._transfer.transfer_out(asset, recipient, amount)
            except TransferFailed:
                raise
            except Exception as exc:
                raise TransferFailed(f"transfer of {amount} {asset} to {recipient!r} failed: {exc}") from exc
            self._events.emit(Event.CLAIMED, index, holder=holder, recipient=recipient, amount=amount)

        logger.info(
            "Rewards claimed",
            extra={
                "event": "rewards.claimed",
                "asset_index": index,
                "holder": holder,
                "recipient": recipient,
                "amount": amount,
            },
        )
        return amount

    def claim_all(self, index: int, holder: Holder, recipient: Holder) -> int:
        """Claim ``holder``'s entire owed balance on ``index`` to ``recipient``."""
        with self.operation("claim_all") as now:
            self._registry.asset(index)
            owed = self._refresh_user(index, holder, now).owed
            return self.claim(index, holder, recipient, owed)

    # -- Read-only projections -----------------------------------------------

    def current_reward_per_unit(self, index: int) -> int:
        """Scaled reward per unit as of now, without persisting anything."""
        with self._lock:
            self._registry.asset(index)
            return accrue(
                self._accumulators.get(index), self._schedules.get(index),
                self._ledger.total_supply(), self._read_time(),
            ).accumulated

    def current_owed(self, index: int, holder: Holder) -> int:
        """Settled plus pending reward of ``holder``, without persisting anything."""
        with self._lock:
            accumulated = self.current_reward_per_unit(index)
            cp = self._checkpoints.get(index, holder)
            return settle_user(cp, accumulated, self._ledger.balance_of(holder)).owed

    # -- Views ---------------------------------------------------------------

    @property
    def ledger(self) -> BalanceLedger:
        return self._ledger

    @property
    def capacity(self) -> int:
        return self._registry.capacity

    def reward_assets(self) -> Tuple[RegisteredAsset, ...]:
        return self._registry.entries()

    def asset(self, index: int) -> AssetId:
        return self._registry.asset(index)

    def schedule(self, index: int) -> Schedule:
        self._registry.asset(index)
        return self._schedules.get(index)

    def accumulator(self, index: int) -> Accumulator:
        self._registry.asset(index)
        return self._accumulators.get(index)

    def checkpoint(self, index: int, holder: Holder) -> UserCheckpoint:
        self._registry.asset(index)
        return self._checkpoints.get(index, holder)

    def checkpoints_for(self, index: int) -> dict[Holder, UserCheckpoint]:
        self._registry.asset(index)
        return self._checkpoints.get_for_asset(index)

    def events(self, kind: Optional[Event] = None) -> Tuple[RewardEvent, ...]:
        return self._events.entries(kind)
