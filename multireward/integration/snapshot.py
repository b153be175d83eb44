"""
Reward state snapshots.

Goals:
- Deterministic JSON serialization for hashing / audit.
- Round-trippable into a `SettlementEngine` with identical projections.
- Explicit versioning.

The balance ledger is external and not part of the snapshot; a restored
engine must be bound to a ledger holding the same balances. The event log is
not snapshotted either.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping

from ..core.invariants import check_asset, check_checkpoint
from ..core.types import Accumulator, Schedule, UserCheckpoint
from ..engine.settlement import SettlementEngine
from ..interfaces import BalanceLedger, RewardTransfer
from ..state.accumulators import AccumulatorTable
from ..state.canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex
from ..state.checkpoints import CheckpointTable
from ..state.registry import RewardRegistry
from ..state.schedules import ScheduleTable


SNAPSHOT_VERSION = 1


def _require_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return int(value)


def _require_str(value: Any, *, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise TypeError(f"{name} must be a non-empty string")
    return value


@dataclass(frozen=True)
class DistributorSnapshot:
    """
    Deterministic, versioned snapshot of the reward accounting tables.

    The commitment is *not* included inside `data` to avoid self-reference.
    """

    version: int
    data: Dict[str, Any]

    def canonical_bytes(self) -> bytes:
        return canonical_json_bytes(self.data)

    def commitment_bytes(self) -> bytes:
        payload = domain_sep_bytes("distributor_snapshot", version=self.version) + self.canonical_bytes()
        return hashlib.sha256(payload).digest()

    def commitment_hex(self) -> str:
        payload = domain_sep_bytes("distributor_snapshot", version=self.version) + self.canonical_bytes()
        return sha256_hex(payload)


def snapshot_from_engine(engine: SettlementEngine) -> DistributorSnapshot:
    assets: List[Dict[str, Any]] = []
    checkpoints: List[Dict[str, Any]] = []
    for entry in engine.reward_assets():
        schedule = engine.schedule(entry.index)
        acc = engine.accumulator(entry.index)
        assets.append(
            {
                "index": entry.index,
                "asset": entry.asset,
                "schedule": {"start": schedule.start, "end": schedule.end, "rate": schedule.rate},
                "accumulator": {"accumulated": acc.accumulated, "last_updated": acc.last_updated},
            }
        )
        for holder, cp in engine.checkpoints_for(entry.index).items():
            checkpoints.append(
                {"index": entry.index, "holder": holder, "owed": cp.owed, "checkpoint": cp.checkpoint}
            )
    checkpoints.sort(key=lambda e: (e["index"], e["holder"]))

    data = {
        "version": SNAPSHOT_VERSION,
        "capacity": engine.capacity,
        "assets": assets,
        "checkpoints": checkpoints,
    }
    return DistributorSnapshot(version=SNAPSHOT_VERSION, data=data)


def engine_from_snapshot(
    data: Mapping[str, Any],
    *,
    ledger: BalanceLedger,
    transfer: RewardTransfer,
    clock: Callable[[], int],
    allow_backdated_schedules: bool = True,
    check_invariants: bool = True,
) -> SettlementEngine:
    """
    Rebuild a `SettlementEngine` from `DistributorSnapshot.data`.

    Raises:
        TypeError / ValueError: The snapshot is malformed or violates an invariant.
    """
    if not isinstance(data, Mapping):
        raise TypeError("snapshot must be a mapping")
    version = _require_int(data.get("version"), name="version")
    if version != SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {version}")

    registry = RewardRegistry(_require_int(data.get("capacity"), name="capacity"))
    schedules = ScheduleTable()
    accumulators = AccumulatorTable()
    checkpoints = CheckpointTable()

    raw_assets = data.get("assets")
    if not isinstance(raw_assets, list):
        raise TypeError("assets must be a list")
    for position, raw in enumerate(raw_assets):
        if not isinstance(raw, Mapping):
            raise TypeError("asset entry must be an object")
        index = _require_int(raw.get("index"), name="assets.index")
        if index != position:
            raise ValueError(f"asset indices must be contiguous from 0: {index} at {position}")
        registry.register(_require_str(raw.get("asset"), name="assets.asset"))

        s, a = raw.get("schedule"), raw.get("accumulator")
        if not isinstance(s, Mapping) or not isinstance(a, Mapping):
            raise TypeError("schedule and accumulator must be objects")
        schedule = Schedule(
            start=_require_int(s.get("start"), name="schedule.start"),
            end=_require_int(s.get("end"), name="schedule.end"),
            rate=_require_int(s.get("rate"), name="schedule.rate"),
        )
        acc = Accumulator(
            accumulated=_require_int(a.get("accumulated"), name="accumulator.accumulated"),
            last_updated=_require_int(a.get("last_updated"), name="accumulator.last_updated"),
        )
        violations = check_asset(schedule, acc)
        if violations:
            raise ValueError(f"invalid asset {index} in snapshot: {', '.join(violations)}")
        schedules.load(index, schedule)
        accumulators.load(index, acc)

    raw_checkpoints = data.get("checkpoints")
    if not isinstance(raw_checkpoints, list):
        raise TypeError("checkpoints must be a list")
    for raw in raw_checkpoints:
        if not isinstance(raw, Mapping):
            raise TypeError("checkpoint entry must be an object")
        index = _require_int(raw.get("index"), name="checkpoints.index")
        if index >= len(registry):
            raise ValueError(f"checkpoint references unknown asset index {index}")
        holder = _require_str(raw.get("holder"), name="checkpoints.holder")
        if (index, holder) in checkpoints:
            raise ValueError(f"duplicate checkpoint for ({index}, {holder!r})")
        cp = UserCheckpoint(
            owed=_require_int(raw.get("owed"), name="checkpoints.owed"),
            checkpoint=_require_int(raw.get("checkpoint"), name="checkpoints.checkpoint"),
        )
        violations = check_checkpoint(cp, accumulators.get(index))
        if violations:
            raise ValueError(f"invalid checkpoint ({index}, {holder!r}): {', '.join(violations)}")
        checkpoints.load((index, holder), cp)

    return SettlementEngine(
        ledger,
        transfer,
        clock=clock,
        allow_backdated_schedules=allow_backdated_schedules,
        check_invariants=check_invariants,
        registry=registry,
        schedules=schedules,
        accumulators=accumulators,
        checkpoints=checkpoints,
    )
