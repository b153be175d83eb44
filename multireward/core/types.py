"""Data types for the multi-reward distributor.

All records are frozen dataclasses; stores replace them wholesale.

Units/conventions:
- timestamps are integer seconds (u32),
- `rate` is reward units per second (u96),
- `accumulated` / `checkpoint` are reward-per-unit scaled by 1e18 (u128),
- `owed` is unscaled reward units (u128).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, Mapping

# Opaque handles supplied by external collaborators.
AssetId = str
Holder = str

# Fixed registry capacity; bounds the per-mutation iteration cost.
MAX_REWARD_ASSETS: int = 10


@unique
class Event(Enum):
    """One member per emitted event type."""
    REWARD_ASSET_REGISTERED = "RewardAssetRegistered"
    SCHEDULE_SET = "ScheduleSet"
    ACCUMULATOR_UPDATED = "AccumulatorUpdated"
    USER_REWARDS_UPDATED = "UserRewardsUpdated"
    CLAIMED = "Claimed"


@dataclass(frozen=True)
class Schedule:
    """Active payout window of one reward asset. ``(0, 0, 0)`` means unset."""

    start: int = 0
    end: int = 0
    rate: int = 0

    @property
    def configured(self) -> bool:
        return self.end > 0


@dataclass(frozen=True)
class Accumulator:
    """Lazily-updated reward per unit of holding for one reward asset."""

    accumulated: int = 0
    last_updated: int = 0


@dataclass(frozen=True)
class UserCheckpoint:
    """Settled owed amount of one holder and the accumulator value it last saw."""

    owed: int = 0
    checkpoint: int = 0


@dataclass(frozen=True)
class RegisteredAsset:
    index: int
    asset: AssetId


@dataclass(frozen=True)
class RewardEvent:
    """One append-only event log entry."""

    kind: Event
    asset_index: int
    data: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"event": self.kind.value, "asset_index": self.asset_index, **dict(self.data)}
