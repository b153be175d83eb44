"""`multireward`: proportional multi-asset reward streaming for a balance-tracked asset.

Holders of the tracked asset earn up to ten independent reward assets, each
paid out at a fixed rate over its own time window. Owed rewards are computed
in constant time through a per-unit accumulator scaled by 1e18.

Public API:
- `RewardDistributor` (admin surface, claims, projections)
- `SettlementEngine` (settlement core, balance-mutation hook)
- `HolderLedger`, `RewardTreasury`, `ManualClock` (in-memory collaborators)
"""

from .config import DistributorConfig, load_config
from .core import (
    SCALE,
    CapacityExceeded,
    InsufficientOwed,
    InvalidInterval,
    RewardError,
    RewardInvariantError,
    RewardOverflowError,
    ScheduleStillActive,
    TransferFailed,
    Unauthorized,
    UnknownRewardAsset,
)
from .engine import SettlementEngine
from .integration import ManualClock, OwnerGate, RewardDistributor, RewardTreasury, SystemClock
from .state import HolderLedger

__all__ = [
    "DistributorConfig",
    "load_config",
    "SCALE",
    "CapacityExceeded",
    "InsufficientOwed",
    "InvalidInterval",
    "RewardError",
    "RewardInvariantError",
    "RewardOverflowError",
    "ScheduleStillActive",
    "TransferFailed",
    "Unauthorized",
    "UnknownRewardAsset",
    "SettlementEngine",
    "ManualClock",
    "OwnerGate",
    "RewardDistributor",
    "RewardTreasury",
    "SystemClock",
    "HolderLedger",
]
