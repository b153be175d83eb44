"""
Reward accounting core: integer-only math, records and pure transitions.
"""

from .accrual import accrue, build_schedule, restart, settle_user
from .errors import (
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
from .fixed_point import SCALE
from .types import (
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

__all__ = [
    "accrue",
    "build_schedule",
    "restart",
    "settle_user",
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
    "SCALE",
    "MAX_REWARD_ASSETS",
    "Accumulator",
    "AssetId",
    "Event",
    "Holder",
    "RegisteredAsset",
    "RewardEvent",
    "Schedule",
    "UserCheckpoint",
]
