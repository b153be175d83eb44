"""
Collaborator adapters and the distributor surface.
"""

from .access import BlsAdminGate, OwnerGate, SignedAdminCaller, sign_admin_request
from .clock import ManualClock, SystemClock
from .distributor import RewardDistributor
from .snapshot import DistributorSnapshot, engine_from_snapshot, snapshot_from_engine
from .treasury import RewardTreasury

__all__ = [
    "BlsAdminGate",
    "OwnerGate",
    "SignedAdminCaller",
    "sign_admin_request",
    "ManualClock",
    "SystemClock",
    "RewardDistributor",
    "DistributorSnapshot",
    "engine_from_snapshot",
    "snapshot_from_engine",
    "RewardTreasury",
]
