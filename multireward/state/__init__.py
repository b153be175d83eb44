"""
State tables for the multi-reward distributor
"""

from .accumulators import AccumulatorTable
from .balances import HolderLedger
from .checkpoints import CheckpointTable
from .events import EventLog
from .journal import Journal, JournaledTable
from .registry import RewardRegistry
from .schedules import ScheduleTable

__all__ = [
    "AccumulatorTable",
    "HolderLedger",
    "CheckpointTable",
    "EventLog",
    "Journal",
    "JournaledTable",
    "RewardRegistry",
    "ScheduleTable",
]
