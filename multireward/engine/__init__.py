"""
Settlement engine: the only writer of the reward accounting tables.
"""

from .settlement import SettlementEngine

__all__ = ["SettlementEngine"]
