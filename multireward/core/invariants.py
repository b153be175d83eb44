"""Invariant checkers for one reward asset.

Each function returns True when the invariant holds; `check_asset()` returns
the ids of the violated ones (empty = all pass). The engine runs these on
every asset an operation touched and rolls back on any violation.
"""

from __future__ import annotations

from typing import Callable

from .fixed_point import U32_MAX, U96_MAX, U128_MAX
from .types import Accumulator, Schedule, UserCheckpoint


def inv_schedule_ordered(s: Schedule, a: Accumulator) -> bool:
    if not s.configured:
        return s.start == 0 and s.rate == 0
    return s.start < s.end


def inv_schedule_in_range(s: Schedule, a: Accumulator) -> bool:
    return 0 <= s.start <= U32_MAX and 0 <= s.end <= U32_MAX and 0 <= s.rate <= U96_MAX


def inv_last_updated_in_window(s: Schedule, a: Accumulator) -> bool:
    if not s.configured:
        return a.last_updated == 0
    return s.start <= a.last_updated <= s.end


def inv_accumulated_in_range(s: Schedule, a: Accumulator) -> bool:
    return 0 <= a.accumulated <= U128_MAX


ASSET_INVARIANTS: dict[str, Callable[[Schedule, Accumulator], bool]] = {
    "inv_schedule_ordered": inv_schedule_ordered,
    "inv_schedule_in_range": inv_schedule_in_range,
    "inv_last_updated_in_window": inv_last_updated_in_window,
    "inv_accumulated_in_range": inv_accumulated_in_range,
}


def check_asset(schedule: Schedule, acc: Accumulator) -> list[str]:
    """Return list of violated asset invariant ids (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in ASSET_INVARIANTS.items()
        if not check_fn(schedule, acc)
    ]


def check_checkpoint(cp: UserCheckpoint, acc: Accumulator) -> list[str]:
    """Return violated per-holder invariant ids."""
    violations = []
    if cp.checkpoint > acc.accumulated:
        violations.append("inv_checkpoint_not_ahead")
    if not 0 <= cp.owed <= U128_MAX:
        violations.append("inv_owed_in_range")
    return violations
