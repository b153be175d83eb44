"""Pure state transitions for the reward accumulator.

Each function takes the PRE-record and returns the POST-record; nothing here
touches a store. The settlement engine decides what to persist.
"""

from __future__ import annotations

from dataclasses import replace

from .errors import InvalidInterval
from .fixed_point import accumulator_delta, schedule_rate, to_u32, to_u128, user_delta
from .types import Accumulator, Schedule, UserCheckpoint


def accrue(acc: Accumulator, schedule: Schedule, total_supply: int, now: int) -> Accumulator:
    """Bring ``acc`` forward to ``now`` under ``schedule``.

    - Nothing accrues before ``schedule.start``.
    - Accrual is clamped to ``schedule.end``.
    - ``last_updated`` advances even when ``total_supply`` is zero; the reward
      of that span is forfeited, not redistributed later.
    """
    if now < schedule.start:
        return acc

    update_time = min(now, schedule.end)
    elapsed = update_time - acc.last_updated
    if elapsed <= 0:
        return acc

    if total_supply == 0:
        return replace(acc, last_updated=update_time)

    accumulated = to_u128(
        acc.accumulated + accumulator_delta(elapsed, schedule.rate, total_supply),
        "accumulated",
    )
    return Accumulator(accumulated=accumulated, last_updated=update_time)


def settle_user(cp: UserCheckpoint, accumulated: int, balance: int) -> UserCheckpoint:
    """Fold the reward earned by ``balance`` since ``cp.checkpoint`` into ``owed``."""
    if cp.checkpoint == accumulated:
        return cp
    owed = to_u128(cp.owed + user_delta(balance, accumulated, cp.checkpoint), "owed")
    return UserCheckpoint(owed=owed, checkpoint=to_u128(accumulated, "checkpoint"))


def build_schedule(start: int, end: int, total_rewards: int) -> Schedule:
    """Validate a schedule window and derive its floor rate."""
    for name, value in (("start", start), ("end", end), ("total_rewards", total_rewards)):
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidInterval(f"{name} must be an int")
        if value < 0:
            raise InvalidInterval(f"{name} must be non-negative: {value}")
    if start >= end:
        raise InvalidInterval(f"start must be before end: [{start}, {end}]")
    start = to_u32(start, "start")
    end = to_u32(end, "end")
    return Schedule(start=start, end=end, rate=schedule_rate(total_rewards, start, end))


def restart(acc: Accumulator, schedule: Schedule) -> Accumulator:
    """Accumulator state for a freshly installed schedule.

    ``accumulated`` carries over; accrual resumes from ``schedule.start`` even
    when that lies in the past.
    """
    return replace(acc, last_updated=schedule.start)
