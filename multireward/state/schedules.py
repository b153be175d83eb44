"""
Reward schedule table: reward asset index -> `Schedule`.

Only one schedule is active per reward asset. A replacement is accepted only
while the current time lies strictly outside the stored window.
"""

from __future__ import annotations

from ..core.errors import InvalidInterval, ScheduleStillActive
from ..core.fixed_point import window_contains
from ..core.types import Schedule
from .journal import JournaledTable

_UNSET = Schedule()


class ScheduleTable(JournaledTable[int, Schedule]):
    def get(self, index: int) -> Schedule:
        """Stored schedule for ``index``; the unset schedule if none."""
        return self._lookup(index, _UNSET)

    def check_replaceable(self, index: int, now: int) -> None:
        """
        Raises:
            ScheduleStillActive: ``now`` lies within the stored ``[start, end]``.
        """
        current = self.get(index)
        if window_contains(current.start, current.end, now):
            raise ScheduleStillActive(
                f"reward asset {index}: schedule [{current.start}, {current.end}] is active at {now}"
            )

    def install(self, index: int, schedule: Schedule, now: int, *, allow_backdated: bool = True) -> None:
        """
        Store ``schedule`` for ``index`` after the overlap check.

        Raises:
            ScheduleStillActive: The stored schedule is still active at ``now``.
            InvalidInterval: ``schedule.start < now`` and backdating is disabled.
        """
        self.check_replaceable(index, now)
        if not allow_backdated and schedule.start < now:
            raise InvalidInterval(f"schedule start {schedule.start} is before current time {now}")
        self._store(index, schedule)
