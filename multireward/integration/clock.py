"""
Clock sources for the settlement engine.

The engine reads the clock once per operation; every accumulator refresh in
that operation uses the same instant.
"""

from __future__ import annotations

import time


class SystemClock:
    """Wall-clock seconds since the epoch, truncated to an int."""

    def __call__(self) -> int:
        return int(time.time())


class ManualClock:
    """Deterministic clock for tests, simulations and replay."""

    def __init__(self, now: int = 0) -> None:
        if not isinstance(now, int) or isinstance(now, bool) or now < 0:
            raise ValueError("now must be a non-negative int")
        self._now = now

    def __call__(self) -> int:
        return self._now

    def set(self, now: int) -> None:
        if now < self._now:
            raise ValueError(f"clock cannot move backwards: {now} < {self._now}")
        self._now = now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("seconds must be non-negative")
        self._now += seconds
        return self._now
