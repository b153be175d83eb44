"""Pure fixed-point arithmetic for the reward accumulator.

Every function is stateless and operates on plain Python ints.

Rounding is explicit: all divisions use `//` (floor). Values never wrap; a
result that does not fit its field width raises `RewardOverflowError`.
"""

from __future__ import annotations

from .errors import RewardOverflowError

# Scaling factor for reward-per-unit values (1e18).
SCALE: int = 10**18

# Field widths.
U32_MAX: int = 2**32 - 1
U96_MAX: int = 2**96 - 1
U128_MAX: int = 2**128 - 1


# -- Range checks ------------------------------------------------------------

def _checked(value: int, *, bits: int, limit: int, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value > limit:
        raise RewardOverflowError(f"{name} does not fit in u{bits}: {value}")
    return int(value)


def to_u32(value: int, name: str = "value") -> int:
    return _checked(value, bits=32, limit=U32_MAX, name=name)


def to_u96(value: int, name: str = "value") -> int:
    return _checked(value, bits=96, limit=U96_MAX, name=name)


def to_u128(value: int, name: str = "value") -> int:
    return _checked(value, bits=128, limit=U128_MAX, name=name)


# -- Schedule helpers --------------------------------------------------------

def schedule_rate(total_rewards: int, start: int, end: int) -> int:
    """Payout per second: ``total_rewards // (end - start)``.

    The remainder ``total_rewards % (end - start)`` is never paid out.
    """
    return to_u96(total_rewards // (end - start), "rate")


def released_amount(rate: int, start: int, end: int, now: int) -> int:
    """Reward units a schedule has released by ``now`` (before any forfeit)."""
    if now <= start:
        return 0
    return rate * (min(now, end) - start)


def window_contains(start: int, end: int, now: int) -> bool:
    """True when ``now`` lies within the closed window ``[start, end]``."""
    return start <= now <= end


# -- Accumulator helpers -----------------------------------------------------

def accumulator_delta(elapsed: int, rate: int, total_supply: int) -> int:
    """Scaled reward per unit accrued over ``elapsed`` seconds.

    Zero when nothing is outstanding; that span's reward is forfeited.
    """
    if total_supply == 0:
        return 0
    return (SCALE * elapsed * rate) // total_supply


def user_delta(balance: int, accumulated: int, checkpoint: int) -> int:
    """Unscaled reward owed to ``balance`` units between two accumulator values."""
    return (balance * (accumulated - checkpoint)) // SCALE
