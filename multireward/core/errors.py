"""Exception types for the multi-reward distributor.

Every error aborts the whole operation; the settlement engine rolls back any
store writes made before the failure.
"""

from __future__ import annotations


class RewardError(Exception):
    """Base class for all distributor errors."""


class CapacityExceeded(RewardError):
    """Raised when registering a reward asset beyond the registry capacity."""


class InvalidInterval(RewardError):
    """Raised when a schedule window is empty, inverted or otherwise malformed."""


class ScheduleStillActive(RewardError):
    """Raised when replacing a schedule while the current time is inside its window."""


class RewardOverflowError(RewardError, OverflowError):
    """Raised when a value does not fit the width reserved for its field."""


class InsufficientOwed(RewardError):
    """Raised when a claim exceeds the holder's settled owed balance."""


class Unauthorized(RewardError):
    """Raised when an admin call is not authorized by the access gate."""


class TransferFailed(RewardError):
    """Raised when the reward transfer collaborator rejects a payout."""


class UnknownRewardAsset(RewardError, LookupError):
    """Raised when a reward asset index has not been registered."""


class RewardInvariantError(RewardError):
    """Raised when a post-operation state violates one or more invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
