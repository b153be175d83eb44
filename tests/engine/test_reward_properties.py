"""Property tests: random balance/claim sequences against a single reward program.

Uses Hypothesis to drive mint / burn / transfer / claim sequences over time and
checks that distributed reward never exceeds what the schedule released, and
falls short only by per-settlement floor rounding.
"""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from multireward.engine import SettlementEngine
from multireward.integration.clock import ManualClock
from multireward.integration.treasury import RewardTreasury
from multireward.state.balances import HolderLedger

START = 1_000
END = 2_000
TOTAL = 7_777_777
ANCHOR = "anchor"
HOLDERS = ["alice", "bob", "carol"]

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def op_strategy():
    return st.tuples(
        st.sampled_from(["mint", "burn", "transfer", "claim"]),
        st.sampled_from(HOLDERS + [ANCHOR]),
        st.sampled_from(HOLDERS + [ANCHOR]),
        st.integers(min_value=1, max_value=10**6),
        st.integers(min_value=0, max_value=60),
    )


def _program():
    clock = ManualClock(START - 10)
    ledger = HolderLedger()
    treasury = RewardTreasury()
    engine = SettlementEngine(ledger, treasury, clock=clock)
    ledger.subscribe(engine)
    engine.register_asset("RWD")
    treasury.fund("RWD", TOTAL)
    engine.set_schedule(0, START, END, TOTAL)
    # Keeps supply non-zero so no span is forfeited.
    ledger.mint(ANCHOR, 1)
    return engine, ledger, treasury, clock


def _apply(engine, ledger, op) -> None:
    kind, holder, other, amount, _ = op
    if kind == "mint":
        ledger.mint(holder, amount)
    elif kind == "burn":
        if holder == ANCHOR:
            return
        amount = min(amount, ledger.balance_of(holder))
        if amount:
            ledger.burn(holder, amount)
    elif kind == "transfer":
        if holder == ANCHOR:
            return
        amount = min(amount, ledger.balance_of(holder))
        if amount:
            ledger.transfer(holder, other, amount)
    else:
        engine.claim_all(0, holder, holder)


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


class TestConservation:
    @given(ops=st.lists(op_strategy(), min_size=1, max_size=40))
    @settings(max_examples=200, deadline=5000)
    def test_distributed_never_exceeds_released(self, ops):
        engine, ledger, treasury, clock = _program()
        for op in ops:
            clock.advance(op[4])
            _apply(engine, ledger, op)

        rate = engine.schedule(0).rate
        released = rate * (max(min(clock(), END), START) - START)
        everyone = HOLDERS + [ANCHOR]
        distributed = sum(
            engine.current_owed(0, h) + treasury.paid_to(h, "RWD") for h in everyone
        )

        assert distributed <= released
        # Each settlement floors at most one unit per holder.
        assert released - distributed <= 3 * (len(ops) + 1) + len(everyone)


class TestMonotonicity:
    @given(ops=st.lists(op_strategy(), min_size=1, max_size=30))
    @settings(max_examples=150, deadline=5000)
    def test_reward_per_unit_never_decreases(self, ops):
        engine, ledger, _, clock = _program()
        previous = engine.current_reward_per_unit(0)
        for op in ops:
            clock.advance(op[4])
            _apply(engine, ledger, op)
            current = engine.current_reward_per_unit(0)
            assert current >= previous
            previous = current

    @given(ops=st.lists(op_strategy(), min_size=1, max_size=30))
    @settings(max_examples=150, deadline=5000)
    def test_projection_agrees_with_refresh(self, ops):
        engine, ledger, _, clock = _program()
        for op in ops:
            clock.advance(op[4])
            _apply(engine, ledger, op)
        for holder in HOLDERS + [ANCHOR]:
            projected = engine.current_owed(0, holder)
            assert engine.refresh_user(0, holder).owed == projected
