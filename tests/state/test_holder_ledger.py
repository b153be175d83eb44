"""Tests for multireward/state/balances.py: the reference balance ledger."""

import pytest

from multireward.state.balances import HolderLedger


class _Recorder:
    def __init__(self, ledger: HolderLedger) -> None:
        self.ledger = ledger
        self.calls: list[tuple] = []

    def before_balance_change(self, *holders):
        # Capture the balances the listener observes (must be PRE-mutation).
        self.calls.append(
            (holders, {h: self.ledger.balance_of(h) for h in holders if h is not None}, self.ledger.total_supply())
        )


@pytest.fixture
def ledger_and_recorder():
    ledger = HolderLedger()
    recorder = _Recorder(ledger)
    ledger.subscribe(recorder)
    return ledger, recorder


def test_mint_notifies_before_commit(ledger_and_recorder) -> None:
    ledger, rec = ledger_and_recorder
    ledger.mint("alice", 100)
    assert rec.calls == [((None, "alice"), {"alice": 0}, 0)]
    assert ledger.balance_of("alice") == 100
    assert ledger.total_supply() == 100


def test_burn_notifies_with_pre_balance(ledger_and_recorder) -> None:
    ledger, rec = ledger_and_recorder
    ledger.mint("alice", 100)
    ledger.burn("alice", 40)
    assert rec.calls[-1] == (("alice", None), {"alice": 100}, 100)
    assert ledger.balance_of("alice") == 60
    assert ledger.total_supply() == 60


def test_transfer_notifies_both_sides(ledger_and_recorder) -> None:
    ledger, rec = ledger_and_recorder
    ledger.mint("alice", 100)
    ledger.transfer("alice", "bob", 30)
    assert rec.calls[-1] == (("alice", "bob"), {"alice": 100, "bob": 0}, 100)
    assert ledger.get_all_balances() == {"alice": 70, "bob": 30}


def test_transfer_from_consumes_allowance(ledger_and_recorder) -> None:
    ledger, rec = ledger_and_recorder
    ledger.mint("alice", 100)
    ledger.approve("alice", "carol", 50)
    ledger.transfer_from("carol", "alice", "bob", 20)
    assert rec.calls[-1][0] == ("alice", "bob")
    assert ledger.allowance("alice", "carol") == 30
    assert ledger.balance_of("bob") == 20


def test_failed_validation_does_not_notify(ledger_and_recorder) -> None:
    ledger, rec = ledger_and_recorder
    ledger.mint("alice", 10)
    before = len(rec.calls)
    with pytest.raises(ValueError):
        ledger.burn("alice", 11)
    with pytest.raises(ValueError):
        ledger.transfer("alice", "bob", 11)
    with pytest.raises(ValueError):
        ledger.transfer_from("carol", "alice", "bob", 1)
    with pytest.raises(ValueError):
        ledger.mint("alice", -1)
    assert len(rec.calls) == before


def test_zero_balances_are_dropped() -> None:
    ledger = HolderLedger()
    ledger.mint("alice", 5)
    ledger.burn("alice", 5)
    assert ledger.get_all_balances() == {}
