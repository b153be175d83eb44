from __future__ import annotations

import copy

import pytest

from multireward import HolderLedger, ManualClock, RewardTreasury, SettlementEngine
from multireward.integration.snapshot import engine_from_snapshot, snapshot_from_engine


def _running_engine():
    clock = ManualClock(900)
    ledger = HolderLedger()
    treasury = RewardTreasury()
    engine = SettlementEngine(ledger, treasury, clock=clock)
    ledger.subscribe(engine)
    treasury.fund("USDC", 10**9)
    engine.register_asset("USDC")
    engine.register_asset("WETH")
    engine.set_schedule(0, 1000, 1100, 10_000)
    engine.set_schedule(1, 1000, 2000, 3_333_333)
    ledger.mint("alice", 300)
    ledger.mint("bob", 100)
    clock.set(1040)
    ledger.transfer("alice", "carol", 120)
    clock.set(1070)
    engine.claim_all(0, "bob", "bob")
    return engine, ledger, treasury, clock


def test_snapshot_roundtrip_is_deterministic() -> None:
    engine, ledger, treasury, clock = _running_engine()
    snap = snapshot_from_engine(engine)

    restored = engine_from_snapshot(snap.data, ledger=ledger, transfer=treasury, clock=clock)
    again = snapshot_from_engine(restored)
    assert again.canonical_bytes() == snap.canonical_bytes()
    assert again.commitment_hex() == snap.commitment_hex()
    assert snap.commitment_hex() == "0x" + snap.commitment_bytes().hex()


def test_restored_engine_projects_identically() -> None:
    engine, ledger, treasury, clock = _running_engine()
    restored = engine_from_snapshot(snapshot_from_engine(engine).data, ledger=ledger, transfer=treasury, clock=clock)

    clock.set(1500)
    for index in (0, 1):
        assert restored.current_reward_per_unit(index) == engine.current_reward_per_unit(index)
        for holder in ("alice", "bob", "carol", "dave"):
            assert restored.current_owed(index, holder) == engine.current_owed(index, holder)
    assert restored.reward_assets() == engine.reward_assets()


def test_commitment_changes_with_state() -> None:
    engine, _, _, clock = _running_engine()
    before = snapshot_from_engine(engine).commitment_hex()
    clock.set(1080)
    engine.refresh_user(1, "alice")
    assert snapshot_from_engine(engine).commitment_hex() != before


def test_checkpoints_are_sorted() -> None:
    engine, _, _, _ = _running_engine()
    rows = snapshot_from_engine(engine).data["checkpoints"]
    keys = [(r["index"], r["holder"]) for r in rows]
    assert keys == sorted(keys)
    assert (0, "bob") in keys


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.update(version=2),
        lambda d: d["assets"][1].update(index=5),
        lambda d: d["assets"][0]["schedule"].update(start=2000),
        lambda d: d["assets"][0]["accumulator"].update(last_updated=5000),
        lambda d: d["checkpoints"].append(dict(d["checkpoints"][0])),
        lambda d: d["checkpoints"][0].update(checkpoint=2**130),
        lambda d: d["checkpoints"][0].update(index=9),
    ],
)
def test_invalid_snapshots_are_rejected(mutate) -> None:
    engine, ledger, treasury, clock = _running_engine()
    data = copy.deepcopy(snapshot_from_engine(engine).data)
    mutate(data)
    with pytest.raises(ValueError):
        engine_from_snapshot(data, ledger=ledger, transfer=treasury, clock=clock)


def test_wrong_types_are_rejected() -> None:
    engine, ledger, treasury, clock = _running_engine()
    data = copy.deepcopy(snapshot_from_engine(engine).data)
    data["assets"][0]["accumulator"]["accumulated"] = "12"
    with pytest.raises(TypeError):
        engine_from_snapshot(data, ledger=ledger, transfer=treasury, clock=clock)
