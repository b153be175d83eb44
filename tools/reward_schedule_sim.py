#!/usr/bin/env python3
"""
Replay a YAML reward scenario against in-memory collaborators.

Scenario format::

    config:            # optional, see multireward.config
      owner: admin
      log_level: WARNING   # --log-level overrides it
    start_time: 1000
    assets:
      - id: USDC
        fund: 10000
    steps:
      - {at: 1000, op: mint, holder: alice, amount: 100}
      - {at: 1000, op: schedule, asset: 0, start: 1000, end: 1100, total: 10000}
      - {at: 1050, op: claim, holder: alice, asset: 0, recipient: bob}
    report_at: 1200    # optional

Supported ops: mint, burn, transfer, schedule, claim, claim_for.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from multireward.config import LOG_LEVELS, DistributorConfig, config_from_mapping, configure_logging
from multireward.core.errors import RewardError
from multireward.integration.clock import ManualClock
from multireward.integration.distributor import RewardDistributor
from multireward.integration.snapshot import snapshot_from_engine
from multireward.integration.treasury import RewardTreasury
from multireward.state.balances import HolderLedger


class ScenarioError(Exception):
    pass


def _require(step: Mapping[str, Any], key: str) -> Any:
    if key not in step:
        raise ScenarioError(f"step {dict(step)!r} is missing {key!r}")
    return step[key]


def scenario_config(scenario: Any) -> DistributorConfig:
    if not isinstance(scenario, Mapping):
        raise ScenarioError("scenario must be a mapping")
    try:
        return config_from_mapping(scenario.get("config") or {"owner": "admin"})
    except (TypeError, ValueError) as exc:
        raise ScenarioError(f"invalid config: {exc}") from exc


def run_scenario(scenario: Mapping[str, Any]) -> Dict[str, Any]:
    """Run ``scenario`` and return the final owed/paid report."""
    config = scenario_config(scenario)
    admin = config.owner or "admin"

    clock = ManualClock(int(scenario.get("start_time", 0)))
    ledger = HolderLedger()
    treasury = RewardTreasury()
    distributor = RewardDistributor(ledger, treasury, config=config, clock=clock)

    for entry in scenario.get("assets") or []:
        asset = _require(entry, "id")
        treasury.fund(asset, int(entry.get("fund", 0)))
        distributor.register_reward_asset(admin, asset)

    holders = set()
    failures = []
    for step in scenario.get("steps") or []:
        if "at" in step:
            clock.set(int(step["at"]))
        op = _require(step, "op")
        try:
            if op == "mint":
                holders.add(step["holder"])
                ledger.mint(step["holder"], int(step["amount"]))
            elif op == "burn":
                ledger.burn(step["holder"], int(step["amount"]))
            elif op == "transfer":
                holders.add(step["to"])
                ledger.transfer(step["from"], step["to"], int(step["amount"]))
            elif op == "schedule":
                distributor.configure_schedule(
                    admin, int(step["asset"]), int(step["start"]), int(step["end"]), int(step["total"]),
                )
            elif op == "claim":
                holders.update((step["holder"], step.get("recipient", step["holder"])))
                distributor.claim(step["holder"], int(step["asset"]), step.get("recipient", step["holder"]))
            elif op == "claim_for":
                holders.add(step["holder"])
                distributor.claim_for(int(step["asset"]), step["holder"])
            else:
                raise ScenarioError(f"unknown op: {op!r}")
        except (RewardError, ValueError) as exc:
            failures.append({"at": clock(), "op": op, "error": type(exc).__name__, "detail": str(exc)})

    if "report_at" in scenario:
        clock.set(int(scenario["report_at"]))

    assets = distributor.reward_assets()
    return {
        "time": clock(),
        "owed": {
            entry.asset: {h: distributor.current_owed(entry.index, h) for h in sorted(holders)}
            for entry in assets
        },
        "paid": {
            entry.asset: {h: treasury.paid_to(h, entry.asset) for h in sorted(holders)}
            for entry in assets
        },
        "failures": failures,
        "commitment": snapshot_from_engine(distributor.engine).commitment_hex(),
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--scenario", required=True, type=Path, help="YAML scenario file")
    parser.add_argument("--json", action="store_true", help="print the report as JSON")
    parser.add_argument(
        "--log-level", choices=LOG_LEVELS, default=None,
        help="overrides log_level from the scenario config",
    )
    args = parser.parse_args(argv)

    scenario = yaml.safe_load(args.scenario.read_text(encoding="utf-8"))
    try:
        config = scenario_config(scenario)
        configure_logging(args.log_level or config.log_level)
        report = run_scenario(scenario)
    except ScenarioError as exc:
        print(f"[reward-sim] FAIL: {exc}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(report, indent=2, sort_keys=True))
        return 0

    print(f"[reward-sim] t={report['time']} commitment={report['commitment']}")
    for asset, owed in report["owed"].items():
        for holder, amount in owed.items():
            print(f"  {asset:>12} {holder:>12} owed={amount} paid={report['paid'][asset][holder]}")
    for failure in report["failures"]:
        print(f"  ! t={failure['at']} {failure['op']}: {failure['error']} ({failure['detail']})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
