"""
Distributor configuration.

Configuration is a small YAML mapping, validated fail-closed: unknown keys and
wrongly-typed values are rejected rather than ignored.

Example::

    owner: treasury-multisig
    max_reward_assets: 10
    allow_backdated_schedules: true
    check_invariants: true
    log_level: INFO
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .core.types import MAX_REWARD_ASSETS

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class DistributorConfig:
    owner: Optional[str] = None
    max_reward_assets: int = MAX_REWARD_ASSETS
    # Schedules whose start lies in the past credit the elapsed span on the
    # next refresh. Turning this off rejects such schedules instead.
    allow_backdated_schedules: bool = True
    check_invariants: bool = True
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.owner is not None and (not isinstance(self.owner, str) or not self.owner):
            raise ValueError("owner must be a non-empty str or null")
        if not isinstance(self.max_reward_assets, int) or isinstance(self.max_reward_assets, bool):
            raise TypeError("max_reward_assets must be an int")
        if not 1 <= self.max_reward_assets <= MAX_REWARD_ASSETS:
            raise ValueError(f"max_reward_assets must be in [1, {MAX_REWARD_ASSETS}]: {self.max_reward_assets}")
        for name in ("allow_backdated_schedules", "check_invariants"):
            if not isinstance(getattr(self, name), bool):
                raise TypeError(f"{name} must be a bool")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}: {self.log_level!r}")


_CONFIG_KEYS = frozenset(f.name for f in fields(DistributorConfig))


def config_from_mapping(data: Optional[Mapping[str, Any]]) -> DistributorConfig:
    if data is None:
        return DistributorConfig()
    if not isinstance(data, Mapping):
        raise TypeError("config must be a mapping")
    unknown = sorted(set(data) - _CONFIG_KEYS)
    if unknown:
        raise ValueError(f"unknown config keys: {', '.join(map(str, unknown))}")
    return DistributorConfig(**dict(data))


def load_config(path: Path | str) -> DistributorConfig:
    text = Path(path).read_text(encoding="utf-8")
    return config_from_mapping(yaml.safe_load(text))


def configure_logging(level: str = "INFO") -> None:
    if level not in LOG_LEVELS:
        raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}: {level!r}")
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
