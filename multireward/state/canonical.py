"""
Deterministic encoding helpers for snapshot commitments and signed admin requests.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any


_HEX_CHARS_RE = re.compile(r"^[0-9a-fA-F]+$")


def _reject_non_canonical(value: Any) -> None:
    if isinstance(value, float):
        raise TypeError("floats are not allowed in canonical encoding")
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError("dict keys must be str for canonical encoding")
            _reject_non_canonical(v)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _reject_non_canonical(item)


def canonical_json_bytes(value: Any) -> bytes:
    """
    Canonical JSON: UTF-8, sorted keys, no whitespace, no NaN, no floats.

    Reward amounts and scaled accumulators are ints of up to 128 bits; floats
    would silently lose precision, so they are rejected outright.
    """
    _reject_non_canonical(value)
    text = json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.encode("utf-8")


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """ASCII, NUL-terminated domain separation prefix."""
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if "\x00" in label:
        raise ValueError("label must not contain NUL")
    try:
        label_bytes = label.encode("ascii")
    except UnicodeEncodeError as exc:
        raise ValueError("label must be ASCII") from exc
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return b"multireward:" + label_bytes + b":v" + str(version).encode("ascii") + b"\x00"


def hex_to_bytes_fixed(hex_str: str, *, nbytes: int, name: str) -> bytes:
    """Decode a hex string (``0x`` prefix optional) of exactly ``nbytes`` bytes."""
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str")
    body = hex_str[2:] if hex_str.lower().startswith("0x") else hex_str
    if len(body) != 2 * nbytes or not _HEX_CHARS_RE.fullmatch(body):
        raise ValueError(f"{name} must be a {nbytes}-byte hex string")
    return bytes.fromhex(body)
