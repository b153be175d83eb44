from __future__ import annotations

import pytest

from multireward.state.canonical import canonical_json_bytes, domain_sep_bytes, hex_to_bytes_fixed, sha256_hex


def test_canonical_json_sorts_keys_and_strips_whitespace() -> None:
    assert canonical_json_bytes({"b": 1, "a": [2, {"d": 3, "c": 4}]}) == b'{"a":[2,{"c":4,"d":3}],"b":1}'


def test_canonical_json_keeps_wide_ints_exact() -> None:
    value = 2**128 - 1
    assert canonical_json_bytes({"accumulated": value}) == b'{"accumulated":' + str(value).encode() + b"}"


@pytest.mark.parametrize("value", [{"rate": 1.5}, {1: "a"}, [{"x": 0.0}]])
def test_canonical_json_rejects_non_canonical_values(value) -> None:
    with pytest.raises(TypeError):
        canonical_json_bytes(value)


def test_domain_sep() -> None:
    assert domain_sep_bytes("distributor_snapshot", version=1) == b"multireward:distributor_snapshot:v1\x00"
    with pytest.raises(ValueError):
        domain_sep_bytes("bad\x00label")
    with pytest.raises(ValueError):
        domain_sep_bytes("label", version=0)
    with pytest.raises(TypeError):
        domain_sep_bytes("")


def test_sha256_hex_is_prefixed() -> None:
    digest = sha256_hex(b"")
    assert digest == "0xe3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_hex_to_bytes_fixed() -> None:
    assert hex_to_bytes_fixed("0x" + "ab" * 4, nbytes=4, name="x") == b"\xab" * 4
    assert hex_to_bytes_fixed("AB" * 4, nbytes=4, name="x") == b"\xab" * 4
    with pytest.raises(ValueError):
        hex_to_bytes_fixed("0xabc", nbytes=4, name="x")
    with pytest.raises(ValueError):
        hex_to_bytes_fixed("0x" + "zz" * 4, nbytes=4, name="x")
    with pytest.raises(TypeError):
        hex_to_bytes_fixed(b"ab", nbytes=1, name="x")
