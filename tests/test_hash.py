"""
Operation hash properties.

  H1. Determinism: identical inputs give identical hashes.
  H2. Sensitivity: changing any single byte of any field changes the hash.
  H3. The check code is the low 8 bytes of the hash.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from quorum_wallet.hash import (
    derive_weight,
    encode_packed,
    hash_check_code,
    hash_operation,
    keccak256,
)
from quorum_wallet.curve import ORDER

UINT = st.integers(min_value=0, max_value=2**256 - 1)
ADDRESS = st.binary(min_size=20, max_size=20)
PAYLOAD = st.binary(min_size=0, max_size=200)

FIELDS = ["target", "value", "effective", "expiration", "gas", "nonce", "payload"]


def _pack(fields):
    return hash_operation(
        fields["target"], fields["value"], fields["effective"],
        fields["expiration"], fields["gas"], fields["nonce"], fields["payload"],
    )


@st.composite
def operation_fields(draw):
    return {
        "target": draw(ADDRESS),
        "value": draw(UINT),
        "effective": draw(UINT),
        "expiration": draw(UINT),
        "gas": draw(UINT),
        "nonce": draw(UINT),
        "payload": draw(PAYLOAD),
    }


def _flip_byte(value, index):
    if isinstance(value, bytes):
        buf = bytearray(value)
        buf[index % len(buf)] ^= 0xFF
        return bytes(buf)
    word = bytearray(value.to_bytes(32, "big"))
    word[index % 32] ^= 0xFF
    return int.from_bytes(word, "big")


def test_keccak_known_vector():
    assert keccak256(b"").hex() == (
        "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    )


def test_packing_layout():
    packed = encode_packed(b"\x11" * 20, 1, 2, 3, 4, 5, b"\xde\xad")
    assert len(packed) == 20 + 5 * 32 + 2
    assert packed[:20] == b"\x11" * 20
    assert packed[20:52] == (1).to_bytes(32, "big")
    assert packed[-2:] == b"\xde\xad"
    assert hash_operation(b"\x11" * 20, 1, 2, 3, 4, 5, b"\xde\xad") == keccak256(packed)


@settings(max_examples=200, deadline=None)
@given(operation_fields())
def test_hash_is_deterministic(fields):
    assert _pack(fields) == _pack(dict(fields))


@settings(max_examples=300, deadline=None)
@given(operation_fields(), st.sampled_from(FIELDS), st.integers(min_value=0, max_value=10_000))
def test_any_single_byte_change_changes_hash(fields, name, index):
    if name == "payload" and not fields["payload"]:
        fields["payload"] = b"\x00"
    mutated = dict(fields)
    mutated[name] = _flip_byte(fields[name], index)
    assert _pack(mutated) != _pack(fields)


@given(operation_fields())
def test_check_code_is_low_eight_bytes(fields):
    h = _pack(fields)
    assert hash_check_code(h) == int.from_bytes(h[24:], "big")
    assert 0 <= hash_check_code(h) < 2**64


def test_rejects_short_target():
    with pytest.raises(ValueError, match="20 bytes"):
        hash_operation(b"\x01" * 19, 0, 0, 1, 0, 0, b"")


def test_rejects_negative_integer():
    with pytest.raises(ValueError, match="uint256"):
        hash_operation(b"\x01" * 20, -1, 0, 1, 0, 0, b"")


def test_weight_binds_whole_key_set():
    keys = [b"\x01" * 128, b"\x02" * 128, b"\x03" * 128]
    w = derive_weight(keys[0], keys)
    assert 0 <= w < ORDER
    assert w == derive_weight(keys[0], list(keys))
    assert w != derive_weight(keys[0], keys[:2])
    assert w != derive_weight(keys[0], [keys[1], keys[0], keys[2]])
    assert w != derive_weight(keys[1], keys)
