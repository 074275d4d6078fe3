"""
keccak-256 hashing for the wallet.

Every byte layout here is part of the wire format: co-signers compute
the same operation hash off-line and sign it, so the packing must be
reproduced bit for bit.

Packing follows ``abi.encodePacked``: addresses as 20 raw bytes,
integers as 32-byte big-endian words, byte strings verbatim.
"""

from __future__ import annotations

from typing import Any, Sequence

from Crypto.Hash import keccak

from .config import ADDRESS_BYTES, HASH_CHECK_CODE_BYTES, WEIGHT_TAG
from .curve import ORDER, SCALAR_BYTES

WORD_BYTES = 32
_UINT256_MAX = (1 << 256) - 1


def keccak256(*parts: bytes) -> bytes:
    h = keccak.new(digest_bits=256)
    for p in parts:
        h.update(p)
    return h.digest()


def _encode_item(item: Any) -> bytes:
    """Packed encoding of one protocol element."""
    if isinstance(item, (bytes, bytearray)):
        return bytes(item)
    if isinstance(item, bool):
        raise TypeError("bool is not a packable integer")
    if isinstance(item, int):
        if not 0 <= item <= _UINT256_MAX:
            raise ValueError(f"integer {item} does not fit in uint256")
        return item.to_bytes(WORD_BYTES, "big")
    raise TypeError(f"cannot pack {type(item).__name__}")


def encode_packed(*args: Any) -> bytes:
    return b"".join(_encode_item(a) for a in args)


# ── operation identity ──────────────────────────────────────────────────

def hash_operation(
    target: bytes,
    value: int,
    effective_time: int,
    expiration_time: int,
    gas_limit: int,
    nonce: int,
    payload: bytes,
) -> bytes:
    r"""
    Canonical operation hash.

        keccak256(target ‖ value ‖ effective ‖ expiration ‖ gas ‖ nonce ‖ payload)

    This is the message co-signers sign.
    """
    if len(target) != ADDRESS_BYTES:
        raise ValueError(f"target must be {ADDRESS_BYTES} bytes, got {len(target)}")
    return keccak256(encode_packed(
        target, value, effective_time, expiration_time, gas_limit, nonce,
        payload,
    ))


def hash_check_code(operation_hash: bytes) -> int:
    """Low 8 bytes of the operation hash, i.e. ``uint64(uint256(h))``."""
    return int.from_bytes(operation_hash[-HASH_CHECK_CODE_BYTES:], "big")


# ── key material ────────────────────────────────────────────────────────

def hash_public_key(public_key: bytes) -> bytes:
    """Registry key for a member record."""
    return keccak256(public_key)


def derive_weight(public_key: bytes, all_public_keys: Sequence[bytes]) -> int:
    r"""
    Member weight  w_i = H(tag ‖ pk_i ‖ pk_1 ‖ … ‖ pk_n)  mod r.

    Committing to the whole key set stops a member from choosing a key
    after seeing the others (rogue-key cancellation).
    """
    digest = keccak256(WEIGHT_TAG, public_key, *all_public_keys)
    return int.from_bytes(digest, "big") % ORDER


def weight_to_bytes(weight: int) -> bytes:
    return weight.to_bytes(SCALAR_BYTES, "big")
