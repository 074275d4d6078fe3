"""
Protocol constants and per-wallet settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .mode import WalletMode

# ── domain tags ─────────────────────────────────────────────────────────
# message hash-to-curve, RFC 9380 suite ids
MESSAGE_DOMAIN_G1 = b"BLS_SIG_BLS12381G1_XMD:SHA-256_SSWU_RO_NUL_"
MESSAGE_DOMAIN_G2 = b"BLS_SIG_BLS12381G2_XMD:SHA-256_SSWU_RO_NUL_"

# member weight → verification point
WEIGHT_DOMAIN_G1 = b"QUORUM_WALLET_V1_WEIGHT_BLS12381G1_XMD:SHA-256_SSWU_RO_"
WEIGHT_DOMAIN_G2 = b"QUORUM_WALLET_V1_WEIGHT_BLS12381G2_XMD:SHA-256_SSWU_RO_"

# keccak prefix for weight scalars
WEIGHT_TAG = b"QUORUM_WALLET/v1/weight"

# ── operation limits ────────────────────────────────────────────────────
MIN_GAS_LIMIT = 21_000
MIN_PAYLOAD_SIZE = 4              # one function selector
HASH_CHECK_CODE_BYTES = 8
ADDRESS_BYTES = 20


@dataclass(frozen=True)
class WalletConfig:
    """
    Settings fixed for the lifetime of one wallet.

    Attributes
    ----------
    message_domain : bytes or None
        Hash-to-curve DST for operation hashes.  ``None`` selects the
        suite id of the mode's signature group.
    weight_domain : bytes or None
        Hash-to-curve DST for member verification points.
    min_gas_limit : int
        Smallest accepted ``gas_limit`` on a proposal.
    min_payload_size : int
        Smallest accepted payload length in bytes.
    """

    message_domain: Optional[bytes] = None
    weight_domain: Optional[bytes] = None
    min_gas_limit: int = MIN_GAS_LIMIT
    min_payload_size: int = MIN_PAYLOAD_SIZE

    def __post_init__(self) -> None:
        if self.min_gas_limit < 0:
            raise ValueError("min_gas_limit must be ≥ 0")
        if self.min_payload_size < 0:
            raise ValueError("min_payload_size must be ≥ 0")
        for name in ("message_domain", "weight_domain"):
            dst = getattr(self, name)
            if dst is not None and not 0 < len(dst) <= 255:
                raise ValueError(f"{name} must be 1..255 bytes")

    def message_domain_for(self, mode: WalletMode) -> bytes:
        if self.message_domain is not None:
            return self.message_domain
        if mode is WalletMode.KEYS_ON_G1:
            return MESSAGE_DOMAIN_G2
        return MESSAGE_DOMAIN_G1

    def weight_domain_for(self, mode: WalletMode) -> bytes:
        if self.weight_domain is not None:
            return self.weight_domain
        if mode is WalletMode.KEYS_ON_G1:
            return WEIGHT_DOMAIN_G2
        return WEIGHT_DOMAIN_G1
