"""
Curve-role assignment for a wallet.

A wallet runs in exactly one of two modes: public keys on G1 with
signatures on G2, or the mirror image.  Everything that depends on the
choice (encoded sizes, which group a message is hashed into, the order
of arguments inside a pairing) is answered here, so the key-set and
verifier code is written once in terms of a *key side* and a
*signature side*.
"""

from __future__ import annotations

from enum import Enum
from typing import Tuple, Type

from .curve import G1Point, G2Point, _GroupPoint


class WalletMode(Enum):
    UNKNOWN = 0
    KEYS_ON_G1 = 1
    KEYS_ON_G2 = 2

    def _require_known(self) -> None:
        if self is WalletMode.UNKNOWN:
            raise ValueError("wallet mode is not set")

    @property
    def key_group(self) -> Type[_GroupPoint]:
        """Group carrying public keys (and the aggregated key)."""
        self._require_known()
        return G1Point if self is WalletMode.KEYS_ON_G1 else G2Point

    @property
    def signature_group(self) -> Type[_GroupPoint]:
        """Group carrying signatures, message hashes and member points."""
        self._require_known()
        return G2Point if self is WalletMode.KEYS_ON_G1 else G1Point

    @property
    def public_key_bytes(self) -> int:
        return self.key_group.ENCODED_BYTES

    @property
    def signature_bytes(self) -> int:
        return self.signature_group.ENCODED_BYTES

    def pair(self, key_side, signature_side) -> Tuple[G1Point, G2Point]:
        """Order a (key-group, signature-group) couple as (G1, G2)."""
        if self is WalletMode.KEYS_ON_G1:
            return (key_side, signature_side)
        self._require_known()
        return (signature_side, key_side)
