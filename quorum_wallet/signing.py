"""
Off-chain key-holder tooling.

Everything a co-signer needs to produce proofs the wallet accepts:

**Multisig**

    pk_i = sk_i · g            σ_i = sk_i · H(m)
    apk  = Σ pk_i              σ   = Σ σ_i

**Threshold setup (endorsement round)**

    w_i  = H(pk_i ‖ pk_1 ‖ … ‖ pk_n)     V_i = HashToCurve(w_i)
    holder j → holder i :   (w_j · sk_j) · V_i
    mk_i = Σ_j (w_j · sk_j) · V_i        (member id)

**Threshold signing** for a named set S with |S| ≥ M:

    σ_i = sk_i · H(m) + mk_i            σ = Σ_{i∈S} σ_i

Secrets never leave their ``KeyHolder``; only endorsements and partial
signatures (group elements) are exchanged.
"""

from __future__ import annotations

import secrets
from functools import cached_property
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .config import WalletConfig
from .curve import ORDER
from .hash import derive_weight
from .keyset import derive_verification_point
from .mode import WalletMode


# ── key holder ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class KeyHolder:
    """A single member's BLS key pair on the mode's key group."""

    mode: WalletMode
    secret: int = field(repr=False)

    def __post_init__(self) -> None:
        if not 0 < self.secret < ORDER:
            raise ValueError("secret scalar out of range")

    @classmethod
    def generate(cls, mode: WalletMode) -> KeyHolder:
        """Uniform secret in [1, r-1]."""
        return cls(mode, secrets.randbelow(ORDER - 1) + 1)

    @cached_property
    def public_key(self):
        return self.mode.key_group.from_scalar(self.secret)

    @property
    def public_key_bytes(self) -> bytes:
        return self.public_key.to_bytes()

    def sign(self, message: bytes, domain: bytes):
        """Plain BLS share  sk · H(m)."""
        h_m = self.mode.signature_group.hash_to_point(message, domain)
        return h_m * self.secret

    def endorse(self, own_weight: int, verification_point):
        """Contribution  (w_self · sk) · V_target  to another member's id."""
        return verification_point * ((own_weight * self.secret) % ORDER)

    def sign_threshold(self, message: bytes, member_id, domain: bytes):
        """Threshold share  sk · H(m) + mk."""
        return self.sign(message, domain) + member_id


# ── aggregation ─────────────────────────────────────────────────────────

def aggregate_public_keys(mode: WalletMode, public_keys: Sequence[bytes]) -> bytes:
    """apk = Σ pk_i, the key registered by a multisig wallet."""
    group = mode.key_group
    return group.sum_points(group.from_bytes(pk) for pk in public_keys).to_bytes()


def aggregate_signatures(mode: WalletMode, shares: Sequence) -> bytes:
    """σ = Σ σ_i over decoded shares or their encodings."""
    group = mode.signature_group
    points = [
        group.from_bytes(s) if isinstance(s, (bytes, bytearray)) else s
        for s in shares
    ]
    return group.sum_points(points).to_bytes()


def multisig_sign(
    holders: Sequence[KeyHolder],
    message: bytes,
    config: Optional[WalletConfig] = None,
) -> bytes:
    """Aggregate signature of every holder over *message*."""
    if not holders:
        raise ValueError("need at least one holder")
    mode = holders[0].mode
    domain = (config or WalletConfig()).message_domain_for(mode)
    return aggregate_signatures(mode, [h.sign(message, domain) for h in holders])


# ── threshold group ─────────────────────────────────────────────────────

@dataclass
class ThresholdGroup:
    """
    Output of the threshold setup round.

    Attributes
    ----------
    mode : WalletMode
        Curve-role assignment.
    threshold : int
        Minimum number of signers *M*.
    holders : list[KeyHolder]
        Members in registration order.
    member_ids : list
        mk_i per member, on the signature group.
    """

    mode: WalletMode
    threshold: int
    holders: List[KeyHolder]
    member_ids: List
    config: WalletConfig = field(default_factory=WalletConfig)

    @classmethod
    def setup(
        cls,
        mode: WalletMode,
        n: int,
        threshold: int,
        config: Optional[WalletConfig] = None,
        holders: Optional[Sequence[KeyHolder]] = None,
    ) -> ThresholdGroup:
        """
        Generate *n* key holders (unless given) and run the endorsement
        round that produces every member id.
        """
        config = config or WalletConfig()
        if holders is None:
            holders = [KeyHolder.generate(mode) for _ in range(n)]
        holders = list(holders)
        if len(holders) != n:
            raise ValueError(f"expected {n} holders, got {len(holders)}")
        if not 1 <= threshold <= n:
            raise ValueError(f"threshold {threshold} not in [1, {n}]")

        pk_bytes = [h.public_key_bytes for h in holders]
        weights = [derive_weight(pk, pk_bytes) for pk in pk_bytes]
        domain = config.weight_domain_for(mode)
        v_points = [derive_verification_point(mode, w, domain) for w in weights]

        member_ids = []
        for v_i in v_points:
            endorsements = [
                h_j.endorse(w_j, v_i) for h_j, w_j in zip(holders, weights)
            ]
            member_ids.append(mode.signature_group.sum_points(endorsements))

        return cls(
            mode=mode,
            threshold=threshold,
            holders=holders,
            member_ids=member_ids,
            config=config,
        )

    @property
    def public_keys(self) -> List[bytes]:
        return [h.public_key_bytes for h in self.holders]

    @property
    def member_id_bytes(self) -> List[bytes]:
        return [mk.to_bytes() for mk in self.member_ids]

    def partial_sign(self, index: int, message: bytes):
        """Member *index*'s share  σ_i = sk_i · H(m) + mk_i."""
        domain = self.config.message_domain_for(self.mode)
        return self.holders[index].sign_threshold(
            message, self.member_ids[index], domain,
        )

    def sign(
        self, message: bytes, indices: Sequence[int],
    ) -> Tuple[bytes, List[bytes]]:
        """
        Threshold signature of the members at *indices*.

        Returns ``(signature, signer_public_keys)`` ready to hand to
        ``GovernanceWallet.verify_batch``.  No cardinality check is made
        here; the wallet enforces *M*.
        """
        shares = [self.partial_sign(i, message) for i in indices]
        signers = [self.holders[i].public_key_bytes for i in indices]
        return aggregate_signatures(self.mode, shares), signers
