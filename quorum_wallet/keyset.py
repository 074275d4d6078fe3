"""
Registered key sets.

Multisig (N-of-N)
-----------------
A single aggregated key  apk = Σ pk_i  registered as-is.  Members are
implicit in the sum and can never change.

Threshold (M-of-N)
------------------
Each member *i* with key  pk_i = sk_i · g  is assigned

    w_i  = H(pk_i ‖ pk_1 ‖ … ‖ pk_n)  mod r        (weight)
    V_i  = HashToCurve(w_i)                        (verification point)

on the signature group, and the wallet key is

    apk  = Σ w_i · pk_i .

Before registration the members run an endorsement round: holder *j*
sends  (w_j · sk_j) · V_i  to holder *i*, who sums them into its member
id  mk_i = (Σ w_j sk_j) · V_i .  Registration checks every member id
against the aggregated key:

    e(g, mk_i)  ==  e(apk, V_i)

so each mk_i provably carries the secret of the *whole* key set.  The
check runs once here and never again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence

from .config import WalletConfig
from .curve import Point, PointDecodingError, pairing_check
from .errors import (
    ConfigurationError,
    DuplicatePublicKeyError,
    DuplicateSignerError,
    EmptyPublicKeyError,
    InvalidPublicKeyError,
    InvalidSignatureError,
    LengthMismatchError,
    ThresholdOutOfRangeError,
    UnrecognizedSignerError,
)
from .hash import derive_weight, hash_public_key, weight_to_bytes
from .mode import WalletMode

logger = logging.getLogger(__name__)


def _require_mode(mode: WalletMode) -> None:
    if not isinstance(mode, WalletMode) or mode is WalletMode.UNKNOWN:
        raise ConfigurationError(f"unsupported wallet mode {mode!r}")


def decode_public_key(mode: WalletMode, data: bytes) -> Point:
    """Decode one key on the mode's key group; the identity is rejected."""
    expected = mode.public_key_bytes
    if len(data) != expected:
        raise InvalidPublicKeyError(
            f"public key must be {expected} bytes, got {len(data)}"
        )
    try:
        pk = mode.key_group.from_bytes(data)
    except PointDecodingError as exc:
        raise InvalidPublicKeyError(str(exc)) from exc
    if pk.is_inf():
        raise InvalidPublicKeyError("public key is the point at infinity")
    return pk


def derive_verification_point(mode: WalletMode, weight: int, domain: bytes) -> Point:
    """V = HashToCurve(domain, w) on the signature group."""
    return mode.signature_group.hash_to_point(weight_to_bytes(weight), domain)


# ── multisig ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MultisigKeySet:
    """N-of-N key set: a single pre-aggregated public key."""

    mode: WalletMode
    aggregated_key: Point
    message_domain: bytes

    @classmethod
    def create(
        cls,
        mode: WalletMode,
        public_key: bytes,
        config: Optional[WalletConfig] = None,
    ) -> MultisigKeySet:
        """
        Register the aggregated key of all N holders.

        Raises ``InvalidPublicKeyError`` on a malformed encoding.
        """
        _require_mode(mode)
        config = config or WalletConfig()
        apk = decode_public_key(mode, bytes(public_key))
        logger.info("multisig key set registered (mode=%s)", mode.name)
        return cls(
            mode=mode,
            aggregated_key=apk,
            message_domain=config.message_domain_for(mode),
        )

    @property
    def threshold(self) -> int:
        return 0


# ── threshold ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MemberRecord:
    """Registry entry for one threshold member."""

    public_key: Point
    weight: int
    verification_point: Point
    member_id_point: Point


@dataclass(frozen=True)
class ThresholdKeySet:
    """
    M-of-N key set with per-member records.

    Attributes
    ----------
    mode : WalletMode
        Curve-role assignment.
    threshold : int
        Minimum number of named signers *M*.
    aggregated_key : G1Point | G2Point
        apk = Σ w_i · pk_i  on the key group.
    members : Mapping[bytes, MemberRecord]
        Records keyed by ``keccak256(public_key_bytes)``.
    """

    mode: WalletMode
    threshold: int
    aggregated_key: Point
    message_domain: bytes
    weight_domain: bytes
    members: Mapping[bytes, MemberRecord] = field(repr=False)

    @classmethod
    def create(
        cls,
        mode: WalletMode,
        public_keys: Sequence[bytes],
        member_ids: Sequence[bytes],
        threshold: int,
        config: Optional[WalletConfig] = None,
    ) -> ThresholdKeySet:
        """
        Validate and register a threshold key set.

        All-or-nothing: any failure raises before a key set exists.

        Raises
        ------
        EmptyPublicKeyError, LengthMismatchError, ThresholdOutOfRangeError,
        DuplicatePublicKeyError, InvalidPublicKeyError
            Malformed configuration.
        InvalidSignatureError
            A member id is malformed or fails the registration pairing.
        """
        _require_mode(mode)
        config = config or WalletConfig()
        public_keys = [bytes(pk) for pk in public_keys]
        member_ids = [bytes(mid) for mid in member_ids]

        n = len(public_keys)
        if n == 0:
            raise EmptyPublicKeyError()
        if len(member_ids) != n:
            raise LengthMismatchError(n, len(member_ids), "public keys and member ids")
        if not 1 <= threshold <= n:
            raise ThresholdOutOfRangeError(threshold, n)
        if len(set(public_keys)) != n:
            raise DuplicatePublicKeyError("public key listed more than once")

        weight_domain = config.weight_domain_for(mode)
        sig_group = mode.signature_group

        keys = [decode_public_key(mode, pk) for pk in public_keys]
        weights = [derive_weight(pk, public_keys) for pk in public_keys]
        v_points = [
            derive_verification_point(mode, w, weight_domain) for w in weights
        ]

        mk_points = []
        for idx, mid in enumerate(member_ids):
            if len(mid) != sig_group.ENCODED_BYTES:
                raise InvalidSignatureError(
                    f"member id must be {sig_group.ENCODED_BYTES} bytes, "
                    f"got {len(mid)}",
                    f"member {idx}",
                )
            try:
                mk_points.append(sig_group.from_bytes(mid))
            except PointDecodingError as exc:
                raise InvalidSignatureError(str(exc), f"member {idx}") from exc

        apk = mode.key_group.multi_scalar(weights, keys)

        # e(g, mk_i) == e(apk, V_i)   ⇔   e(-g, mk_i) · e(apk, V_i) == 1
        neg_g = -mode.key_group.generator()
        for idx, (mk, v) in enumerate(zip(mk_points, v_points)):
            if not pairing_check([
                mode.pair(neg_g, mk),
                mode.pair(apk, v),
            ]):
                raise InvalidSignatureError(
                    "Member ID does not match public key", f"member {idx}",
                )

        members: Dict[bytes, MemberRecord] = {}
        for raw, pk, w, v, mk in zip(public_keys, keys, weights, v_points, mk_points):
            members[hash_public_key(raw)] = MemberRecord(
                public_key=pk,
                weight=w,
                verification_point=v,
                member_id_point=mk,
            )

        logger.info(
            "threshold key set registered (mode=%s, %d-of-%d)",
            mode.name, threshold, n,
        )
        return cls(
            mode=mode,
            threshold=threshold,
            aggregated_key=apk,
            message_domain=config.message_domain_for(mode),
            weight_domain=weight_domain,
            members=MappingProxyType(members),
        )

    @property
    def num_members(self) -> int:
        return len(self.members)

    def member(self, public_key: bytes) -> Optional[MemberRecord]:
        return self.members.get(hash_public_key(bytes(public_key)))

    def is_member(self, public_key: bytes) -> bool:
        return self.member(public_key) is not None

    def records_for(self, signers: Sequence[bytes]) -> List[MemberRecord]:
        """Look up records for a signer list, in order."""
        seen = set()
        out: List[MemberRecord] = []
        for raw in signers:
            key_hash = hash_public_key(bytes(raw))
            if key_hash in seen:
                raise DuplicateSignerError(key_hash)
            seen.add(key_hash)
            record = self.members.get(key_hash)
            if record is None:
                raise UnrecognizedSignerError(key_hash)
            out.append(record)
        return out
