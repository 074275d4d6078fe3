"""
Aggregate and threshold BLS verification.

Both equations are written with the mode's *key side* and *signature
side*; ``WalletMode.pair`` puts each couple in (G1, G2) order.

Multisig:

    e(-g, σ) · e(apk, H(m))  ==  1

Threshold, for the named signer set S:

    e(-g, σ) · e(Σ_S pk_i, H(m)) · e(apk, Σ_S V_i)  ==  1

An honest threshold signature is  σ = Σ_S (sk_i · H(m) + mk_i);
expanding  mk_i = a · V_i  with  apk = a · g  balances the product.
The threshold *M* is only a cardinality precondition; the algebra
itself accepts any named subset whose contributions balance.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from .curve import PointDecodingError, pairing_check
from .errors import InvalidSignatureError, SignersNotEnoughError
from .keyset import MultisigKeySet, ThresholdKeySet
from .mode import WalletMode

logger = logging.getLogger(__name__)

KeySet = Union[MultisigKeySet, ThresholdKeySet]


def decode_signature(mode: WalletMode, signature: bytes):
    """Decode a signature on the mode's signature group."""
    expected = mode.signature_bytes
    if len(signature) != expected:
        raise InvalidSignatureError(
            f"signature must be {expected} bytes, got {len(signature)}"
        )
    try:
        return mode.signature_group.from_bytes(bytes(signature))
    except PointDecodingError as exc:
        raise InvalidSignatureError(str(exc)) from exc


def check_signer_count(keyset: KeySet, signers: Optional[Sequence[bytes]]) -> None:
    """Raise ``SignersNotEnoughError`` if fewer than *M* signers are named."""
    if isinstance(keyset, ThresholdKeySet):
        got = len(signers or ())
        if got < keyset.threshold:
            raise SignersNotEnoughError(got, keyset.threshold)


def verify_signature(
    keyset: KeySet,
    message: bytes,
    signature: bytes,
    signers: Optional[Sequence[bytes]] = None,
) -> bool:
    """
    Verify *signature* over *message* against a registered key set.

    Parameters
    ----------
    keyset : MultisigKeySet or ThresholdKeySet
        The wallet's registry.
    message : bytes
        The operation hash.
    signature : bytes
        Encoded aggregate / threshold signature.
    signers : list[bytes] or None
        Encoded public keys of the participating members (threshold
        only; ignored for multisig).

    Returns ``False`` for a well-formed signature that does not verify.

    Raises
    ------
    InvalidSignatureError
        Malformed signature encoding.
    SignersNotEnoughError, DuplicateSignerError, UnrecognizedSignerError
        Unusable signer list (threshold only).
    """
    mode = keyset.mode
    if isinstance(keyset, ThresholdKeySet):
        check_signer_count(keyset, signers)
        records = keyset.records_for(signers)
    sigma = decode_signature(mode, signature)

    key_group = mode.key_group
    h_m = mode.signature_group.hash_to_point(message, keyset.message_domain)
    neg_g = -key_group.generator()

    if isinstance(keyset, ThresholdKeySet):
        pk_sum = key_group.sum_points(r.public_key for r in records)
        v_sum = mode.signature_group.sum_points(
            r.verification_point for r in records
        )
        pairs = [
            mode.pair(neg_g, sigma),
            mode.pair(pk_sum, h_m),
            mode.pair(keyset.aggregated_key, v_sum),
        ]
    else:
        pairs = [
            mode.pair(neg_g, sigma),
            mode.pair(keyset.aggregated_key, h_m),
        ]

    ok = pairing_check(pairs)
    logger.debug(
        "signature over %s %s (%s, %d pairs)",
        message.hex()[:16], "accepted" if ok else "rejected",
        mode.name, len(pairs),
    )
    return ok
