"""
Content-addressed store of proposed operations.

Operations are keyed by their canonical hash, accepted strictly in nonce
order, and never overwritten or deleted.  Each batch call is atomic:
entries are staged in order and committed only after every entry has
passed; events are emitted on commit.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .config import WalletConfig
from .errors import (
    ChecksumMismatchError,
    InvalidNonceError,
    InvalidOperationError,
    InvalidSignatureError,
    LengthMismatchError,
    OperationExistsError,
    SignatureMismatchError,
    SignersNotEnoughError,
)
from .events import EventLog, OperationStatusChanged, StatusMismatch
from .hash import hash_check_code
from .keyset import ThresholdKeySet
from .operation import NULL_ADDRESS, Operation, OperationStatus
from .verifier import KeySet, check_signer_count, verify_signature

logger = logging.getLogger(__name__)

_UINT256_MAX = (1 << 256) - 1
_UINT_FIELDS = (
    "value", "effective_time", "expiration_time", "gas_limit", "nonce",
)


class OperationLedger:
    """
    Owner of every operation record and of the nonce counter.

    Parameters
    ----------
    keyset : MultisigKeySet or ThresholdKeySet
        Registry signatures are verified against.
    events : EventLog
        Sink for status-change events.
    clock : callable
        Returns the current time in seconds.
    config : WalletConfig
        Validation limits.
    """

    def __init__(
        self,
        keyset: KeySet,
        events: EventLog,
        clock: Callable[[], int],
        config: Optional[WalletConfig] = None,
    ) -> None:
        self._keyset = keyset
        self._events = events
        self._clock = clock
        self._config = config or WalletConfig()
        self._records: Dict[bytes, Operation] = {}
        self._nonce = 0

    # ── accessors ──────────────────────────────────────────────────────

    @property
    def nonce(self) -> int:
        return self._nonce

    def get(self, operation_hash: bytes) -> Optional[Operation]:
        return self._records.get(bytes(operation_hash))

    def status_of(self, operation_hash: bytes) -> OperationStatus:
        op = self.get(operation_hash)
        return op.status if op is not None else OperationStatus.NONE

    def __contains__(self, operation_hash: bytes) -> bool:
        return bytes(operation_hash) in self._records

    def __len__(self) -> int:
        return len(self._records)

    # ── internal transitions (used by the execution engine) ────────────

    def transition(
        self, operation_hash: bytes, new: OperationStatus,
    ) -> OperationStatus:
        """Move a stored operation to *new* and emit the change."""
        op = self._records[operation_hash]
        old = op.status
        op.status = new
        self._events.emit(OperationStatusChanged(operation_hash, old, new))
        return old

    # ── submission ─────────────────────────────────────────────────────

    def _has_quorum_list(self, signers: Sequence[bytes]) -> bool:
        if isinstance(self._keyset, ThresholdKeySet):
            return len(signers) >= self._keyset.threshold
        return True

    @staticmethod
    def _check_encodable(op: Operation) -> None:
        if op.target == NULL_ADDRESS:
            raise InvalidOperationError("target is the null address")
        for name in _UINT_FIELDS:
            v = getattr(op, name)
            if isinstance(v, bool) or not isinstance(v, int) or not 0 <= v <= _UINT256_MAX:
                raise InvalidOperationError(f"{name} must be a uint256", f"{name}={v!r}")

    def _validate(self, op: Operation, expected_nonce: int, now: int) -> None:
        cfg = self._config
        if op.expiration_time <= op.effective_time:
            raise InvalidOperationError(
                "expiration time must be after effective time",
                f"effective={op.effective_time} expiration={op.expiration_time}",
            )
        if op.expiration_time <= now:
            raise InvalidOperationError(
                "expiration time is not in the future",
                f"expiration={op.expiration_time} now={now}",
            )
        if op.gas_limit < cfg.min_gas_limit:
            raise InvalidOperationError(
                f"gas limit below minimum {cfg.min_gas_limit}",
                f"gas_limit={op.gas_limit}",
            )
        if op.nonce != expected_nonce:
            raise InvalidNonceError(expected_nonce, op.nonce)
        if op.hash_check_code == 0:
            raise InvalidOperationError("hash check code is empty")
        if len(op.payload) < cfg.min_payload_size:
            raise InvalidOperationError(
                f"payload shorter than {cfg.min_payload_size} bytes",
                f"len={len(op.payload)}",
            )
        sig_len = self._keyset.mode.signature_bytes
        if op.signature and len(op.signature) != sig_len:
            raise InvalidSignatureError(
                f"signature must be {sig_len} bytes, got {len(op.signature)}"
            )
        if op.signers and not self._has_quorum_list(op.signers):
            raise SignersNotEnoughError(len(op.signers), self._keyset.threshold)

    def submit(self, operations: Iterable[Operation]) -> List[bytes]:
        """
        Register a batch of proposals in nonce order.

        An operation carrying a signature (and, for threshold wallets, a
        signer list of at least *M* keys) is verified inline and stored
        as ``APPROVED``; everything else is stored as ``PENDING``.

        Returns the operation hashes in submission order.

        Raises
        ------
        InvalidOperationError, InvalidNonceError, InvalidSignatureError,
        SignersNotEnoughError, ChecksumMismatchError, OperationExistsError,
        SignatureMismatchError
            The first offending entry aborts the whole batch.
        """
        now = self._clock()
        nonce = self._nonce
        staged: Dict[bytes, Operation] = {}
        order: List[bytes] = []

        for proposal in operations:
            self._check_encodable(proposal)
            op_hash = proposal.hash
            # a replayed hash is refused as such, whatever else is stale
            if op_hash in self._records or op_hash in staged:
                raise OperationExistsError(op_hash)

            self._validate(proposal, nonce, now)
            computed = hash_check_code(op_hash)
            if proposal.hash_check_code != computed:
                raise ChecksumMismatchError(proposal.hash_check_code, computed)

            record = dataclasses.replace(proposal, status=OperationStatus.PENDING)
            if record.signature and self._has_quorum_list(record.signers):
                if not verify_signature(
                    self._keyset, op_hash, record.signature, record.signers,
                ):
                    raise SignatureMismatchError(op_hash)
                record.status = OperationStatus.APPROVED
            else:
                # signatures are only kept once they verify
                record.signature = b""
                record.signers = ()

            staged[op_hash] = record
            order.append(op_hash)
            nonce += 1

        # commit
        self._records.update(staged)
        self._nonce = nonce
        for op_hash in order:
            self._events.emit(OperationStatusChanged(
                op_hash, OperationStatus.NONE, staged[op_hash].status,
            ))
        logger.debug("accepted %d operations, nonce now %d", len(order), nonce)
        return order

    # ── deferred verification ──────────────────────────────────────────

    def verify_batch(
        self,
        hashes: Sequence[bytes],
        signatures: Sequence[bytes],
        signer_lists: Optional[Sequence[Sequence[bytes]]] = None,
    ) -> List[bool]:
        """
        Attach signatures collected after proposal.

        Per entry: ``PENDING`` → ``APPROVED`` when the signature verifies,
        ``PENDING`` → ``REJECTED`` when it does not.  Unknown operations
        and operations outside ``PENDING`` yield ``False`` with no state
        change (the latter also emits ``StatusMismatch``).

        A signature is stored only together with ``APPROVED``: ``submit``
        drops any signature it could not verify inline, so every
        ``PENDING`` record is unsigned and can still take one here.

        Raises
        ------
        LengthMismatchError
            Parallel arrays differ in length.
        InvalidSignatureError, SignersNotEnoughError, DuplicateSignerError,
        UnrecognizedSignerError
            Malformed input in any entry aborts the whole batch.
        """
        if len(hashes) != len(signatures):
            raise LengthMismatchError(len(hashes), len(signatures), "hashes and signatures")
        if signer_lists is None:
            signer_lists = [()] * len(hashes)
        elif len(signer_lists) != len(hashes):
            raise LengthMismatchError(len(hashes), len(signer_lists), "hashes and signer lists")

        results: List[bool] = []
        # (hash, new status or None for a mismatch, signature, signers, seen status)
        staged: List[Tuple[bytes, Optional[OperationStatus], bytes, Tuple[bytes, ...], OperationStatus]] = []
        projected: Dict[bytes, OperationStatus] = {}

        for op_hash, sig, signers in zip(hashes, signatures, signer_lists):
            op_hash = bytes(op_hash)
            signers = tuple(bytes(s) for s in signers)
            op = self._records.get(op_hash)
            if op is None:
                results.append(False)
                continue
            status = projected.get(op_hash, op.status)
            if status is not OperationStatus.PENDING:
                staged.append((op_hash, None, b"", (), status))
                results.append(False)
                continue

            check_signer_count(self._keyset, signers)
            ok = verify_signature(self._keyset, op_hash, sig, signers)
            new = OperationStatus.APPROVED if ok else OperationStatus.REJECTED
            if ok:
                staged.append((op_hash, new, bytes(sig), signers, status))
            else:
                staged.append((op_hash, new, b"", (), status))
            projected[op_hash] = new
            results.append(ok)

        # commit
        for op_hash, new, sig, signers, seen in staged:
            if new is None:
                self._events.emit(StatusMismatch(
                    op_hash, OperationStatus.PENDING, seen,
                ))
                continue
            op = self._records[op_hash]
            op.signature = sig
            op.signers = signers
            self.transition(op_hash, new)
        return results
