"""
Execution of approved operations.

A batch is processed in two passes.  The validation pass checks every
entry in order (status, effective time, expiry) and aborts at the first
offending one, so no call is dispatched from a batch that fails.  The
dispatch pass then runs each operation:

    APPROVED → EXECUTING → EXECUTED | FAILED

An operation found past its expiration time is moved to ``EXPIRED``
before the batch aborts; that transition is permanent.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol, Sequence

from .errors import (
    ExecuteExpiredOperationError,
    ExecuteUnapprovedOperationError,
    ExecuteUneffectiveOperationError,
)
from .ledger import OperationLedger
from .operation import Operation, OperationStatus

logger = logging.getLogger(__name__)


class Dispatcher(Protocol):
    """Host call mechanism: deliver *payload* to *target*."""

    def __call__(
        self, target: bytes, value: int, payload: bytes, gas_limit: int,
    ) -> bool:
        ...


class ExecutionEngine:
    """
    Drives approved operations through dispatch.

    Holds no operation state of its own; records are read from and
    written back through the ledger.
    """

    def __init__(
        self,
        ledger: OperationLedger,
        dispatcher: Dispatcher,
        clock: Callable[[], int],
    ) -> None:
        self._ledger = ledger
        self._dispatch = dispatcher
        self._clock = clock

    def _check(self, op_hash: bytes, op: Optional[Operation], now: int) -> None:
        status = op.status if op is not None else OperationStatus.NONE
        if status is not OperationStatus.APPROVED:
            raise ExecuteUnapprovedOperationError(op_hash, status)
        if now < op.effective_time:
            raise ExecuteUneffectiveOperationError(op_hash, op.effective_time)
        if now >= op.expiration_time:
            self._ledger.transition(op_hash, OperationStatus.EXPIRED)
            logger.warning(
                "operation %s expired at %d (now %d)",
                op_hash.hex()[:16], op.expiration_time, now,
            )
            raise ExecuteExpiredOperationError(op_hash, op.expiration_time)

    def execute_batch(self, hashes: Sequence[bytes]) -> List[bool]:
        """
        Dispatch a batch of approved operations in order.

        Returns, per operation, whether the dispatch succeeded.  A failed
        dispatch is recorded as ``FAILED`` and is not retried.

        Raises
        ------
        ExecuteUnapprovedOperationError
            An entry is not ``APPROVED`` (or is repeated in the batch).
        ExecuteUneffectiveOperationError
            An entry's effective time has not been reached.
        ExecuteExpiredOperationError
            An entry has expired; it is now ``EXPIRED``.
        """
        now = self._clock()
        hashes = [bytes(h) for h in hashes]

        claimed = set()
        for op_hash in hashes:
            if op_hash in claimed:
                raise ExecuteUnapprovedOperationError(
                    op_hash, OperationStatus.EXECUTING,
                )
            self._check(op_hash, self._ledger.get(op_hash), now)
            claimed.add(op_hash)

        return [self._run(op_hash) for op_hash in hashes]

    def _run(self, op_hash: bytes) -> bool:
        op = self._ledger.get(op_hash)
        self._ledger.transition(op_hash, OperationStatus.EXECUTING)
        try:
            ok = bool(self._dispatch(op.target, op.value, op.payload, op.gas_limit))
        except Exception:
            logger.exception("dispatch of %s raised", op_hash.hex()[:16])
            ok = False
        if ok:
            self._ledger.transition(op_hash, OperationStatus.EXECUTED)
        else:
            logger.warning(
                "dispatch of %s to 0x%s failed",
                op_hash.hex()[:16], op.target.hex(),
            )
            self._ledger.transition(op_hash, OperationStatus.FAILED)
        return ok
