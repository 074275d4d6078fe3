"""
High-level governance wallet.

Provides a single ``GovernanceWallet`` class that ties together the key
registry, the operation ledger and the execution engine behind the three
batch calls, each run under the wallet's execution lock.

Usage
-----
::

    from quorum_wallet import GovernanceWallet, WalletMode

    wallet = GovernanceWallet.setup_threshold(
        WalletMode.KEYS_ON_G2, public_keys, member_ids, threshold=2,
        dispatcher=host_call,
    )

    [h] = wallet.submit([operation])               # PENDING
    wallet.verify_batch([h], [signature], [signers])  # APPROVED
    wallet.execute_batch([h])                      # EXECUTED / FAILED
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from .config import WalletConfig
from .engine import Dispatcher, ExecutionEngine
from .errors import ReentrantCallError
from .events import EventLog, KeySetInitialized
from .keyset import MemberRecord, MultisigKeySet, ThresholdKeySet
from .ledger import OperationLedger
from .mode import WalletMode
from .operation import Operation, OperationStatus
from .verifier import KeySet

logger = logging.getLogger(__name__)


def system_clock() -> int:
    return int(time.time())


class GovernanceWallet:
    """
    Quorum-authorised operation wallet.

    Encapsulates the full lifecycle:
    1. Setup — register a multisig or threshold key set.
    2. Submit — record proposals in nonce order (optionally pre-signed).
    3. Verify — attach signatures collected after proposal.
    4. Execute — dispatch approved, effective, unexpired operations.
    """

    def __init__(
        self,
        keyset: KeySet,
        dispatcher: Dispatcher,
        *,
        clock: Callable[[], int] = system_clock,
        config: Optional[WalletConfig] = None,
        events: Optional[EventLog] = None,
    ) -> None:
        self._keyset = keyset
        self._config = config or WalletConfig()
        self._clock = clock
        self._events = events if events is not None else EventLog()
        self._ledger = OperationLedger(keyset, self._events, clock, self._config)
        self._engine = ExecutionEngine(self._ledger, dispatcher, clock)
        self._lock = threading.Lock()

        num_members = (
            keyset.num_members if isinstance(keyset, ThresholdKeySet) else 0
        )
        self._events.emit(KeySetInitialized(
            mode=keyset.mode,
            num_members=num_members,
            threshold=keyset.threshold,
            aggregated_key=keyset.aggregated_key.to_bytes(),
        ))

    # ── factories ──────────────────────────────────────────────────────

    @classmethod
    def setup_multisig(
        cls,
        mode: WalletMode,
        public_key: bytes,
        dispatcher: Dispatcher,
        **kwargs,
    ) -> GovernanceWallet:
        """N-of-N wallet over a pre-aggregated public key."""
        keyset = MultisigKeySet.create(mode, public_key, kwargs.get("config"))
        return cls(keyset, dispatcher, **kwargs)

    @classmethod
    def setup_threshold(
        cls,
        mode: WalletMode,
        public_keys: Sequence[bytes],
        member_ids: Sequence[bytes],
        threshold: int,
        dispatcher: Dispatcher,
        **kwargs,
    ) -> GovernanceWallet:
        """M-of-N wallet over per-member keys and member ids."""
        keyset = ThresholdKeySet.create(
            mode, public_keys, member_ids, threshold, kwargs.get("config"),
        )
        return cls(keyset, dispatcher, **kwargs)

    # ── execution lock ─────────────────────────────────────────────────

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        """Hold the execution lock for one top-level call."""
        if not self._lock.acquire(blocking=False):
            logger.warning("re-entrant wallet call rejected")
            raise ReentrantCallError()
        try:
            yield
        finally:
            self._lock.release()

    # ── batch calls ────────────────────────────────────────────────────

    def submit(self, operations: Iterable[Operation]) -> List[bytes]:
        """Register proposals; see ``OperationLedger.submit``."""
        with self._exclusive():
            return self._ledger.submit(operations)

    def verify_batch(
        self,
        hashes: Sequence[bytes],
        signatures: Sequence[bytes],
        signer_lists: Optional[Sequence[Sequence[bytes]]] = None,
    ) -> List[bool]:
        """Attach late signatures; see ``OperationLedger.verify_batch``."""
        with self._exclusive():
            return self._ledger.verify_batch(hashes, signatures, signer_lists)

    def execute_batch(self, hashes: Sequence[bytes]) -> List[bool]:
        """Dispatch approved operations; see ``ExecutionEngine.execute_batch``."""
        with self._exclusive():
            return self._engine.execute_batch(hashes)

    # ── accessors ──────────────────────────────────────────────────────

    @property
    def mode(self) -> WalletMode:
        return self._keyset.mode

    @property
    def keyset(self) -> KeySet:
        return self._keyset

    @property
    def threshold(self) -> int:
        """Minimum named signers (0 for multisig)."""
        return self._keyset.threshold

    @property
    def aggregated_key(self) -> bytes:
        return self._keyset.aggregated_key.to_bytes()

    @property
    def nonce(self) -> int:
        return self._ledger.nonce

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def now(self) -> int:
        return self._clock()

    def get_operation(self, operation_hash: bytes) -> Optional[Operation]:
        """Snapshot of a stored operation (the ledger keeps the record)."""
        op = self._ledger.get(operation_hash)
        return dataclasses.replace(op) if op is not None else None

    def status_of(self, operation_hash: bytes) -> OperationStatus:
        return self._ledger.status_of(operation_hash)

    def member_record(self, public_key: bytes) -> Optional[MemberRecord]:
        if isinstance(self._keyset, ThresholdKeySet):
            return self._keyset.member(public_key)
        return None

    def __repr__(self) -> str:
        kind = (
            f"{self._keyset.threshold}-of-{self._keyset.num_members}"
            if isinstance(self._keyset, ThresholdKeySet) else "multisig"
        )
        return f"GovernanceWallet({kind}, mode={self.mode.name}, nonce={self.nonce})"
