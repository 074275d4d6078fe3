"""
quorum_wallet: BLS quorum-authorised governance wallet.

A wallet that dispatches arbitrary external operations only after a
quorum of key holders has signed the operation hash:

- **multisig** (N-of-N) over a single aggregated BLS key
- **threshold** (M-of-N) over per-member weights and member ids, where
  any named subset of at least M holders can produce a valid proof
- **replay-safe lifecycle**: strict nonce order, content-addressed
  records, effective / expiration windows, non-reentrant execution

Keys and signatures live on BLS12-381; either group may carry the keys.

Quick start
-----------
::

    from quorum_wallet import (
        GovernanceWallet, Operation, ThresholdGroup, WalletMode,
    )

    group = ThresholdGroup.setup(WalletMode.KEYS_ON_G1, n=3, threshold=2)
    wallet = GovernanceWallet.setup_threshold(
        WalletMode.KEYS_ON_G1, group.public_keys, group.member_id_bytes,
        threshold=2, dispatcher=host_call,
    )

    op = Operation(target, 0, start, start + 3600, 100_000,
                   wallet.nonce, payload).with_check_code()
    [h] = wallet.submit([op])
    sig, signers = group.sign(h, [0, 2])
    wallet.verify_batch([h], [sig], [signers])
    wallet.execute_batch([h])
"""

__version__ = "0.1.0"

# ── curve primitive ─────────────────────────────────────────────────────
from .curve import (
    G1Point,
    G2Point,
    ORDER,
    G1_POINT_BYTES,
    G2_POINT_BYTES,
    PointDecodingError,
    pairing_check,
)
from .mode import WalletMode

# ── configuration & errors ──────────────────────────────────────────────
from .config import WalletConfig
from .errors import *  # noqa: F401,F403
from .errors import __all__ as _error_names

# ── key registry & verification ─────────────────────────────────────────
from .keyset import MemberRecord, MultisigKeySet, ThresholdKeySet
from .verifier import verify_signature

# ── operations ──────────────────────────────────────────────────────────
from .hash import hash_check_code, hash_operation, hash_public_key, keccak256
from .operation import Operation, OperationStatus, to_address
from .ledger import OperationLedger
from .engine import Dispatcher, ExecutionEngine
from .events import (
    EventLog,
    KeySetInitialized,
    OperationStatusChanged,
    StatusMismatch,
)

# ── wallet ──────────────────────────────────────────────────────────────
from .wallet import GovernanceWallet

# ── key-holder tooling ──────────────────────────────────────────────────
from .signing import (
    KeyHolder,
    ThresholdGroup,
    aggregate_public_keys,
    aggregate_signatures,
    multisig_sign,
)

__all__ = [
    # version
    "__version__",
    # curve
    "G1Point", "G2Point", "ORDER", "G1_POINT_BYTES", "G2_POINT_BYTES",
    "PointDecodingError", "pairing_check", "WalletMode",
    # config
    "WalletConfig",
    # registry
    "MemberRecord", "MultisigKeySet", "ThresholdKeySet", "verify_signature",
    # operations
    "hash_check_code", "hash_operation", "hash_public_key", "keccak256",
    "Operation", "OperationStatus", "to_address",
    "OperationLedger", "Dispatcher", "ExecutionEngine",
    "EventLog", "KeySetInitialized", "OperationStatusChanged",
    "StatusMismatch",
    # wallet
    "GovernanceWallet",
    # signing
    "KeyHolder", "ThresholdGroup", "aggregate_public_keys",
    "aggregate_signatures", "multisig_sign",
] + list(_error_names)
