"""
Error taxonomy for the governance wallet.

Configuration errors abort key-set construction; operation errors abort
the whole batch call they occur in; execution errors report why an
approved operation cannot run (yet, or ever).  A mathematically invalid
but well-formed signature is *not* an error: verification returns
``False`` and the operation is marked rejected.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "WalletError",
    # configuration
    "ConfigurationError",
    "InvalidPublicKeyError",
    "EmptyPublicKeyError",
    "LengthMismatchError",
    "ThresholdOutOfRangeError",
    "DuplicatePublicKeyError",
    # cryptographic
    "InvalidSignatureError",
    "UnrecognizedSignerError",
    "DuplicateSignerError",
    "SignersNotEnoughError",
    # operation input
    "OperationError",
    "InvalidOperationError",
    "InvalidNonceError",
    "ChecksumMismatchError",
    "OperationExistsError",
    "SignatureMismatchError",
    # execution
    "ExecutionError",
    "ExecuteUnapprovedOperationError",
    "ExecuteUneffectiveOperationError",
    "ExecuteExpiredOperationError",
    "ReentrantCallError",
]


class WalletError(Exception):
    """Base class for all wallet errors."""

    code = "WALLET_E000"

    def __init__(self, message: str, context: Optional[str] = None) -> None:
        self.message = message
        self.context = context
        full_msg = f"[{self.code}] {message}"
        if context:
            full_msg += f" ({context})"
        super().__init__(full_msg)


# ── configuration (E1xx) ────────────────────────────────────────────────
class ConfigurationError(WalletError, ValueError):
    code = "WALLET_E100"


class InvalidPublicKeyError(ConfigurationError):
    code = "WALLET_E101"


class EmptyPublicKeyError(ConfigurationError):
    code = "WALLET_E102"

    def __init__(self, context: Optional[str] = None) -> None:
        super().__init__("no public keys supplied", context)


class LengthMismatchError(ConfigurationError):
    code = "WALLET_E103"

    def __init__(self, left: int, right: int, what: str = "arrays") -> None:
        self.left = left
        self.right = right
        super().__init__(f"{what} differ in length: {left} != {right}")


class ThresholdOutOfRangeError(ConfigurationError):
    code = "WALLET_E104"

    def __init__(self, threshold: int, n: int) -> None:
        self.threshold = threshold
        self.n = n
        super().__init__(f"threshold {threshold} not in [1, {n}]")


class DuplicatePublicKeyError(ConfigurationError):
    code = "WALLET_E105"


# ── cryptographic (E2xx) ────────────────────────────────────────────────
class InvalidSignatureError(WalletError, ValueError):
    code = "WALLET_E200"


class UnrecognizedSignerError(WalletError, ValueError):
    code = "WALLET_E201"

    def __init__(self, key_hash: bytes) -> None:
        self.key_hash = key_hash
        super().__init__("signer is not a registered member", key_hash.hex())


class DuplicateSignerError(WalletError, ValueError):
    code = "WALLET_E202"

    def __init__(self, key_hash: bytes) -> None:
        self.key_hash = key_hash
        super().__init__("signer named more than once", key_hash.hex())


class SignersNotEnoughError(WalletError, ValueError):
    code = "WALLET_E203"

    def __init__(self, got: int, threshold: int) -> None:
        self.got = got
        self.threshold = threshold
        super().__init__(f"{got} signers named, threshold is {threshold}")


# ── operation input (E3xx) ──────────────────────────────────────────────
class OperationError(WalletError, ValueError):
    code = "WALLET_E300"


class InvalidOperationError(OperationError):
    code = "WALLET_E301"


class InvalidNonceError(OperationError):
    code = "WALLET_E302"

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"nonce {actual} out of sequence, expected {expected}")


class ChecksumMismatchError(OperationError):
    code = "WALLET_E303"

    def __init__(self, supplied: int, computed: int) -> None:
        self.supplied = supplied
        self.computed = computed
        super().__init__(
            "hash check code does not match operation hash",
            f"supplied=0x{supplied:016x} computed=0x{computed:016x}",
        )


class OperationExistsError(OperationError):
    code = "WALLET_E304"

    def __init__(self, operation_hash: bytes) -> None:
        self.operation_hash = operation_hash
        super().__init__("operation already registered", operation_hash.hex())


class SignatureMismatchError(OperationError):
    code = "WALLET_E305"

    def __init__(self, operation_hash: bytes) -> None:
        self.operation_hash = operation_hash
        super().__init__(
            "attached signature does not verify", operation_hash.hex(),
        )


# ── execution (E4xx) ────────────────────────────────────────────────────
class ExecutionError(WalletError, RuntimeError):
    code = "WALLET_E400"

    def __init__(
        self, message: str, operation_hash: Optional[bytes] = None,
    ) -> None:
        self.operation_hash = operation_hash
        super().__init__(
            message, operation_hash.hex() if operation_hash else None,
        )


class ExecuteUnapprovedOperationError(ExecutionError):
    code = "WALLET_E401"

    def __init__(self, operation_hash: bytes, status) -> None:
        self.status = status
        super().__init__(
            f"operation is not approved (status {status.name})",
            operation_hash,
        )


class ExecuteUneffectiveOperationError(ExecutionError):
    code = "WALLET_E402"

    def __init__(self, operation_hash: bytes, effective_time: int) -> None:
        self.effective_time = effective_time
        super().__init__(
            f"operation not effective before {effective_time}", operation_hash,
        )


class ExecuteExpiredOperationError(ExecutionError):
    code = "WALLET_E403"

    def __init__(self, operation_hash: bytes, expiration_time: int) -> None:
        self.expiration_time = expiration_time
        super().__init__(
            f"operation expired at {expiration_time}", operation_hash,
        )


class ReentrantCallError(ExecutionError):
    code = "WALLET_E404"

    def __init__(self) -> None:
        super().__init__("wallet is already processing a call")
