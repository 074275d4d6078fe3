"""
Proposed operations and their lifecycle states.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple, Union

from .config import ADDRESS_BYTES
from .hash import hash_check_code, hash_operation


class OperationStatus(Enum):
    """
    Lifecycle of an operation.

        NONE → {PENDING, APPROVED} → {APPROVED, REJECTED}
             → EXECUTING → {EXECUTED, FAILED}

    ``APPROVED → EXPIRED`` is a side exit taken only at execution time.
    """

    NONE = 0
    PENDING = 1
    APPROVED = 2
    REJECTED = 3
    EXECUTING = 4
    EXECUTED = 5
    FAILED = 6
    EXPIRED = 7

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({
    OperationStatus.REJECTED,
    OperationStatus.EXECUTED,
    OperationStatus.FAILED,
    OperationStatus.EXPIRED,
})


NULL_ADDRESS = b"\x00" * ADDRESS_BYTES


def to_address(target: Union[bytes, str, None]) -> bytes:
    """Accept a 20-byte address or its ``0x``-prefixed hex form."""
    if target is None:
        return NULL_ADDRESS
    if isinstance(target, str):
        hexstr = target[2:] if target.lower().startswith("0x") else target
        target = bytes.fromhex(hexstr)
    target = bytes(target)
    if len(target) != ADDRESS_BYTES:
        raise ValueError(f"address must be {ADDRESS_BYTES} bytes, got {len(target)}")
    return target


@dataclass
class Operation:
    """
    A proposed external call awaiting quorum authorisation.

    Identity is the hash of (target, value, effective_time,
    expiration_time, gas_limit, nonce, payload); the remaining fields
    are proposal metadata (``hash_check_code``, ``signature``,
    ``signers``) or lifecycle state (``status``).
    """

    target: bytes
    value: int
    effective_time: int
    expiration_time: int
    gas_limit: int
    nonce: int
    payload: bytes
    hash_check_code: int = 0
    signature: bytes = b""
    signers: Tuple[bytes, ...] = ()
    status: OperationStatus = field(default=OperationStatus.NONE)

    def __post_init__(self) -> None:
        self.target = to_address(self.target)
        self.payload = bytes(self.payload)
        self.signature = bytes(self.signature)
        self.signers = tuple(bytes(s) for s in self.signers)

    @property
    def hash(self) -> bytes:
        return hash_operation(
            self.target,
            self.value,
            self.effective_time,
            self.expiration_time,
            self.gas_limit,
            self.nonce,
            self.payload,
        )

    def with_check_code(self) -> Operation:
        """Fill ``hash_check_code`` from the computed hash."""
        self.hash_check_code = hash_check_code(self.hash)
        return self
