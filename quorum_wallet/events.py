"""
Audit events emitted by a wallet.

Every status transition is recorded with its old/new pair; observers
may subscribe to receive events as they are committed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Type, TypeVar, Union

from .operation import OperationStatus
from .mode import WalletMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeySetInitialized:
    mode: WalletMode
    num_members: int
    threshold: int
    aggregated_key: bytes


@dataclass(frozen=True)
class OperationStatusChanged:
    operation_hash: bytes
    old: OperationStatus
    new: OperationStatus


@dataclass(frozen=True)
class StatusMismatch:
    """A verification was attempted on an operation in the wrong state."""

    operation_hash: bytes
    expected: OperationStatus
    actual: OperationStatus


Event = Union[KeySetInitialized, OperationStatusChanged, StatusMismatch]
E = TypeVar("E")


class EventLog:
    """Append-only, in-order record of emitted events."""

    def __init__(self) -> None:
        self._events: List[Event] = []
        self._subscribers: List[Callable[[Event], None]] = []

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        self._subscribers.append(callback)

    def emit(self, event: Event) -> None:
        self._events.append(event)
        if isinstance(event, OperationStatusChanged):
            logger.info(
                "operation %s: %s -> %s",
                event.operation_hash.hex()[:16], event.old.name, event.new.name,
            )
        elif isinstance(event, StatusMismatch):
            logger.warning(
                "operation %s: expected %s, found %s",
                event.operation_hash.hex()[:16],
                event.expected.name, event.actual.name,
            )
        else:
            logger.info("%s", event)
        # observers never interrupt the state change that produced the event
        for cb in self._subscribers:
            try:
                cb(event)
            except Exception:
                logger.exception("event subscriber %r raised", cb)

    def of_type(self, kind: Type[E]) -> List[E]:
        return [e for e in self._events if isinstance(e, kind)]

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)
