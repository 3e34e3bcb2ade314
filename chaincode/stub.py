"""
chaincode/stub.py

The interface the asset contract uses to reach the hosting ledger.

The contract only ever sees a TransactionContext; everything behind
get_stub() (world state, history index, commit) belongs to the ledger.

Query iterators are forward-only, single-pass and must be closed. They are
context managers so callers can write:

    with stub.get_state_by_range("", "") as results:
        for kv in results:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Generic, Iterator, NamedTuple, Optional, TypeVar

T = TypeVar("T")


class LedgerTimestamp(NamedTuple):
    """Ledger-native timestamp: seconds since the Unix epoch plus nanoseconds."""
    seconds: int
    nanos: int


class KV(NamedTuple):
    """One world-state entry returned by a range query."""
    key: str
    value: bytes


class KeyModification(NamedTuple):
    """One change to a key, as recorded in the history index."""
    tx_id: str
    timestamp: LedgerTimestamp
    value: Optional[bytes]
    is_delete: bool


class QueryIterator(Generic[T]):
    """
    Forward-only iterator over ledger query results.

    Wraps a lazy source iterator and a release callback. close() is
    idempotent; the release callback runs at most once.
    """

    _EMPTY = object()

    def __init__(self, source: Iterator[T], on_close: Optional[Callable[[], None]] = None):
        self._source = source
        self._on_close = on_close
        self._pending = self._EMPTY
        self._exhausted = False
        self.closed = False

    def has_next(self) -> bool:
        if self.closed:
            return False
        if self._pending is self._EMPTY and not self._exhausted:
            try:
                self._pending = next(self._source)
            except StopIteration:
                self._exhausted = True
        return self._pending is not self._EMPTY

    def next(self) -> T:
        if not self.has_next():
            raise StopIteration
        item = self._pending
        self._pending = self._EMPTY
        return item  # type: ignore[return-value]

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._pending = self._EMPTY
        if self._on_close is not None:
            self._on_close()

    def __iter__(self) -> "QueryIterator[T]":
        return self

    def __next__(self) -> T:
        return self.next()

    def __enter__(self) -> "QueryIterator[T]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


StateQueryIterator = QueryIterator[KV]
HistoryQueryIterator = QueryIterator[KeyModification]


class ChaincodeStub(ABC):
    """World-state and history access for one invocation."""

    @abstractmethod
    def get_tx_id(self) -> str:
        ...

    @abstractmethod
    def get_tx_timestamp(self) -> LedgerTimestamp:
        ...

    @abstractmethod
    def get_state(self, key: str) -> Optional[bytes]:
        """Return the committed value at key, or None when the key is absent."""

    @abstractmethod
    def put_state(self, key: str, value: bytes) -> None:
        ...

    @abstractmethod
    def del_state(self, key: str) -> None:
        ...

    @abstractmethod
    def get_state_by_range(self, start_key: str, end_key: str) -> StateQueryIterator:
        """
        Iterate keys in [start_key, end_key) in lexicographic order.
        An empty bound leaves that side of the range open.
        """

    @abstractmethod
    def get_history_for_key(self, key: str) -> HistoryQueryIterator:
        """Iterate every committed change to key, newest first."""


class TransactionContext:
    """Per-invocation context handed to every contract operation."""

    def __init__(self, stub: ChaincodeStub):
        self._stub = stub

    def get_stub(self) -> ChaincodeStub:
        return self._stub
