# backend/ledger.py
# Local sqlite peer: world state + per-key history behind the chaincode stub
#
# One sqlite connection per invocation. Reads see committed state only;
# writes are buffered and applied together when the invocation succeeds.
# Every value and range the invocation read is re-checked under the write
# lock before commit; if another invocation changed it first, nothing is
# written and ReadConflictError is raised.

from __future__ import annotations

import sqlite3
import time
import uuid
from contextlib import closing, contextmanager
from typing import Callable, Dict, Generator, Iterator, List, Optional, Tuple, TypeVar

from backend.config import IS_DEV
from chaincode.errors import LedgerStoreError, ReadConflictError
from chaincode.stub import (
    KV,
    ChaincodeStub,
    HistoryQueryIterator,
    KeyModification,
    LedgerTimestamp,
    QueryIterator,
    StateQueryIterator,
    TransactionContext,
)

T = TypeVar("T")


def now_timestamp() -> LedgerTimestamp:
    """Current UTC time as a ledger timestamp."""
    seconds, nanos = divmod(time.time_ns(), 1_000_000_000)
    return LedgerTimestamp(seconds=seconds, nanos=nanos)


def _rows(
    cursor: sqlite3.Cursor,
    convert: Callable[[sqlite3.Row], T],
    on_exhausted: Optional[Callable[[], None]] = None,
) -> Iterator[T]:
    try:
        for row in cursor:
            yield convert(row)
    except sqlite3.Error as e:
        raise LedgerStoreError(f"iteration failed: {e}") from e
    if on_exhausted is not None:
        on_exhausted()


def _range_query(start_key: str, end_key: str) -> Tuple[str, tuple]:
    query = "SELECT key, value FROM world_state"
    clauses: List[str] = []
    params: List[str] = []
    if start_key:
        clauses.append("key >= ?")
        params.append(start_key)
    if end_key:
        clauses.append("key < ?")
        params.append(end_key)
    if clauses:
        query += " WHERE " + " AND ".join(clauses)
    query += " ORDER BY key"
    return query, tuple(params)


def _read_value(conn: sqlite3.Connection, key: str) -> Optional[bytes]:
    with closing(conn.execute("SELECT value FROM world_state WHERE key = ?", (key,))) as cur:
        row = cur.fetchone()
    if row is None:
        return None
    return bytes(row["value"])


class RangeRead:
    """Rows a range scan handed out, in order; exhausted once the scan hit its end."""

    def __init__(self, start_key: str, end_key: str):
        self.start_key = start_key
        self.end_key = end_key
        self.rows: List[Tuple[str, bytes]] = []
        self.exhausted = False

    def matches(self, current: List[Tuple[str, bytes]]) -> bool:
        if self.exhausted:
            return current == self.rows
        return current[:len(self.rows)] == self.rows


class SqliteChaincodeStub(ChaincodeStub):
    """Stub bound to one invocation's connection, tx id and timestamp."""

    def __init__(self, conn: sqlite3.Connection, tx_id: str, timestamp: LedgerTimestamp):
        self._conn = conn
        self._tx_id = tx_id
        self._timestamp = timestamp
        # key -> value, None marks a delete
        self.write_set: Dict[str, Optional[bytes]] = {}
        # key -> value first seen, None if absent
        self.read_set: Dict[str, Optional[bytes]] = {}
        self.range_reads: List[RangeRead] = []
        self._iterators: List[QueryIterator] = []

    def get_tx_id(self) -> str:
        return self._tx_id

    def get_tx_timestamp(self) -> LedgerTimestamp:
        return self._timestamp

    def get_state(self, key: str) -> Optional[bytes]:
        try:
            value = _read_value(self._conn, key)
        except sqlite3.Error as e:
            raise LedgerStoreError(f"GET_STATE failed for key {key}: {e}") from e

        self.read_set.setdefault(key, value)
        return value

    def put_state(self, key: str, value: bytes) -> None:
        if not key:
            raise LedgerStoreError("key must not be an empty string")
        if not isinstance(value, (bytes, bytearray)):
            raise LedgerStoreError(f"value for key {key} must be bytes")
        self.write_set[key] = bytes(value)

    def del_state(self, key: str) -> None:
        if not key:
            raise LedgerStoreError("key must not be an empty string")
        self.write_set[key] = None

    def get_state_by_range(self, start_key: str, end_key: str) -> StateQueryIterator:
        query, params = _range_query(start_key, end_key)
        scan = RangeRead(start_key, end_key)
        self.range_reads.append(scan)

        def record(row: sqlite3.Row) -> KV:
            kv = KV(key=row["key"], value=bytes(row["value"]))
            scan.rows.append((kv.key, kv.value))
            return kv

        def on_exhausted() -> None:
            scan.exhausted = True

        return self._open_iterator(query, params, record, on_exhausted)

    def get_history_for_key(self, key: str) -> HistoryQueryIterator:
        return self._open_iterator(
            """
            SELECT tx_id, ts_seconds, ts_nanos, value, is_delete
            FROM history
            WHERE key = ?
            ORDER BY id DESC
            """,
            (key,),
            lambda row: KeyModification(
                tx_id=row["tx_id"],
                timestamp=LedgerTimestamp(seconds=row["ts_seconds"], nanos=row["ts_nanos"]),
                value=bytes(row["value"]) if row["value"] is not None else None,
                is_delete=bool(row["is_delete"]),
            ),
        )

    def _open_iterator(
        self,
        query: str,
        params: tuple,
        convert: Callable[[sqlite3.Row], T],
        on_exhausted: Optional[Callable[[], None]] = None,
    ) -> QueryIterator[T]:
        try:
            cursor = self._conn.execute(query, params)
        except sqlite3.Error as e:
            raise LedgerStoreError(f"query failed: {e}") from e

        iterator = QueryIterator(_rows(cursor, convert, on_exhausted), on_close=cursor.close)
        self._iterators.append(iterator)
        return iterator

    def release_iterators(self) -> int:
        """Close any iterator the invocation left open; returns how many were leaked."""
        leaked = 0
        for iterator in self._iterators:
            if not iterator.closed:
                leaked += 1
                iterator.close()
        self._iterators.clear()
        return leaked


class SqliteLedger:
    """
    World state and history index stored in one sqlite file.

    Use a file path: every invocation opens its own connection, so an
    in-memory database would not survive between invocations.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def init_schema(self) -> None:
        conn = self.connect()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS world_state (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    key TEXT NOT NULL,
                    tx_id TEXT NOT NULL,
                    ts_seconds INTEGER NOT NULL,
                    ts_nanos INTEGER NOT NULL,
                    value BLOB,
                    is_delete INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            cur.execute("CREATE INDEX IF NOT EXISTS idx_history_key_id ON history(key, id)")
            # Readers do not block the committing writer
            cur.execute("PRAGMA journal_mode=WAL")
            conn.commit()
        except sqlite3.Error as e:
            raise LedgerStoreError(f"failed to initialize ledger schema: {e}") from e
        finally:
            conn.close()

        if IS_DEV:
            print(f"[LEDGER] Schema ready at {self.db_path}")

    @contextmanager
    def transaction(
        self,
        commit: bool = True,
        tx_id: Optional[str] = None,
        timestamp: Optional[LedgerTimestamp] = None,
    ) -> Generator[TransactionContext, None, None]:
        """
        Run one invocation.

        Pending writes are committed only when the block exits without an
        exception and commit is True; otherwise they are discarded.
        """
        conn = self.connect()
        stub = SqliteChaincodeStub(
            conn,
            tx_id or uuid.uuid4().hex,
            timestamp or now_timestamp(),
        )
        try:
            yield TransactionContext(stub)
            leaked = stub.release_iterators()
            if leaked and IS_DEV:
                print(f"[LEDGER] tx={stub.get_tx_id()} left {leaked} iterator(s) open")
            if commit:
                self._commit(conn, stub)
        finally:
            stub.release_iterators()
            conn.close()

    def _commit(self, conn: sqlite3.Connection, stub: SqliteChaincodeStub) -> None:
        if not stub.write_set:
            return

        tx_id = stub.get_tx_id()
        ts = stub.get_tx_timestamp()
        try:
            # Take the write lock first so no other invocation commits between
            # read validation and our writes.
            conn.execute("BEGIN IMMEDIATE")
            self._validate_reads(conn, stub)
            cur = conn.cursor()
            for key in sorted(stub.write_set):
                value = stub.write_set[key]
                if value is None:
                    cur.execute("DELETE FROM world_state WHERE key = ?", (key,))
                else:
                    cur.execute(
                        """
                        INSERT INTO world_state (key, value) VALUES (?, ?)
                        ON CONFLICT(key) DO UPDATE SET value = excluded.value
                        """,
                        (key, value),
                    )
                cur.execute(
                    """
                    INSERT INTO history (key, tx_id, ts_seconds, ts_nanos, value, is_delete)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (key, tx_id, ts.seconds, ts.nanos, value, 1 if value is None else 0),
                )
            conn.commit()
        except ReadConflictError as e:
            conn.rollback()
            if IS_DEV:
                print(f"[LEDGER] {e}")
            raise
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.rollback()
            if IS_DEV:
                print(f"[LEDGER] Commit failed for tx={tx_id}: {e}")
            raise LedgerStoreError(f"failed to commit transaction {tx_id}: {e}") from e

        if IS_DEV:
            print(f"[LEDGER] Committed tx={tx_id}, keys={len(stub.write_set)}")

    def _validate_reads(self, conn: sqlite3.Connection, stub: SqliteChaincodeStub) -> None:
        tx_id = stub.get_tx_id()
        for key, seen in stub.read_set.items():
            if _read_value(conn, key) != seen:
                raise ReadConflictError(tx_id, f"key {key}")

        for scan in stub.range_reads:
            query, params = _range_query(scan.start_key, scan.end_key)
            with closing(conn.execute(query, params)) as cur:
                current = [(row["key"], bytes(row["value"])) for row in cur]
            if not scan.matches(current):
                raise ReadConflictError(tx_id, f"range [{scan.start_key!r}, {scan.end_key!r})")
