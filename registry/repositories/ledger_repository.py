"""Ledger repository: partitioned, ordered key-value store on SQLite."""

import hashlib
import sqlite3
from typing import Iterator, Optional, Tuple

from common.logging_config import get_logger
from registry.database import get_db_connection
from registry.exceptions import LedgerError

logger = get_logger(__name__)


def _encode_key(key: str) -> bytes:
    if not isinstance(key, str):
        raise LedgerError(f"Ledger key must be a string, got {type(key).__name__}")
    try:
        return key.encode("utf-8")
    except UnicodeEncodeError as e:
        raise LedgerError(f"Ledger key is not valid UTF-8: {e}")


def _decode_key(raw: bytes) -> str:
    return bytes(raw).decode("utf-8")


class LedgerRepository:
    """
    Per-partition get/put/delete, ordered range scans and value digests.

    Every method accepts an optional connection. Callers that need several
    writes to apply together pass the same connection and commit once.
    """

    @staticmethod
    def get_state(partition: str, key: str, conn=None) -> Optional[bytes]:
        encoded = _encode_key(key)

        def _get(cursor: sqlite3.Cursor) -> Optional[bytes]:
            cursor.execute(
                "SELECT value FROM ledger_entries WHERE partition = ? AND key = ?",
                (partition, encoded)
            )
            row = cursor.fetchone()
            return bytes(row["value"]) if row is not None else None

        try:
            if conn is not None:
                return _get(conn.cursor())
            with get_db_connection() as db_conn:
                return _get(db_conn.cursor())
        except sqlite3.Error as e:
            raise LedgerError(f"Failed to get state for {key!r} in {partition}: {e}")

    @staticmethod
    def put_state(partition: str, key: str, value: bytes, conn=None) -> None:
        if not key:
            raise LedgerError("Ledger key must be a non-empty string")
        if not value:
            raise LedgerError(f"Refusing to store an empty value for {key!r}; delete the key instead")
        encoded = _encode_key(key)

        should_close = conn is None
        if conn is None:
            conn = get_db_connection().__enter__()

        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO ledger_entries (partition, key, value) VALUES (?, ?, ?)
                ON CONFLICT(partition, key) DO UPDATE SET value = excluded.value
                """,
                (partition, encoded, bytes(value))
            )
            if should_close:
                conn.commit()
            logger.debug(f"Put state [partition={partition}] [key={key!r}] [size={len(value)}]")
        except sqlite3.Error as e:
            raise LedgerError(f"Failed to put state for {key!r} in {partition}: {e}")
        finally:
            if should_close:
                conn.close()

    @staticmethod
    def delete_state(partition: str, key: str, conn=None) -> None:
        encoded = _encode_key(key)

        should_close = conn is None
        if conn is None:
            conn = get_db_connection().__enter__()

        try:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM ledger_entries WHERE partition = ? AND key = ?",
                (partition, encoded)
            )
            if should_close:
                conn.commit()
            logger.debug(f"Deleted state [partition={partition}] [key={key!r}]")
        except sqlite3.Error as e:
            raise LedgerError(f"Failed to delete state for {key!r} in {partition}: {e}")
        finally:
            if should_close:
                conn.close()

    @staticmethod
    def get_state_by_range(
        partition: str,
        start_key: str,
        end_key: str,
        conn
    ) -> Iterator[Tuple[str, bytes]]:
        """
        Iterate entries with start_key <= key < end_key in ascending key order.

        An empty start_key or end_key leaves that side of the range open.
        The iterator reads from the given connection lazily, so it must be
        consumed before the connection is closed.
        """
        clauses = ["partition = ?"]
        params = [partition]
        if start_key:
            clauses.append("key >= ?")
            params.append(_encode_key(start_key))
        if end_key:
            clauses.append("key < ?")
            params.append(_encode_key(end_key))

        query = f"SELECT key, value FROM ledger_entries WHERE {' AND '.join(clauses)} ORDER BY key"

        try:
            cursor = conn.cursor()
            cursor.execute(query, params)
            for row in cursor:
                yield _decode_key(row["key"]), bytes(row["value"])
        except sqlite3.Error as e:
            raise LedgerError(f"Range query failed in {partition}: {e}")

    @staticmethod
    def get_state_hash(partition: str, key: str, conn=None) -> Optional[bytes]:
        """
        SHA-256 digest of the value stored at key, or None if there is no value.
        """
        value = LedgerRepository.get_state(partition, key, conn=conn)
        if value is None:
            return None
        return hashlib.sha256(value).digest()
