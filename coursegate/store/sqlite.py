"""
SqliteStore - RemoteStore backed by a local SQLite file.

Every table lives in one generic `records` table:
- table_name: logical table (see Table)
- record_key: JSON-encoded key tuple
- data: the row as JSON

Each call opens its own connection and runs in a worker thread so the
event loop is never blocked.
"""

import asyncio
import json
import logging
import sqlite3
from pathlib import Path
from typing import Optional

from coursegate.errors import NotFoundError, RemoteStoreError, ValidationError

from .base import RemoteStore, extract_key, key_columns, matches, with_generated_id


logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS records (
    table_name TEXT NOT NULL,
    record_key TEXT NOT NULL,
    data JSON NOT NULL,
    PRIMARY KEY (table_name, record_key)
);

CREATE INDEX IF NOT EXISTS idx_records_table
ON records(table_name);
"""


def encode_key(table: str, record: dict) -> str:
    return json.dumps(list(extract_key(table, record)))


class SqliteStore(RemoteStore):
    """
    Store all tables in a single SQLite database.

    Thread-safe: each method creates a new connection.
    """

    def __init__(self, db_path: str | Path):
        """
        Initialize the store, creating the database file if needed.

        Args:
            db_path: Path to the SQLite file
        """
        self.db_path = Path(db_path)
        self._ensure_database()

    def _ensure_database(self):
        """Create database and tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    async def _run(self, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.Error as e:
            logger.error(f"SQLite store failure in {func.__name__}: {e}")
            raise RemoteStoreError(str(e)) from e

    # -------------------------------------------------------------------------
    # Synchronous implementations
    # -------------------------------------------------------------------------

    def _get_sync(self, table: str, key: dict) -> Optional[dict]:
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "SELECT data FROM records WHERE table_name = ? AND record_key = ?",
                (table, encode_key(table, key))
            )
            row = cursor.fetchone()
            return json.loads(row["data"]) if row else None
        finally:
            conn.close()

    def _list_sync(self, table: str, filters: Optional[dict]) -> list[dict]:
        key_columns(table)
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "SELECT data FROM records WHERE table_name = ? ORDER BY rowid",
                (table,)
            )
            rows = [json.loads(row["data"]) for row in cursor.fetchall()]
            return [row for row in rows if matches(row, filters)]
        finally:
            conn.close()

    def _insert_sync(self, table: str, record: dict) -> dict:
        row = with_generated_id(table, record)
        conn = self._get_connection()
        try:
            try:
                conn.execute(
                    "INSERT INTO records (table_name, record_key, data) VALUES (?, ?, ?)",
                    (table, encode_key(table, row), json.dumps(row))
                )
            except sqlite3.IntegrityError:
                raise ValidationError(f"Duplicate key in {table}: {extract_key(table, row)}")
            conn.commit()
            return row
        finally:
            conn.close()

    def _upsert_sync(self, table: str, record: dict) -> dict:
        row = with_generated_id(table, record)
        conn = self._get_connection()
        try:
            conn.execute(
                """INSERT INTO records (table_name, record_key, data)
                   VALUES (?, ?, ?)
                   ON CONFLICT(table_name, record_key) DO UPDATE SET
                     data = excluded.data""",
                (table, encode_key(table, row), json.dumps(row))
            )
            conn.commit()
            return row
        finally:
            conn.close()

    def _update_sync(self, table: str, key: dict, changes: dict) -> dict:
        record_key = encode_key(table, key)
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "SELECT data FROM records WHERE table_name = ? AND record_key = ?",
                (table, record_key)
            )
            existing = cursor.fetchone()
            if not existing:
                raise NotFoundError(table, key)

            row = json.loads(existing["data"])
            row.update(changes)
            new_key = encode_key(table, row)
            conn.execute(
                """UPDATE records SET record_key = ?, data = ?
                   WHERE table_name = ? AND record_key = ?""",
                (new_key, json.dumps(row), table, record_key)
            )
            conn.commit()
            return row
        finally:
            conn.close()

    def _delete_sync(self, table: str, filters: dict) -> int:
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "SELECT record_key, data FROM records WHERE table_name = ?",
                (table,)
            )
            doomed = [
                row["record_key"] for row in cursor.fetchall()
                if matches(json.loads(row["data"]), filters)
            ]
            conn.executemany(
                "DELETE FROM records WHERE table_name = ? AND record_key = ?",
                [(table, record_key) for record_key in doomed]
            )
            conn.commit()
            return len(doomed)
        finally:
            conn.close()

    def _toggle_sync(self, table: str, key: dict, column: str) -> bool:
        record_key = encode_key(table, key)
        path = f"$.{column}"
        conn = self._get_connection()
        try:
            # Single statement, so the flip is atomic for the row
            cursor = conn.execute(
                """UPDATE records SET data = json_set(
                       data, ?,
                       json(CASE WHEN json_extract(data, ?) THEN 'false' ELSE 'true' END)
                   )
                   WHERE table_name = ? AND record_key = ?""",
                (path, path, table, record_key)
            )
            if cursor.rowcount == 0:
                raise NotFoundError(table, key)
            conn.commit()

            cursor = conn.execute(
                "SELECT json_extract(data, ?) AS value FROM records WHERE table_name = ? AND record_key = ?",
                (path, table, record_key)
            )
            return bool(cursor.fetchone()["value"])
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # RemoteStore interface
    # -------------------------------------------------------------------------

    async def get(self, table: str, key: dict) -> Optional[dict]:
        return await self._run(self._get_sync, table, key)

    async def list(self, table: str, filters: Optional[dict] = None) -> list[dict]:
        return await self._run(self._list_sync, table, filters)

    async def insert(self, table: str, record: dict) -> dict:
        return await self._run(self._insert_sync, table, record)

    async def upsert(self, table: str, record: dict) -> dict:
        return await self._run(self._upsert_sync, table, record)

    async def update(self, table: str, key: dict, changes: dict) -> dict:
        return await self._run(self._update_sync, table, key, changes)

    async def delete(self, table: str, filters: dict) -> int:
        if not filters:
            raise ValidationError(f"Refusing to delete every row of {table}")
        return await self._run(self._delete_sync, table, filters)

    async def toggle(self, table: str, key: dict, column: str) -> bool:
        return await self._run(self._toggle_sync, table, key, column)
