"""
InMemoryStore - RemoteStore kept in process memory.

Used for tests and previews. Rows are copied on the way in and out so
callers never hold references into the store.
"""

import copy
from typing import Optional

from coursegate.errors import NotFoundError, ValidationError

from .base import RemoteStore, extract_key, key_columns, matches, with_generated_id


class InMemoryStore(RemoteStore):

    def __init__(self, tables: Optional[dict[str, list[dict]]] = None):
        self._tables: dict[str, list[dict]] = {}
        for table, rows in (tables or {}).items():
            for row in rows:
                self._insert_sync(table, row)

    def _rows(self, table: str) -> list[dict]:
        key_columns(table)
        return self._tables.setdefault(table, [])

    def _find(self, table: str, key: tuple) -> Optional[dict]:
        for row in self._rows(table):
            if extract_key(table, row) == key:
                return row
        return None

    def _insert_sync(self, table: str, record: dict) -> dict:
        row = with_generated_id(table, record)
        key = extract_key(table, row)
        if self._find(table, key) is not None:
            raise ValidationError(f"Duplicate key in {table}: {key}")
        self._rows(table).append(copy.deepcopy(row))
        return row

    async def get(self, table: str, key: dict) -> Optional[dict]:
        row = self._find(table, extract_key(table, key))
        return copy.deepcopy(row) if row is not None else None

    async def list(self, table: str, filters: Optional[dict] = None) -> list[dict]:
        return [copy.deepcopy(row) for row in self._rows(table) if matches(row, filters)]

    async def insert(self, table: str, record: dict) -> dict:
        return self._insert_sync(table, record)

    async def upsert(self, table: str, record: dict) -> dict:
        row = with_generated_id(table, record)
        existing = self._find(table, extract_key(table, row))
        if existing is None:
            self._rows(table).append(copy.deepcopy(row))
        else:
            existing.clear()
            existing.update(copy.deepcopy(row))
        return row

    async def update(self, table: str, key: dict, changes: dict) -> dict:
        row = self._find(table, extract_key(table, key))
        if row is None:
            raise NotFoundError(table, key)
        row.update(copy.deepcopy(changes))
        return copy.deepcopy(row)

    async def delete(self, table: str, filters: dict) -> int:
        if not filters:
            raise ValidationError(f"Refusing to delete every row of {table}")
        rows = self._rows(table)
        kept = [row for row in rows if not matches(row, filters)]
        removed = len(rows) - len(kept)
        self._tables[table] = kept
        return removed

    async def toggle(self, table: str, key: dict, column: str) -> bool:
        row = self._find(table, extract_key(table, key))
        if row is None:
            raise NotFoundError(table, key)
        row[column] = not bool(row.get(column, False))
        return row[column]
