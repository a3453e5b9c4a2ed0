"""
RemoteStore - Contract for the hosted tables CourseGate runs on.

Rows are plain dicts with snake_case columns. Every table has a key made of
one or more columns (see TABLE_KEYS); `get`, `update` and `toggle` address
a single row by that key, `list` and `delete` take equality filters.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Optional

from coursegate.errors import ValidationError


class Table:
    COURSES = "courses"
    LESSONS = "lessons"
    QUIZ_SETS = "quiz_sets"
    QUIZ_QUESTIONS = "quiz_questions"
    QUIZ_SETTINGS = "quiz_settings"
    PROFILES = "profiles"
    COURSE_ASSIGNMENTS = "user_course_assignments"
    PROGRESS = "user_progress"
    LESSON_LOCKS = "user_lesson_locks"
    SERVICES = "services"
    USER_SERVICES = "user_services"


TABLE_KEYS: dict[str, tuple[str, ...]] = {
    Table.COURSES: ("id",),
    Table.LESSONS: ("id",),
    Table.QUIZ_SETS: ("id",),
    Table.QUIZ_QUESTIONS: ("id",),
    Table.QUIZ_SETTINGS: ("id",),
    Table.PROFILES: ("id",),
    Table.COURSE_ASSIGNMENTS: ("user_id", "course_id"),
    Table.PROGRESS: ("user_id", "course_id", "lesson_id"),
    Table.LESSON_LOCKS: ("user_id", "course_id", "lesson_id"),
    Table.SERVICES: ("id",),
    Table.USER_SERVICES: ("user_id", "service_id"),
}


def key_columns(table: str) -> tuple[str, ...]:
    if table not in TABLE_KEYS:
        raise ValidationError(f"Unknown table: {table}")
    return TABLE_KEYS[table]


def extract_key(table: str, record: dict) -> tuple:
    """Key tuple for a row; every key column must be present."""
    columns = key_columns(table)
    missing = [c for c in columns if record.get(c) is None]
    if missing:
        raise ValidationError(f"{table} row missing key columns: {missing}")
    return tuple(record[c] for c in columns)


def with_generated_id(table: str, record: dict) -> dict:
    """Copy of the row with a fresh id when the table is keyed by id alone."""
    row = dict(record)
    if key_columns(table) == ("id",) and not row.get("id"):
        row["id"] = str(uuid.uuid4())
    return row


def matches(row: dict, filters: Optional[dict]) -> bool:
    if not filters:
        return True
    return all(row.get(column) == value for column, value in filters.items())


class RemoteStore(ABC):
    """
    Async table store.

    Implementations raise RemoteStoreError for backend failures and
    NotFoundError when `update` or `toggle` address a missing row.
    """

    @abstractmethod
    async def get(self, table: str, key: dict) -> Optional[dict]:
        """Row with the given key, or None."""

    @abstractmethod
    async def list(self, table: str, filters: Optional[dict] = None) -> list[dict]:
        """Rows matching all equality filters, in insertion order."""

    @abstractmethod
    async def insert(self, table: str, record: dict) -> dict:
        """Insert a new row; generates `id` for id-keyed tables."""

    @abstractmethod
    async def upsert(self, table: str, record: dict) -> dict:
        """Insert, or replace the row with the same key."""

    @abstractmethod
    async def update(self, table: str, key: dict, changes: dict) -> dict:
        """Apply column changes to one row and return it."""

    @abstractmethod
    async def delete(self, table: str, filters: dict) -> int:
        """Delete matching rows and return how many were removed."""

    @abstractmethod
    async def toggle(self, table: str, key: dict, column: str) -> bool:
        """Flip a boolean column on one row and return the new value."""
