"""
Shared fixtures for CourseGate tests.

The seed data is one course with three lessons; lesson 2 carries a
four-question quiz. Student u1 is assigned the course, admin1 is an admin.
"""

import pytest

from coursegate.errors import RemoteStoreError
from coursegate.schemas import Course, Lesson, QuizQuestion, QuizSet, QuizSettings
from coursegate.store import InMemoryStore, Table
from coursegate.store.base import matches


def seed_tables() -> dict[str, list[dict]]:
    return {
        Table.COURSES: [
            {"id": "c1", "title": "Intro to Security", "description": "Fundamentals"},
        ],
        Table.LESSONS: [
            {"id": "l1", "course_id": "c1", "title": "CIA Triad", "order": 1},
            {"id": "l2", "course_id": "c1", "title": "Threats", "quiz_set_id": "qs1", "order": 2},
            {"id": "l3", "course_id": "c1", "title": "Defenses", "order": 3},
        ],
        Table.QUIZ_SETS: [
            {"id": "qs1", "title": "Threat basics"},
        ],
        Table.QUIZ_QUESTIONS: [
            {"id": f"q{i}", "quiz_set_id": "qs1", "question": f"Question {i}?",
             "options": ["a", "b", "c"], "correct_answer": answer}
            for i, answer in enumerate([0, 1, 2, 0], start=1)
        ],
        Table.PROFILES: [
            {"id": "u1", "name": "Ada", "email": "ada@example.com", "role": "student"},
            {"id": "admin1", "name": "Root", "email": "root@example.com", "role": "admin"},
        ],
        Table.COURSE_ASSIGNMENTS: [
            {"user_id": "u1", "course_id": "c1", "locked": False},
        ],
    }


class FailingStore(InMemoryStore):
    """InMemoryStore that raises RemoteStoreError for chosen writes."""

    def __init__(self, tables=None):
        super().__init__(tables)
        self.failures: list[tuple[str, str, dict]] = []

    def fail_on(self, operation: str, table: str, **match):
        self.failures.append((operation, table, match))

    def _check(self, operation: str, table: str, record: dict):
        for op, tbl, match in self.failures:
            if op == operation and tbl == table and matches(record, match):
                raise RemoteStoreError(f"simulated {operation} failure on {table}")

    async def insert(self, table, record):
        self._check("insert", table, record)
        return await super().insert(table, record)

    async def update(self, table, key, changes):
        self._check("update", table, key)
        return await super().update(table, key, changes)

    async def list(self, table, filters=None):
        self._check("list", table, filters or {})
        return await super().list(table, filters)


@pytest.fixture
def store():
    return InMemoryStore(seed_tables())


@pytest.fixture
def failing_store():
    return FailingStore(seed_tables())


@pytest.fixture
def course():
    tables = seed_tables()
    return Course(
        **tables[Table.COURSES][0],
        lessons=[Lesson(**row) for row in tables[Table.LESSONS]],
    )


@pytest.fixture
def quiz_set():
    tables = seed_tables()
    return QuizSet(
        **tables[Table.QUIZ_SETS][0],
        questions=[QuizQuestion(**row) for row in tables[Table.QUIZ_QUESTIONS]],
    )


@pytest.fixture
def settings():
    return QuizSettings(pass_mark_percentage=70, enforce_pass_mark=True)
