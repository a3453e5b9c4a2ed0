"""Tests for students, course assignments and services."""

import pytest

from coursegate.classroom import (
    add_student,
    assign_course,
    delete_student,
    fetch_student,
    fetch_students,
    fetch_user_services,
    remove_course_assignment,
    toggle_lesson_lock,
    update_student,
    update_time_spent,
)
from coursegate.errors import NotFoundError, ValidationError
from coursegate.schemas import StudentRole
from coursegate.store import InMemoryStore, Table


class TestStudents:
    """Test student profiles."""

    @pytest.mark.asyncio
    async def test_fetch_with_assignments(self, store):
        students = {s.id: s for s in await fetch_students(store)}
        assert students["u1"].assigned_courses == ["c1"]
        assert students["admin1"].assigned_courses == []
        assert students["admin1"].is_admin

    @pytest.mark.asyncio
    async def test_add_student(self, store):
        student = await add_student(store, "Grace", "grace@example.com", student_id="u2")
        assert student.id == "u2"
        assert student.role == StudentRole.STUDENT

    @pytest.mark.asyncio
    async def test_duplicate_email(self, store):
        with pytest.raises(ValidationError):
            await add_student(store, "Ada again", "ada@example.com")

    @pytest.mark.asyncio
    async def test_invalid_role(self, store):
        with pytest.raises(ValidationError):
            await add_student(store, "Eve", "eve@example.com", role="instructor")

    @pytest.mark.asyncio
    async def test_update_role(self, store):
        student = await update_student(store, "u1", role="admin")
        assert student.is_admin
        assert student.assigned_courses == ["c1"]

    @pytest.mark.asyncio
    async def test_fetch_missing(self, store):
        with pytest.raises(NotFoundError):
            await fetch_student(store, "nope")

    @pytest.mark.asyncio
    async def test_delete_cascades(self, store):
        await update_time_spent(store, "u1", "c1", "l1", 10)
        await toggle_lesson_lock(store, "u1", "c1", "l2")

        await delete_student(store, "u1")

        assert await store.get(Table.PROFILES, {"id": "u1"}) is None
        assert await store.list(Table.COURSE_ASSIGNMENTS) == []
        assert await store.list(Table.PROGRESS) == []
        assert await store.list(Table.LESSON_LOCKS) == []


class TestAssignments:
    """Test course assignments."""

    @pytest.mark.asyncio
    async def test_assign_is_idempotent(self, store):
        await add_student(store, "Grace", "grace@example.com", student_id="u2")

        first = await assign_course(store, "u2", "c1")
        second = await assign_course(store, "u2", "c1")

        assert not first.locked
        assert first == second
        assert len(await store.list(Table.COURSE_ASSIGNMENTS, {"user_id": "u2"})) == 1

    @pytest.mark.asyncio
    async def test_assign_missing_course(self, store):
        with pytest.raises(NotFoundError):
            await assign_course(store, "u1", "nope")

    @pytest.mark.asyncio
    async def test_remove_drops_progress(self, store):
        await update_time_spent(store, "u1", "c1", "l1", 10)

        await remove_course_assignment(store, "u1", "c1")

        assert await store.list(Table.PROGRESS) == []
        with pytest.raises(NotFoundError):
            await remove_course_assignment(store, "u1", "c1")


class TestServices:
    """Test service offerings."""

    @pytest.mark.asyncio
    async def test_only_active_linked_services(self):
        store = InMemoryStore({
            Table.SERVICES: [
                {"id": "s1", "title": "Advisory", "type": "advisory", "status": "active"},
                {"id": "s2", "title": "Old framework", "type": "framework", "status": "inactive"},
                {"id": "s3", "title": "Architecture", "type": "architecture", "status": "active"},
            ],
            Table.USER_SERVICES: [
                {"user_id": "u1", "service_id": "s1"},
                {"user_id": "u1", "service_id": "s2"},
            ],
        })
        services = await fetch_user_services(store, "u1")
        assert [s.id for s in services] == ["s1"]
        assert await fetch_user_services(store, "u2") == []
