"""Tests for the Classroom application state."""

import pytest

from coursegate.classroom import Classroom, denormalize_progress
from coursegate.errors import QuizNotPassedError, RemoteStoreError
from coursegate.schemas import CourseAssignment, QuizSettings
from coursegate.store import Table


async def loaded(store, **kwargs) -> Classroom:
    classroom = Classroom(store, **kwargs)
    await classroom.refresh()
    return classroom


class TestDenormalize:
    """Test progress denormalization."""

    def test_fills_quiz_set_and_lock(self, course):
        rows = [{"user_id": "u1", "course_id": "c1", "lesson_id": "l2", "completed": True}]
        assignments = [CourseAssignment(user_id="u1", course_id="c1", locked=True)]

        [record] = denormalize_progress(rows, [course], assignments)
        assert record.quiz_set_id == "qs1"
        assert record.locked


class TestRefresh:
    """Test loading the snapshot."""

    @pytest.mark.asyncio
    async def test_loads_everything(self, store):
        classroom = await loaded(store, default_quiz_settings=QuizSettings(pass_mark_percentage=60))

        assert [c.id for c in classroom.state.courses] == ["c1"]
        assert {s.id for s in classroom.state.students} == {"u1", "admin1"}
        assert classroom.state.quiz_sets[0].question_count == 4
        assert classroom.state.quiz_settings.pass_mark_percentage == 60
        assert classroom.state.progress == []

    @pytest.mark.asyncio
    async def test_partial_failure_applies_the_rest(self, failing_store):
        failing_store.fail_on("list", Table.QUIZ_SETS)
        classroom = Classroom(failing_store)

        with pytest.raises(RemoteStoreError):
            await classroom.refresh()

        assert [c.id for c in classroom.state.courses] == ["c1"]
        assert classroom.state.quiz_sets == []


class TestAccess:
    """Test access checks through the classroom."""

    @pytest.mark.asyncio
    async def test_sequential_unlock(self, store):
        classroom = await loaded(store)

        assert await classroom.can_open_lesson("u1", "c1", 1)
        assert not await classroom.can_open_lesson("u1", "c1", 2)

        await classroom.mark_lesson_complete("u1", "c1", "l1")
        assert await classroom.can_open_lesson("u1", "c1", 2)

    @pytest.mark.asyncio
    async def test_course_lock_blocks_student_not_admin(self, store):
        await store.insert(Table.COURSE_ASSIGNMENTS, {"user_id": "admin1", "course_id": "c1", "locked": True})
        classroom = await loaded(store)

        assert await classroom.toggle_course_lock("u1", "c1") is True
        assert classroom.is_course_locked_for_user("u1", "c1")
        assert not await classroom.can_open_lesson("u1", "c1", 1)

        assert not classroom.is_course_locked_for_user("admin1", "c1")

    @pytest.mark.asyncio
    async def test_course_lock_updates_progress_snapshot(self, store):
        classroom = await loaded(store)
        await classroom.update_time_spent("u1", "c1", "l1", 5)

        await classroom.toggle_course_lock("u1", "c1")
        assert classroom.student_progress("u1", "c1")[0].locked

    @pytest.mark.asyncio
    async def test_lesson_lock_wins(self, store):
        classroom = await loaded(store)
        await classroom.mark_lesson_complete("u1", "c1", "l1")

        await classroom.toggle_lesson_lock("u1", "c1", "l2")
        assert not await classroom.is_lesson_accessible("u1", "c1", 2)
        assert await classroom.get_lesson_locks("u1", "c1") == {"l1": False, "l2": True, "l3": False}


class TestProgressFlow:
    """Test progress actions through the classroom."""

    @pytest.mark.asyncio
    async def test_quiz_then_complete(self, store):
        classroom = await loaded(store)
        quiz_set = classroom.quiz_set_for_lesson("c1", "l2")
        assert quiz_set.id == "qs1"

        result = classroom.evaluate_quiz(quiz_set, [0, 1, 0, 0])
        assert result.raw_score == 3
        assert result.passed

        await classroom.mark_lesson_complete("u1", "c1", "l1")
        await classroom.mark_lesson_complete("u1", "c1", "l2", quiz_score=result.raw_score)

        totals = classroom.total_quiz_score("u1", "c1")
        assert (totals.score, totals.total) == (3, 4)
        assert classroom.completed_lessons_count("u1", "c1") == 2

    @pytest.mark.asyncio
    async def test_failed_quiz_leaves_snapshot(self, store):
        classroom = await loaded(store)

        with pytest.raises(QuizNotPassedError):
            await classroom.mark_lesson_complete("u1", "c1", "l2", quiz_score=1)
        assert classroom.state.progress == []

    @pytest.mark.asyncio
    async def test_pass_mark_holds_when_quiz_sets_failed_to_load(self, failing_store):
        failing_store.fail_on("list", Table.QUIZ_SETS)
        classroom = Classroom(failing_store)
        with pytest.raises(RemoteStoreError):
            await classroom.refresh()
        failing_store.failures.clear()
        assert classroom.state.quiz_sets == []

        with pytest.raises(QuizNotPassedError):
            await classroom.mark_lesson_complete("u1", "c1", "l2")
        assert await failing_store.list(Table.PROGRESS) == []

        result = await classroom.mark_lesson_complete("u1", "c1", "l2", quiz_score=4)
        assert result.progress.completed

    @pytest.mark.asyncio
    async def test_completion_applied_without_rereading_progress(self, failing_store):
        classroom = await loaded(failing_store)
        failing_store.fail_on("list", Table.PROGRESS)

        result = await classroom.mark_lesson_complete("u1", "c1", "l1")

        assert result.progress.completed
        assert result.next_progress_created
        records = {p.lesson_id: p for p in classroom.student_progress("u1", "c1")}
        assert records["l1"].completed
        assert not records["l2"].completed
        assert records["l2"].quiz_set_id == "qs1"

    @pytest.mark.asyncio
    async def test_time_and_views(self, store):
        classroom = await loaded(store)
        await classroom.update_time_spent("u1", "c1", "l1", 90)
        await classroom.update_time_spent("u1", "c1", "l1", 30)
        await classroom.update_pdf_viewed("u1", "c1", "l1")

        assert classroom.total_time_spent("u1", "c1") == 120
        assert classroom.viewed_lessons_count("u1", "c1") == 1
        assert len(classroom.state.progress) == 1

    @pytest.mark.asyncio
    async def test_failed_write_leaves_snapshot(self, failing_store):
        classroom = await loaded(failing_store)
        failing_store.fail_on("insert", Table.PROGRESS)

        with pytest.raises(RemoteStoreError):
            await classroom.update_pdf_viewed("u1", "c1", "l1")
        assert classroom.state.progress == []


class TestMutations:
    """Test management actions refreshing the snapshot."""

    @pytest.mark.asyncio
    async def test_delete_lesson_refreshes(self, store):
        classroom = await loaded(store)
        await classroom.delete_lesson("l2")

        course = classroom.state.get_course("c1")
        assert [(l.id, l.order) for l in course.lessons] == [("l1", 1), ("l3", 2)]

    @pytest.mark.asyncio
    async def test_delete_quiz_set_detaches_lesson(self, store):
        classroom = await loaded(store)
        await classroom.delete_quiz_set("qs1")

        assert classroom.quiz_set_for_lesson("c1", "l2") is None
        assert classroom.state.get_course("c1").get_lesson("l2").quiz_set_id is None

    @pytest.mark.asyncio
    async def test_add_student_and_assign(self, store):
        classroom = await loaded(store)
        student = await classroom.add_student("Grace", "grace@example.com")
        await classroom.assign_course(student.id, "c1")

        assert classroom.state.get_student(student.id).assigned_courses == ["c1"]

    @pytest.mark.asyncio
    async def test_update_quiz_settings(self, store):
        classroom = await loaded(store)
        settings = await classroom.update_quiz_settings(enforce_pass_mark=False)

        assert classroom.state.quiz_settings == settings
        result = await classroom.mark_lesson_complete("u1", "c1", "l2", quiz_score=0)
        assert result.progress.completed
