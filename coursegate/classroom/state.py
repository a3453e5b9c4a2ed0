"""
Classroom - Application state over a RemoteStore.

Combines the store (source of truth) with a ClassroomState snapshot
(read-through copies) to provide:
- Concurrent loading of every table
- Aggregates and access checks over the snapshot
- Mutations that write to the store first and only then update the snapshot
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from coursegate.errors import NotFoundError
from coursegate.schemas import (
    Course,
    CourseAssignment,
    QuizResult,
    QuizSet,
    QuizSettings,
    QuizTotals,
    Student,
    StudentProgress,
    StudentRole,
)
from coursegate.store import RemoteStore, Table

from . import aggregation, catalog, completion, locks, quizbank, roster
from .access import lesson_accessible
from .completion import CompletionResult
from .quiz import evaluate_quiz


logger = logging.getLogger(__name__)


@dataclass
class ClassroomState:
    """Snapshot of every table the core reads."""
    courses: list[Course] = field(default_factory=list)
    students: list[Student] = field(default_factory=list)
    quiz_sets: list[QuizSet] = field(default_factory=list)
    quiz_settings: QuizSettings = field(default_factory=QuizSettings)
    assignments: list[CourseAssignment] = field(default_factory=list)
    progress: list[StudentProgress] = field(default_factory=list)

    def get_course(self, course_id: str) -> Optional[Course]:
        return next((c for c in self.courses if c.id == course_id), None)

    def get_student(self, student_id: str) -> Optional[Student]:
        return next((s for s in self.students if s.id == student_id), None)


def denormalize_progress(
    rows: Iterable[dict],
    courses: Sequence[Course],
    assignments: Sequence[CourseAssignment],
) -> list[StudentProgress]:
    """Progress records with quiz_set_id from the lesson and locked from the assignment."""
    lessons = {lesson.id: lesson for course in courses for lesson in course.lessons}
    locked = {(a.user_id, a.course_id): a.locked for a in assignments}

    result = []
    for row in rows:
        lesson = lessons.get(row["lesson_id"])
        result.append(StudentProgress(
            **{k: v for k, v in row.items() if k not in ("quiz_set_id", "locked")},
            quiz_set_id=lesson.quiz_set_id if lesson else None,
            locked=locked.get((row["user_id"], row["course_id"]), False),
        ))
    return result


async def fetch_progress_rows(store: RemoteStore) -> list[dict]:
    return await store.list(Table.PROGRESS)


class Classroom:
    """
    Explicit application state for one session.

    Read methods are synchronous and work on the snapshot; mutations are
    async and never touch the snapshot unless the store write succeeded.
    """

    def __init__(self, store: RemoteStore, default_quiz_settings: Optional[QuizSettings] = None):
        """
        Initialize classroom.

        Args:
            store: RemoteStore holding all tables
            default_quiz_settings: Settings written on first read if none exist
        """
        self.store = store
        self.default_quiz_settings = default_quiz_settings
        self.state = ClassroomState()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def refresh(self):
        """
        Reload every table concurrently.

        Parts that loaded are applied even if others failed; each failure is
        logged and the first one is re-raised afterwards.
        """
        names = ["courses", "students", "quiz_sets", "quiz_settings", "assignments", "progress"]
        results = await asyncio.gather(
            catalog.fetch_courses(self.store),
            roster.fetch_students(self.store),
            quizbank.fetch_quiz_sets(self.store),
            quizbank.fetch_quiz_settings(self.store, self.default_quiz_settings),
            roster.fetch_assignments(self.store),
            fetch_progress_rows(self.store),
            return_exceptions=True,
        )
        loaded = dict(zip(names, results))

        errors = []
        for name, value in loaded.items():
            if isinstance(value, BaseException):
                logger.error(f"Failed to load {name}: {value}")
                errors.append(value)
            elif name != "progress":
                setattr(self.state, name, value)

        if not isinstance(loaded["progress"], BaseException):
            self.state.progress = denormalize_progress(
                loaded["progress"], self.state.courses, self.state.assignments,
            )

        if errors:
            logger.warning(f"Partial refresh: {len(errors)} of {len(names)} tables failed")
            raise errors[0]

    async def refresh_courses(self):
        self.state.courses = await catalog.fetch_courses(self.store)

    async def refresh_students(self):
        students, assignments = await asyncio.gather(
            roster.fetch_students(self.store),
            roster.fetch_assignments(self.store),
        )
        self.state.students = students
        self.state.assignments = assignments

    async def refresh_quizzes(self):
        quiz_sets, settings = await asyncio.gather(
            quizbank.fetch_quiz_sets(self.store),
            quizbank.fetch_quiz_settings(self.store, self.default_quiz_settings),
        )
        self.state.quiz_sets = quiz_sets
        self.state.quiz_settings = settings

    async def refresh_progress(self):
        rows = await fetch_progress_rows(self.store)
        self.state.progress = denormalize_progress(rows, self.state.courses, self.state.assignments)

    # -------------------------------------------------------------------------
    # Aggregates
    # -------------------------------------------------------------------------

    def student_progress(self, user_id: str, course_id: str) -> list[StudentProgress]:
        return aggregation.student_progress(self.state.progress, user_id, course_id)

    def completed_lessons_count(self, user_id: str, course_id: str) -> int:
        return aggregation.completed_lessons_count(self.state.progress, user_id, course_id)

    def total_quiz_score(self, user_id: str, course_id: str) -> QuizTotals:
        return aggregation.total_quiz_score(
            self.state.progress, self.state.courses, self.state.quiz_sets, user_id, course_id,
        )

    def total_time_spent(self, user_id: str, course_id: str) -> int:
        return aggregation.total_time_spent(self.state.progress, user_id, course_id)

    def viewed_lessons_count(self, user_id: str, course_id: str) -> int:
        return aggregation.viewed_lessons_count(self.state.progress, user_id, course_id)

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    def _role(self, user_id: str) -> StudentRole:
        student = self.state.get_student(user_id)
        return student.role if student else StudentRole.STUDENT

    def is_course_locked_for_user(self, user_id: str, course_id: str) -> bool:
        return locks.is_course_locked_for_user(
            self.state.assignments, user_id, course_id, self._role(user_id),
        )

    async def is_lesson_accessible(self, user_id: str, course_id: str, lesson_order: int) -> bool:
        """Sequential gating plus the explicit lesson lock (course lock not included)."""
        course = self.state.get_course(course_id)
        if course is None:
            return False
        locked_ids = await locks.locked_lesson_ids(self.store, user_id, course_id)
        return lesson_accessible(course, self.state.progress, locked_ids, user_id, lesson_order)

    async def can_open_lesson(self, user_id: str, course_id: str, lesson_order: int) -> bool:
        """Both checks a caller needs before navigating: course lock and lesson access."""
        if self.is_course_locked_for_user(user_id, course_id):
            return False
        return await self.is_lesson_accessible(user_id, course_id, lesson_order)

    async def is_lesson_locked(self, user_id: str, course_id: str, lesson_id: str) -> bool:
        return await locks.is_lesson_locked(self.store, user_id, course_id, lesson_id)

    async def get_lesson_locks(self, user_id: str, course_id: str) -> dict[str, bool]:
        course = self.state.get_course(course_id)
        if course is None:
            return {}
        return await locks.get_lesson_locks(self.store, course, user_id)

    async def toggle_lesson_lock(self, user_id: str, course_id: str, lesson_id: str) -> bool:
        return await locks.toggle_lesson_lock(self.store, user_id, course_id, lesson_id)

    async def toggle_course_lock(self, user_id: str, course_id: str) -> bool:
        locked = await locks.toggle_course_lock(self.store, user_id, course_id)

        self.state.assignments = [
            a.model_copy(update={"locked": locked})
            if a.user_id == user_id and a.course_id == course_id else a
            for a in self.state.assignments
        ]
        self.state.progress = [
            p.model_copy(update={"locked": locked})
            if p.user_id == user_id and p.course_id == course_id else p
            for p in self.state.progress
        ]
        return locked

    # -------------------------------------------------------------------------
    # Quizzes
    # -------------------------------------------------------------------------

    def quiz_set_for_lesson(self, course_id: str, lesson_id: str) -> Optional[QuizSet]:
        course = self.state.get_course(course_id)
        lesson = course.get_lesson(lesson_id) if course else None
        if lesson is None:
            return None
        return aggregation.resolve_quiz_set(lesson.quiz_set_id, self.state.quiz_sets)

    def evaluate_quiz(self, quiz_set: QuizSet, selections: Sequence[Optional[int]]) -> QuizResult:
        return evaluate_quiz(quiz_set, selections, self.state.quiz_settings)

    # -------------------------------------------------------------------------
    # Progress actions
    # -------------------------------------------------------------------------

    async def _quiz_sets_for(self, course: Course, lesson_id: str) -> list[QuizSet]:
        """Snapshot quiz sets, plus the lesson's quiz set read from the store if the snapshot lacks it."""
        lesson = course.get_lesson(lesson_id)
        quiz_set_id = lesson.quiz_set_id if lesson else None
        if quiz_set_id is None or aggregation.resolve_quiz_set(quiz_set_id, self.state.quiz_sets):
            return self.state.quiz_sets

        try:
            quiz_set = await quizbank.fetch_quiz_set(self.store, quiz_set_id)
        except NotFoundError:
            return self.state.quiz_sets
        return self.state.quiz_sets + [quiz_set]

    async def mark_lesson_complete(
        self,
        user_id: str,
        course_id: str,
        lesson_id: str,
        quiz_score: Optional[int] = None,
    ) -> CompletionResult:
        course = self.state.get_course(course_id)
        if course is None:
            course = await catalog.fetch_course(self.store, course_id)

        result = await completion.mark_lesson_complete(
            self.store,
            course,
            await self._quiz_sets_for(course, lesson_id),
            self.state.quiz_settings,
            user_id,
            lesson_id,
            quiz_score,
        )

        self._apply_progress(result.progress)
        if result.next_progress_created:
            self._apply_progress(StudentProgress(
                user_id=user_id, course_id=course.id, lesson_id=result.next_lesson_id,
            ))
        return result

    def _apply_progress(self, record: StudentProgress):
        record = denormalize_progress([record.to_row()], self.state.courses, self.state.assignments)[0]
        others = [
            p for p in self.state.progress
            if (p.user_id, p.course_id, p.lesson_id) != (record.user_id, record.course_id, record.lesson_id)
        ]
        self.state.progress = others + [record]

    async def update_time_spent(self, user_id: str, course_id: str, lesson_id: str, seconds: int):
        record = await completion.update_time_spent(self.store, user_id, course_id, lesson_id, seconds)
        self._apply_progress(record)

    async def update_pdf_viewed(self, user_id: str, course_id: str, lesson_id: str):
        record = await completion.update_pdf_viewed(self.store, user_id, course_id, lesson_id)
        self._apply_progress(record)

    # -------------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------------

    async def add_course(self, title: str, description: str = "") -> Course:
        course = await catalog.add_course(self.store, title, description)
        self.state.courses = self.state.courses + [course]
        return course

    async def update_course(self, course_id: str, **changes) -> Course:
        course = await catalog.update_course(self.store, course_id, **changes)
        self.state.courses = [course if c.id == course_id else c for c in self.state.courses]
        return course

    async def delete_course(self, course_id: str):
        await catalog.delete_course(self.store, course_id)
        await self.refresh_courses()
        await self.refresh_students()
        await self.refresh_progress()

    async def add_lesson(self, course_id: str, title: str, **fields):
        lesson = await catalog.add_lesson(self.store, course_id, title, **fields)
        await self.refresh_courses()
        return lesson

    async def update_lesson(self, lesson_id: str, **changes):
        lesson = await catalog.update_lesson(self.store, lesson_id, **changes)
        await self.refresh_courses()
        return lesson

    async def delete_lesson(self, lesson_id: str):
        remaining = await catalog.delete_lesson(self.store, lesson_id)
        await self.refresh_courses()
        await self.refresh_progress()
        return remaining

    # -------------------------------------------------------------------------
    # Quiz bank
    # -------------------------------------------------------------------------

    async def add_quiz_set(self, title: str) -> QuizSet:
        quiz_set = await quizbank.add_quiz_set(self.store, title)
        self.state.quiz_sets = self.state.quiz_sets + [quiz_set]
        return quiz_set

    async def update_quiz_set(self, quiz_set_id: str, title: str) -> QuizSet:
        quiz_set = await quizbank.update_quiz_set(self.store, quiz_set_id, title)
        self.state.quiz_sets = [quiz_set if qs.id == quiz_set_id else qs for qs in self.state.quiz_sets]
        return quiz_set

    async def delete_quiz_set(self, quiz_set_id: str):
        await quizbank.delete_quiz_set(self.store, quiz_set_id)
        self.state.quiz_sets = [qs for qs in self.state.quiz_sets if qs.id != quiz_set_id]
        await self.refresh_courses()
        await self.refresh_progress()

    async def add_quiz_question(self, quiz_set_id: str, question: str, options: list[str], correct_answer: int):
        created = await quizbank.add_quiz_question(self.store, quiz_set_id, question, options, correct_answer)
        await self.refresh_quizzes()
        return created

    async def update_quiz_question(self, question_id: str, **changes):
        updated = await quizbank.update_quiz_question(self.store, question_id, **changes)
        await self.refresh_quizzes()
        return updated

    async def delete_quiz_question(self, question_id: str):
        await quizbank.delete_quiz_question(self.store, question_id)
        await self.refresh_quizzes()

    async def update_quiz_settings(self, **changes) -> QuizSettings:
        settings = await quizbank.update_quiz_settings(
            self.store, defaults=self.default_quiz_settings, **changes,
        )
        self.state.quiz_settings = settings
        return settings

    # -------------------------------------------------------------------------
    # Roster
    # -------------------------------------------------------------------------

    async def add_student(self, name: str, email: str, role: StudentRole | str = StudentRole.STUDENT) -> Student:
        student = await roster.add_student(self.store, name, email, role)
        self.state.students = self.state.students + [student]
        return student

    async def update_student(self, student_id: str, **changes) -> Student:
        student = await roster.update_student(self.store, student_id, **changes)
        self.state.students = [student if s.id == student_id else s for s in self.state.students]
        return student

    async def delete_student(self, student_id: str):
        await roster.delete_student(self.store, student_id)
        await self.refresh_students()
        await self.refresh_progress()

    async def assign_course(self, student_id: str, course_id: str) -> CourseAssignment:
        assignment = await roster.assign_course(self.store, student_id, course_id)
        await self.refresh_students()
        return assignment

    async def remove_course_assignment(self, student_id: str, course_id: str):
        await roster.remove_course_assignment(self.store, student_id, course_id)
        await self.refresh_students()
        await self.refresh_progress()
