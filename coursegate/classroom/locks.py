"""
Lock state - Course-level and lesson-level locks.

The two mechanisms are independent:
- Course lock: boolean `locked` on the student's course assignment. Blocks
  the whole course; admins bypass it.
- Lesson lock: presence of a user_lesson_locks row. Blocks one lesson
  regardless of sequential progress.

Toggles are last-write-wins; there is no concurrency token.
"""

import logging
from typing import Iterable

from coursegate.schemas import Course, CourseAssignment, StudentRole
from coursegate.store import RemoteStore, Table


logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Course lock
# -----------------------------------------------------------------------------

def is_course_locked_for_user(
    assignments: Iterable[CourseAssignment],
    user_id: str,
    course_id: str,
    role: StudentRole | str = StudentRole.STUDENT,
) -> bool:
    """Course lock for a student; admins are never locked out."""
    if StudentRole(role) == StudentRole.ADMIN:
        return False

    for assignment in assignments:
        if assignment.user_id == user_id and assignment.course_id == course_id:
            return assignment.locked
    return False


async def toggle_course_lock(store: RemoteStore, user_id: str, course_id: str) -> bool:
    """
    Flip the lock flag on a course assignment.

    Returns:
        The new lock state

    Raises:
        NotFoundError: If the course is not assigned to the student
    """
    key = {"user_id": user_id, "course_id": course_id}
    locked = await store.toggle(Table.COURSE_ASSIGNMENTS, key, "locked")

    logger.info(f"Course {course_id} {'locked' if locked else 'unlocked'} for {user_id}")
    return locked


# -----------------------------------------------------------------------------
# Lesson lock
# -----------------------------------------------------------------------------

def _lock_key(user_id: str, course_id: str, lesson_id: str) -> dict[str, str]:
    return {"user_id": user_id, "course_id": course_id, "lesson_id": lesson_id}


async def is_lesson_locked(store: RemoteStore, user_id: str, course_id: str, lesson_id: str) -> bool:
    row = await store.get(Table.LESSON_LOCKS, _lock_key(user_id, course_id, lesson_id))
    return row is not None


async def toggle_lesson_lock(store: RemoteStore, user_id: str, course_id: str, lesson_id: str) -> bool:
    """Lock by inserting a row, unlock by deleting it. Returns the new state."""
    key = _lock_key(user_id, course_id, lesson_id)
    if await store.get(Table.LESSON_LOCKS, key) is not None:
        await store.delete(Table.LESSON_LOCKS, key)
        locked = False
    else:
        await store.upsert(Table.LESSON_LOCKS, key)
        locked = True

    logger.info(f"Lesson {lesson_id} {'locked' if locked else 'unlocked'} for {user_id}")
    return locked


async def get_lesson_locks(store: RemoteStore, course: Course, user_id: str) -> dict[str, bool]:
    """Lock state for every lesson in the course, locked or not."""
    rows = await store.list(Table.LESSON_LOCKS, {"user_id": user_id, "course_id": course.id})
    locked_ids = {row["lesson_id"] for row in rows}
    return {lesson.id: lesson.id in locked_ids for lesson in course.lessons}


async def locked_lesson_ids(store: RemoteStore, user_id: str, course_id: str) -> set[str]:
    rows = await store.list(Table.LESSON_LOCKS, {"user_id": user_id, "course_id": course_id})
    return {row["lesson_id"] for row in rows}
