"""
Lesson accessibility - Whether a student may open a lesson right now.

An explicit lesson lock always wins. Otherwise lessons open sequentially:
the first lesson is always open, later ones need the previous lesson
completed. A gap in the ordering fails open.
"""

from typing import Iterable

from coursegate.schemas import Course, StudentProgress
from coursegate.store import RemoteStore

from .aggregation import find_progress
from .locks import is_lesson_locked


def lesson_accessible(
    course: Course,
    progress: Iterable[StudentProgress],
    locked_lesson_ids: set[str],
    user_id: str,
    lesson_order: int,
) -> bool:
    """
    Pure accessibility predicate over a fixed snapshot.

    Args:
        course: Course with its lessons
        progress: Progress records (any users/courses; filtered here)
        locked_lesson_ids: Lessons the student has an explicit lock row for
        user_id: Student ID
        lesson_order: 1-based order of the target lesson

    Returns:
        True if the lesson can be opened
    """
    lesson = course.lesson_at(lesson_order)
    if lesson is None:
        return False

    if lesson.id in locked_lesson_ids:
        return False

    if lesson_order == 1:
        return True

    previous = course.lesson_at(lesson_order - 1)
    if previous is None:
        return True

    previous_progress = find_progress(progress, user_id, course.id, previous.id)
    return previous_progress is not None and previous_progress.completed


async def is_lesson_accessible(
    store: RemoteStore,
    course: Course,
    progress: Iterable[StudentProgress],
    user_id: str,
    lesson_order: int,
) -> bool:
    """Accessibility check that reads the lesson's lock row from the store."""
    lesson = course.lesson_at(lesson_order)
    if lesson is None:
        return False

    locked = await is_lesson_locked(store, user_id, course.id, lesson.id)
    return lesson_accessible(
        course,
        progress,
        {lesson.id} if locked else set(),
        user_id,
        lesson_order,
    )
