"""
Completion workflow - Recording progress actions for a lesson.

Provides:
- mark_lesson_complete: pass-mark gate, completion write, next lesson bootstrap
- update_time_spent / update_pdf_viewed: implicit progress row creation

A progress row is created the first time a progress-affecting action
happens for its key, never ahead of interaction. The one exception is the
next lesson's row, which completion creates so that the lesson shows up.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from coursegate.errors import NotFoundError, QuizNotPassedError, RemoteStoreError, ValidationError
from coursegate.schemas import Course, QuizSet, QuizSettings, StudentProgress
from coursegate.store import RemoteStore, Table

from .aggregation import resolve_quiz_set
from .quiz import passes_pass_mark, score_percentage


logger = logging.getLogger(__name__)


@dataclass
class CompletionResult:
    """Outcome of marking a lesson complete."""
    progress: StudentProgress
    next_lesson_id: Optional[str] = None
    next_progress_created: bool = False
    next_progress_error: Optional[Exception] = None


def _progress_key(user_id: str, course_id: str, lesson_id: str) -> dict[str, str]:
    return {"user_id": user_id, "course_id": course_id, "lesson_id": lesson_id}


def new_progress_row(user_id: str, course_id: str, lesson_id: str, **overrides) -> dict:
    """Progress row with every field at its default."""
    row = StudentProgress(
        user_id=user_id,
        course_id=course_id,
        lesson_id=lesson_id,
    ).to_row()
    row.update(overrides)
    return row


def _check_pass_mark(
    quiz_set: QuizSet,
    settings: QuizSettings,
    quiz_score: Optional[int],
    stored_score: Optional[int],
):
    committed = quiz_score if quiz_score is not None else stored_score
    committed = committed or 0
    count = quiz_set.question_count
    if not passes_pass_mark(committed, count, settings):
        raise QuizNotPassedError(score_percentage(committed, count), settings.required_percentage)


# -----------------------------------------------------------------------------
# Completion
# -----------------------------------------------------------------------------

async def mark_lesson_complete(
    store: RemoteStore,
    course: Course,
    quiz_sets: Iterable[QuizSet],
    settings: QuizSettings,
    user_id: str,
    lesson_id: str,
    quiz_score: Optional[int] = None,
) -> CompletionResult:
    """
    Mark a lesson complete and make the next lesson visible.

    When the lesson has a quiz and the pass mark is enforced, the committed
    score (or the stored one if none is given) must pass before anything is
    written. A given score overwrites the stored one and counts one attempt.

    Raises:
        NotFoundError: If the lesson is not part of the course
        ValidationError: If the score is negative or exceeds the question count
        QuizNotPassedError: If the pass mark gate refuses the completion
        RemoteStoreError: If the completion write fails (nothing is written)
    """
    lesson = course.get_lesson(lesson_id)
    if lesson is None:
        raise NotFoundError("lesson", lesson_id)

    quiz_set = resolve_quiz_set(lesson.quiz_set_id, quiz_sets)
    if quiz_score is not None:
        if quiz_score < 0:
            raise ValidationError(f"Quiz score cannot be negative: {quiz_score}")
        if quiz_set and quiz_score > quiz_set.question_count:
            raise ValidationError(
                f"Quiz score {quiz_score} exceeds {quiz_set.question_count} questions"
            )

    key = _progress_key(user_id, course.id, lesson_id)
    existing = await store.get(Table.PROGRESS, key)

    if quiz_set and settings.enforce_pass_mark:
        _check_pass_mark(quiz_set, settings, quiz_score, existing.get("quiz_score") if existing else None)

    if existing:
        changes = {"completed": True}
        if quiz_score is not None:
            changes["quiz_score"] = quiz_score
            changes["quiz_attempts"] = existing.get("quiz_attempts", 0) + 1
        row = await store.update(Table.PROGRESS, key, changes)
    else:
        row = await store.insert(Table.PROGRESS, new_progress_row(
            user_id, course.id, lesson_id,
            completed=True,
            pdf_viewed=True,
            quiz_score=quiz_score,
            quiz_attempts=1 if quiz_score is not None else 0,
        ))

    logger.info(f"Lesson {lesson_id} completed by {user_id} (quiz score: {quiz_score})")
    result = CompletionResult(
        progress=StudentProgress(**row, quiz_set_id=lesson.quiz_set_id),
    )

    next_lesson = course.lesson_at(lesson.order + 1)
    if next_lesson is None:
        return result

    result.next_lesson_id = next_lesson.id
    try:
        result.next_progress_created = await _bootstrap_progress(store, user_id, course.id, next_lesson.id)
    except RemoteStoreError as e:
        # Completion stays recorded; the next row is created on first visit
        logger.warning(f"Could not create progress for next lesson {next_lesson.id}: {e}")
        result.next_progress_error = e

    return result


async def _bootstrap_progress(store: RemoteStore, user_id: str, course_id: str, lesson_id: str) -> bool:
    """Create a default progress row unless one exists. Returns True if created."""
    key = _progress_key(user_id, course_id, lesson_id)
    if await store.get(Table.PROGRESS, key) is not None:
        return False
    await store.insert(Table.PROGRESS, new_progress_row(user_id, course_id, lesson_id))
    return True


# -----------------------------------------------------------------------------
# Other progress actions
# -----------------------------------------------------------------------------

async def update_time_spent(
    store: RemoteStore,
    user_id: str,
    course_id: str,
    lesson_id: str,
    seconds: int,
) -> StudentProgress:
    """Add seconds to the lesson's accumulated time."""
    if seconds < 0:
        raise ValidationError(f"Time spent cannot be negative: {seconds}")

    key = _progress_key(user_id, course_id, lesson_id)
    existing = await store.get(Table.PROGRESS, key)
    if existing:
        row = await store.update(Table.PROGRESS, key, {
            "time_spent": existing.get("time_spent", 0) + seconds,
        })
    else:
        row = await store.insert(Table.PROGRESS, new_progress_row(
            user_id, course_id, lesson_id, time_spent=seconds,
        ))
    return StudentProgress(**row)


async def update_pdf_viewed(
    store: RemoteStore,
    user_id: str,
    course_id: str,
    lesson_id: str,
) -> StudentProgress:
    """Record that the lesson document was opened."""
    key = _progress_key(user_id, course_id, lesson_id)
    existing = await store.get(Table.PROGRESS, key)
    if existing:
        row = await store.update(Table.PROGRESS, key, {"pdf_viewed": True})
    else:
        row = await store.insert(Table.PROGRESS, new_progress_row(
            user_id, course_id, lesson_id, pdf_viewed=True,
        ))
    return StudentProgress(**row)
