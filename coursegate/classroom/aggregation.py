"""
Progress aggregation - Per-student, per-course views over progress records.

Pure functions; the caller passes the snapshot it holds. Record order is
not meaningful, consumers re-derive order from Lesson.order.
"""

from typing import Iterable

from coursegate.schemas import Course, QuizSet, QuizTotals, StudentProgress


def student_progress(
    progress: Iterable[StudentProgress],
    user_id: str,
    course_id: str,
) -> list[StudentProgress]:
    """Progress records for one student in one course."""
    return [
        p for p in progress
        if p.user_id == user_id and p.course_id == course_id
    ]


def find_progress(
    progress: Iterable[StudentProgress],
    user_id: str,
    course_id: str,
    lesson_id: str,
) -> StudentProgress | None:
    for p in progress:
        if p.user_id == user_id and p.course_id == course_id and p.lesson_id == lesson_id:
            return p
    return None


def completed_lessons_count(
    progress: Iterable[StudentProgress],
    user_id: str,
    course_id: str,
) -> int:
    return sum(1 for p in student_progress(progress, user_id, course_id) if p.completed)


def total_quiz_score(
    progress: Iterable[StudentProgress],
    courses: Iterable[Course],
    quiz_sets: Iterable[QuizSet],
    user_id: str,
    course_id: str,
) -> QuizTotals:
    """
    Quiz points earned versus maximum attainable for a course.

    The total counts every quiz-bearing lesson's questions whether or not
    the student has attempted it. Lessons pointing at a deleted quiz set
    contribute nothing.
    """
    score = sum(
        p.quiz_score for p in student_progress(progress, user_id, course_id)
        if p.quiz_score is not None
    )

    quiz_sets = list(quiz_sets)
    total = 0
    course = next((c for c in courses if c.id == course_id), None)
    if course:
        for lesson in course.lessons:
            quiz_set = resolve_quiz_set(lesson.quiz_set_id, quiz_sets)
            if quiz_set:
                total += quiz_set.question_count

    return QuizTotals(score=score, total=total)


def total_time_spent(
    progress: Iterable[StudentProgress],
    user_id: str,
    course_id: str,
) -> int:
    """Seconds spent across all lessons of the course."""
    return sum(p.time_spent for p in student_progress(progress, user_id, course_id))


def viewed_lessons_count(
    progress: Iterable[StudentProgress],
    user_id: str,
    course_id: str,
) -> int:
    return sum(1 for p in student_progress(progress, user_id, course_id) if p.pdf_viewed)


def resolve_quiz_set(quiz_set_id: str | None, quiz_sets: Iterable[QuizSet]) -> QuizSet | None:
    """Quiz set by ID; a missing or dangling reference resolves to None."""
    if not quiz_set_id:
        return None
    return next((qs for qs in quiz_sets if qs.id == quiz_set_id), None)
