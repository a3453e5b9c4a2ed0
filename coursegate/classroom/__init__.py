"""
CourseGate Classroom - Progress, access and management logic.

This module provides:
- Aggregation: per-student course views over progress records
- Access: lesson accessibility (sequential gating + lesson locks)
- Locks: course-level and lesson-level lock state
- Quiz: attempt scoring against the pass mark
- Completion: lesson completion and other progress actions
- Catalog / Quiz bank / Roster: management of courses, quizzes, students
- Classroom: application state tying the above to a RemoteStore
"""

from .aggregation import (
    student_progress,
    completed_lessons_count,
    total_quiz_score,
    total_time_spent,
    viewed_lessons_count,
    resolve_quiz_set,
)

from .access import (
    lesson_accessible,
    is_lesson_accessible,
)

from .locks import (
    is_course_locked_for_user,
    toggle_course_lock,
    is_lesson_locked,
    toggle_lesson_lock,
    get_lesson_locks,
)

from .quiz import (
    QuizAttempt,
    evaluate_quiz,
    raw_score,
    score_percentage,
    passes_pass_mark,
)

from .completion import (
    CompletionResult,
    mark_lesson_complete,
    update_time_spent,
    update_pdf_viewed,
)

from .catalog import (
    fetch_courses,
    fetch_course,
    add_course,
    update_course,
    delete_course,
    add_lesson,
    update_lesson,
    delete_lesson,
    renumber_lessons,
)

from .quizbank import (
    fetch_quiz_sets,
    fetch_quiz_set,
    add_quiz_set,
    update_quiz_set,
    delete_quiz_set,
    add_quiz_question,
    update_quiz_question,
    delete_quiz_question,
    fetch_quiz_settings,
    update_quiz_settings,
)

from .roster import (
    fetch_students,
    fetch_student,
    fetch_assignments,
    add_student,
    update_student,
    delete_student,
    assign_course,
    remove_course_assignment,
    fetch_services,
    fetch_user_services,
)

from .state import (
    Classroom,
    ClassroomState,
    denormalize_progress,
)

__all__ = [
    # Aggregation
    "student_progress",
    "completed_lessons_count",
    "total_quiz_score",
    "total_time_spent",
    "viewed_lessons_count",
    "resolve_quiz_set",
    # Access
    "lesson_accessible",
    "is_lesson_accessible",
    # Locks
    "is_course_locked_for_user",
    "toggle_course_lock",
    "is_lesson_locked",
    "toggle_lesson_lock",
    "get_lesson_locks",
    # Quiz
    "QuizAttempt",
    "evaluate_quiz",
    "raw_score",
    "score_percentage",
    "passes_pass_mark",
    # Completion
    "CompletionResult",
    "mark_lesson_complete",
    "update_time_spent",
    "update_pdf_viewed",
    # Catalog
    "fetch_courses",
    "fetch_course",
    "add_course",
    "update_course",
    "delete_course",
    "add_lesson",
    "update_lesson",
    "delete_lesson",
    "renumber_lessons",
    # Quiz bank
    "fetch_quiz_sets",
    "fetch_quiz_set",
    "add_quiz_set",
    "update_quiz_set",
    "delete_quiz_set",
    "add_quiz_question",
    "update_quiz_question",
    "delete_quiz_question",
    "fetch_quiz_settings",
    "update_quiz_settings",
    # Roster
    "fetch_students",
    "fetch_student",
    "fetch_assignments",
    "add_student",
    "update_student",
    "delete_student",
    "assign_course",
    "remove_course_assignment",
    "fetch_services",
    "fetch_user_services",
    # State
    "Classroom",
    "ClassroomState",
    "denormalize_progress",
]
