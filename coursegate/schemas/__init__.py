"""
CourseGate Schemas - Pydantic models for the course platform.

This module exports all schema classes for:
- Course: courses and ordered lessons
- Quiz: quiz sets, questions, settings and results
- Student: profiles, course assignments, service offerings
- Progress: student progress, lesson locks, quiz totals
"""

# Course schemas
from .course import (
    Course,
    Lesson,
    DEFAULT_PDF_URL,
)

# Quiz schemas
from .quiz import (
    QuizQuestion,
    QuizSet,
    QuizSettings,
    QuizResult,
    DEFAULT_PASS_MARK_PERCENTAGE,
    DEFAULT_ENFORCE_PASS_MARK,
    validate_answer_index,
)

# Student schemas
from .student import (
    Student,
    StudentRole,
    CourseAssignment,
    ServiceOffering,
    ServiceType,
    ServiceStatus,
)

# Progress schemas
from .progress import (
    StudentProgress,
    LessonLock,
    QuizTotals,
    DENORMALIZED_FIELDS,
)

__all__ = [
    # Course
    'Course',
    'Lesson',
    'DEFAULT_PDF_URL',
    # Quiz
    'QuizQuestion',
    'QuizSet',
    'QuizSettings',
    'QuizResult',
    'DEFAULT_PASS_MARK_PERCENTAGE',
    'DEFAULT_ENFORCE_PASS_MARK',
    'validate_answer_index',
    # Student
    'Student',
    'StudentRole',
    'CourseAssignment',
    'ServiceOffering',
    'ServiceType',
    'ServiceStatus',
    # Progress
    'StudentProgress',
    'LessonLock',
    'QuizTotals',
    'DENORMALIZED_FIELDS',
]
