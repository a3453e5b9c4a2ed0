"""
Progress tracking schemas for CourseGate.

Defines Pydantic models for:
- Per-student, per-lesson progress records
- Lesson lock rows
- Course quiz totals
"""

from pydantic import BaseModel, Field, computed_field
from typing import Optional


# Columns filled in at read time; never written to the progress table
DENORMALIZED_FIELDS = {"quiz_set_id", "locked"}


class StudentProgress(BaseModel):
    """Progress for one (user, course, lesson) key."""
    user_id: str
    course_id: str
    lesson_id: str
    completed: bool = False
    time_spent: int = Field(0, ge=0)   # seconds
    pdf_viewed: bool = False
    quiz_score: Optional[int] = None
    quiz_attempts: int = Field(0, ge=0)
    quiz_set_id: Optional[str] = None  # from the lesson
    locked: bool = False               # from the course assignment

    @property
    def key(self) -> dict[str, str]:
        return {
            "user_id": self.user_id,
            "course_id": self.course_id,
            "lesson_id": self.lesson_id,
        }

    def to_row(self) -> dict:
        """Store row without the denormalized columns."""
        return self.model_dump(exclude=DENORMALIZED_FIELDS)


class LessonLock(BaseModel):
    """Presence of a row means the lesson is locked for the user."""
    user_id: str
    course_id: str
    lesson_id: str


class QuizTotals(BaseModel):
    score: int = 0
    total: int = 0   # maximum attainable points for the course

    @computed_field
    @property
    def percentage(self) -> Optional[float]:
        """Score as a percentage, or None when the course has no quiz points."""
        if self.total == 0:
            return None
        return round(self.score / self.total * 100, 1)
