"""
Course schemas for CourseGate.

Defines Pydantic models for catalog content:
- Courses owning an ordered list of lessons
- Lessons with document, notes and an optional quiz set
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional


DEFAULT_PDF_URL = "/placeholder.pdf"


class Lesson(BaseModel):
    """
    A single unit of content within a course.

    `order` is 1-based and dense within the course (1..N).
    """
    id: str
    course_id: str
    title: str
    description: str = ""
    pdf_url: str = DEFAULT_PDF_URL
    instructor_notes: str = ""   # rich text (HTML)
    quiz_set_id: Optional[str] = None
    order: int = Field(..., ge=1)


class Course(BaseModel):
    id: str
    title: str
    description: str = ""
    lessons: list[Lesson] = []

    @field_validator('lessons')
    @classmethod
    def sort_by_order(cls, v):
        return sorted(v, key=lambda lesson: lesson.order)

    def lesson_at(self, order: int) -> Optional[Lesson]:
        """Lesson with the given order, or None."""
        for lesson in self.lessons:
            if lesson.order == order:
                return lesson
        return None

    def get_lesson(self, lesson_id: str) -> Optional[Lesson]:
        for lesson in self.lessons:
            if lesson.id == lesson_id:
                return lesson
        return None
