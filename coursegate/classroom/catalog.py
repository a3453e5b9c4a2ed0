"""
Catalog - Course and lesson management.

Provides:
- Course create/update/delete with cascading cleanup
- Lesson create/update/delete keeping orders dense (1..N)
"""

import logging
from typing import Iterable, Optional

from coursegate.errors import NotFoundError, ValidationError
from coursegate.schemas import Course, Lesson, DEFAULT_PDF_URL
from coursegate.store import RemoteStore, Table


logger = logging.getLogger(__name__)


LESSON_UPDATABLE_FIELDS = {"title", "description", "pdf_url", "instructor_notes", "quiz_set_id"}


def _require_title(title: Optional[str], kind: str):
    if title is not None and not title.strip():
        raise ValidationError(f"{kind} title is required")


def renumber_lessons(lessons: Iterable[Lesson]) -> list[Lesson]:
    """Lessons sorted by order and renumbered 1..N."""
    ordered = sorted(lessons, key=lambda lesson: lesson.order)
    return [
        lesson.model_copy(update={"order": position})
        for position, lesson in enumerate(ordered, start=1)
    ]


# -----------------------------------------------------------------------------
# Courses
# -----------------------------------------------------------------------------

async def fetch_courses(store: RemoteStore) -> list[Course]:
    """All courses with their lessons in order."""
    course_rows = await store.list(Table.COURSES)
    lesson_rows = await store.list(Table.LESSONS)

    lessons_by_course: dict[str, list[Lesson]] = {}
    for row in lesson_rows:
        lessons_by_course.setdefault(row["course_id"], []).append(Lesson(**row))

    return [
        Course(**row, lessons=lessons_by_course.get(row["id"], []))
        for row in course_rows
    ]


async def fetch_course(store: RemoteStore, course_id: str) -> Course:
    row = await store.get(Table.COURSES, {"id": course_id})
    if row is None:
        raise NotFoundError("course", course_id)
    lesson_rows = await store.list(Table.LESSONS, {"course_id": course_id})
    return Course(**row, lessons=[Lesson(**r) for r in lesson_rows])


async def add_course(store: RemoteStore, title: str, description: str = "") -> Course:
    _require_title(title, "Course")
    row = await store.insert(Table.COURSES, {"title": title, "description": description})
    logger.info(f"Added course {row['id']}: {title}")
    return Course(**row)


async def update_course(
    store: RemoteStore,
    course_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> Course:
    _require_title(title, "Course")
    changes = {}
    if title is not None:
        changes["title"] = title
    if description is not None:
        changes["description"] = description

    await store.update(Table.COURSES, {"id": course_id}, changes)
    return await fetch_course(store, course_id)


async def delete_course(store: RemoteStore, course_id: str):
    """Delete a course with its lessons, progress, lesson locks and assignments."""
    if await store.delete(Table.COURSES, {"id": course_id}) == 0:
        raise NotFoundError("course", course_id)

    for table in (Table.LESSONS, Table.PROGRESS, Table.LESSON_LOCKS, Table.COURSE_ASSIGNMENTS):
        await store.delete(table, {"course_id": course_id})

    logger.info(f"Deleted course {course_id}")


# -----------------------------------------------------------------------------
# Lessons
# -----------------------------------------------------------------------------

async def add_lesson(
    store: RemoteStore,
    course_id: str,
    title: str,
    description: str = "",
    pdf_url: Optional[str] = None,
    instructor_notes: str = "",
    quiz_set_id: Optional[str] = None,
) -> Lesson:
    """Append a lesson to the end of the course."""
    _require_title(title, "Lesson")
    if await store.get(Table.COURSES, {"id": course_id}) is None:
        raise NotFoundError("course", course_id)

    existing = await store.list(Table.LESSONS, {"course_id": course_id})
    order = max((row["order"] for row in existing), default=0) + 1

    row = await store.insert(Table.LESSONS, {
        "course_id": course_id,
        "title": title,
        "description": description,
        "pdf_url": pdf_url or DEFAULT_PDF_URL,
        "instructor_notes": instructor_notes,
        "quiz_set_id": quiz_set_id,
        "order": order,
    })
    logger.info(f"Added lesson {row['id']} to course {course_id} at position {order}")
    return Lesson(**row)


async def update_lesson(store: RemoteStore, lesson_id: str, **changes) -> Lesson:
    """
    Update lesson content fields.

    Order is managed by add/delete and cannot be set here.

    Raises:
        NotFoundError: If the lesson doesn't exist
        ValidationError: For unknown fields or an empty title
    """
    unknown = set(changes) - LESSON_UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update lesson fields: {sorted(unknown)}")
    _require_title(changes.get("title"), "Lesson")

    row = await store.update(Table.LESSONS, {"id": lesson_id}, changes)
    return Lesson(**row)


async def delete_lesson(store: RemoteStore, lesson_id: str) -> list[Lesson]:
    """
    Delete a lesson and close the gap in the course's ordering.

    Returns:
        Remaining lessons of the course, renumbered
    """
    row = await store.get(Table.LESSONS, {"id": lesson_id})
    if row is None:
        raise NotFoundError("lesson", lesson_id)
    course_id = row["course_id"]

    await store.delete(Table.LESSONS, {"id": lesson_id})
    await store.delete(Table.PROGRESS, {"course_id": course_id, "lesson_id": lesson_id})
    await store.delete(Table.LESSON_LOCKS, {"course_id": course_id, "lesson_id": lesson_id})

    remaining = [Lesson(**r) for r in await store.list(Table.LESSONS, {"course_id": course_id})]
    current_orders = {lesson.id: lesson.order for lesson in remaining}
    renumbered = renumber_lessons(remaining)

    # Only write lessons whose position changed
    for lesson in renumbered:
        if lesson.order != current_orders[lesson.id]:
            await store.update(Table.LESSONS, {"id": lesson.id}, {"order": lesson.order})

    logger.info(f"Deleted lesson {lesson_id}; {len(renumbered)} lessons remain in {course_id}")
    return renumbered
