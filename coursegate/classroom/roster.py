"""
Roster - Students, course assignments and service offerings.

Removing a student or an assignment removes the progress and lesson locks
that hang off it.
"""

import logging
from typing import Optional

from coursegate.errors import NotFoundError, ValidationError
from coursegate.schemas import CourseAssignment, ServiceOffering, ServiceStatus, Student, StudentRole
from coursegate.store import RemoteStore, Table


logger = logging.getLogger(__name__)


def _parse_role(role: StudentRole | str) -> StudentRole:
    try:
        return StudentRole(role)
    except ValueError:
        raise ValidationError(f"Unknown role: {role}")


# -----------------------------------------------------------------------------
# Students
# -----------------------------------------------------------------------------

async def fetch_assignments(store: RemoteStore) -> list[CourseAssignment]:
    return [CourseAssignment(**row) for row in await store.list(Table.COURSE_ASSIGNMENTS)]


async def fetch_students(store: RemoteStore) -> list[Student]:
    """All profiles with the IDs of their assigned courses."""
    profiles = await store.list(Table.PROFILES)
    assignments = await fetch_assignments(store)

    return [
        Student(
            **profile,
            assigned_courses=[a.course_id for a in assignments if a.user_id == profile["id"]],
        )
        for profile in profiles
    ]


async def fetch_student(store: RemoteStore, student_id: str) -> Student:
    profile = await store.get(Table.PROFILES, {"id": student_id})
    if profile is None:
        raise NotFoundError("student", student_id)
    rows = await store.list(Table.COURSE_ASSIGNMENTS, {"user_id": student_id})
    return Student(**profile, assigned_courses=[row["course_id"] for row in rows])


async def add_student(
    store: RemoteStore,
    name: str,
    email: str,
    role: StudentRole | str = StudentRole.STUDENT,
    student_id: Optional[str] = None,
) -> Student:
    """
    Create a profile row.

    Args:
        store: Remote store
        name: Display name
        email: Email address, unique across profiles
        role: "student" or "admin"
        student_id: ID from the identity provider, generated if omitted
    """
    if not name.strip() or not email.strip():
        raise ValidationError("Student name and email are required")
    role = _parse_role(role)

    if await store.list(Table.PROFILES, {"email": email}):
        raise ValidationError(f"A profile with email {email} already exists")

    record = {"name": name, "email": email, "role": role.value}
    if student_id:
        record["id"] = student_id
    row = await store.insert(Table.PROFILES, record)
    logger.info(f"Added {role.value} {row['id']}: {name}")
    return Student(**row)


async def update_student(
    store: RemoteStore,
    student_id: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    role: Optional[StudentRole | str] = None,
) -> Student:
    changes = {}
    if name is not None:
        if not name.strip():
            raise ValidationError("Student name is required")
        changes["name"] = name
    if email is not None:
        if not email.strip():
            raise ValidationError("Student email is required")
        changes["email"] = email
    if role is not None:
        changes["role"] = _parse_role(role).value

    await store.update(Table.PROFILES, {"id": student_id}, changes)
    return await fetch_student(store, student_id)


async def delete_student(store: RemoteStore, student_id: str):
    """Delete a profile with its assignments, progress, lesson locks and services."""
    if await store.delete(Table.PROFILES, {"id": student_id}) == 0:
        raise NotFoundError("student", student_id)

    for table in (Table.COURSE_ASSIGNMENTS, Table.PROGRESS, Table.LESSON_LOCKS, Table.USER_SERVICES):
        await store.delete(table, {"user_id": student_id})

    logger.info(f"Deleted student {student_id}")


# -----------------------------------------------------------------------------
# Course assignments
# -----------------------------------------------------------------------------

async def assign_course(store: RemoteStore, student_id: str, course_id: str) -> CourseAssignment:
    """Assign a course (unlocked). Assigning twice returns the existing assignment."""
    if await store.get(Table.PROFILES, {"id": student_id}) is None:
        raise NotFoundError("student", student_id)
    if await store.get(Table.COURSES, {"id": course_id}) is None:
        raise NotFoundError("course", course_id)

    key = {"user_id": student_id, "course_id": course_id}
    existing = await store.get(Table.COURSE_ASSIGNMENTS, key)
    if existing:
        logger.info(f"Course {course_id} is already assigned to {student_id}")
        return CourseAssignment(**existing)

    row = await store.insert(Table.COURSE_ASSIGNMENTS, {**key, "locked": False})
    logger.info(f"Assigned course {course_id} to {student_id}")
    return CourseAssignment(**row)


async def remove_course_assignment(store: RemoteStore, student_id: str, course_id: str):
    """Unassign a course and drop the student's progress and lesson locks in it."""
    key = {"user_id": student_id, "course_id": course_id}
    if await store.delete(Table.COURSE_ASSIGNMENTS, key) == 0:
        raise NotFoundError("course assignment", key)

    await store.delete(Table.PROGRESS, key)
    await store.delete(Table.LESSON_LOCKS, key)
    logger.info(f"Removed course {course_id} from {student_id}")


# -----------------------------------------------------------------------------
# Services
# -----------------------------------------------------------------------------

async def fetch_services(store: RemoteStore) -> list[ServiceOffering]:
    return [ServiceOffering(**row) for row in await store.list(Table.SERVICES)]


async def fetch_user_services(store: RemoteStore, user_id: str) -> list[ServiceOffering]:
    """Active services linked to the user."""
    links = await store.list(Table.USER_SERVICES, {"user_id": user_id})
    service_ids = {link["service_id"] for link in links}
    if not service_ids:
        return []

    return [
        service for service in await fetch_services(store)
        if service.id in service_ids and service.status == ServiceStatus.ACTIVE
    ]
