"""
Student schemas for CourseGate.

Defines Pydantic models for:
- Student / admin profiles
- Course assignments (carrying the course-level lock flag)
- Service offerings
"""

from enum import Enum

from pydantic import BaseModel


class StudentRole(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"


class Student(BaseModel):
    id: str
    name: str
    email: str
    role: StudentRole = StudentRole.STUDENT
    assigned_courses: list[str] = []

    @property
    def is_admin(self) -> bool:
        return self.role == StudentRole.ADMIN


class CourseAssignment(BaseModel):
    """Many-to-many link between a student and a course."""
    user_id: str
    course_id: str
    locked: bool = False


class ServiceType(str, Enum):
    COURSE = "course"
    FRAMEWORK = "framework"
    TRANSFORMATION = "transformation"
    ARCHITECTURE = "architecture"
    ADVISORY = "advisory"


class ServiceStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ServiceOffering(BaseModel):
    id: str
    title: str
    description: str = ""
    type: ServiceType
    status: ServiceStatus = ServiceStatus.ACTIVE
