"""
CourseGate - Progress and access-control core for a course platform.

Students work through courses of ordered lessons (PDF, instructor notes,
optional quiz); admins manage courses, students, quiz sets and services.
All persistence goes through a RemoteStore.
"""

__version__ = "0.1.0"
