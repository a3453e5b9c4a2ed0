"""CourseGate utilities."""

from .timefmt import format_time_spent

__all__ = ["format_time_spent"]
