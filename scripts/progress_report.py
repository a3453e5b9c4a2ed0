#!/usr/bin/env python3
"""
progress_report.py - Print per-student course progress from a SQLite store.

For every student and assigned course shows completed lessons, quiz
totals, time spent and the course lock state.

Usage:
  python scripts/progress_report.py
  python scripts/progress_report.py --db data/coursegate.db --student <id>
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from coursegate.classroom import Classroom
from coursegate.config import load_settings
from coursegate.schemas import QuizSettings
from coursegate.store import SqliteStore
from coursegate.utils import format_time_spent


logger = logging.getLogger(__name__)


def format_course_line(classroom: Classroom, student_id: str, course_id: str) -> str:
    course = classroom.state.get_course(course_id)
    if course is None:
        return f"  - {course_id}: (course missing)"

    completed = classroom.completed_lessons_count(student_id, course_id)
    totals = classroom.total_quiz_score(student_id, course_id)
    quiz = f"{totals.score}/{totals.total}" if totals.total else "no quizzes"
    if totals.percentage is not None:
        quiz += f" ({totals.percentage}%)"
    time_spent = format_time_spent(classroom.total_time_spent(student_id, course_id))
    locked = " [LOCKED]" if classroom.is_course_locked_for_user(student_id, course_id) else ""

    return (
        f"  - {course.title}{locked}: {completed}/{len(course.lessons)} lessons, "
        f"quiz {quiz}, time {time_spent}"
    )


async def build_report(classroom: Classroom, student_id: str | None = None) -> list[str]:
    await classroom.refresh()

    lines = []
    for student in classroom.state.students:
        if student_id and student.id != student_id:
            continue
        lines.append(f"{student.name} <{student.email}> ({student.role.value})")
        if not student.assigned_courses:
            lines.append("  (no courses assigned)")
        for course_id in student.assigned_courses:
            lines.append(format_course_line(classroom, student.id, course_id))
    return lines


def main():
    parser = argparse.ArgumentParser(description="Print student progress report")
    parser.add_argument("--config", type=Path, default=None,
                        help="Settings YAML (default: config/coursegate.yaml)")
    parser.add_argument("--db", type=Path, default=None,
                        help="SQLite store path (overrides settings)")
    parser.add_argument("--student", default=None,
                        help="Only report this student ID")
    args = parser.parse_args()

    settings = load_settings(args.config)
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    db_path = args.db or settings.database_path
    logger.info(f"Reading store: {db_path}")

    classroom = Classroom(
        SqliteStore(db_path),
        QuizSettings(
            pass_mark_percentage=settings.default_pass_mark_percentage,
            enforce_pass_mark=settings.default_enforce_pass_mark,
        ),
    )
    lines = asyncio.run(build_report(classroom, args.student))

    if not lines:
        print("No students found.")
        return
    print("\n".join(lines))


if __name__ == "__main__":
    main()
