"""
Schema validation tests for CourseGate.

Tests all Pydantic models to ensure they validate correctly.
"""

import pytest

from coursegate.schemas import (
    # Course
    Course,
    Lesson,
    DEFAULT_PDF_URL,
    # Quiz
    QuizQuestion,
    QuizSet,
    QuizSettings,
    validate_answer_index,
    # Student
    Student,
    StudentRole,
    CourseAssignment,
    ServiceOffering,
    ServiceStatus,
    # Progress
    StudentProgress,
    QuizTotals,
)


class TestAnswerValidation:
    """Test answer index validation helper."""

    def test_valid_index(self):
        assert validate_answer_index(["a", "b"], 0) == 0
        assert validate_answer_index(["a", "b"], 1) == 1

    def test_index_past_end(self):
        with pytest.raises(ValueError):
            validate_answer_index(["a", "b"], 2)

    def test_negative_index(self):
        with pytest.raises(ValueError):
            validate_answer_index(["a", "b"], -1)

    def test_no_options(self):
        with pytest.raises(ValueError):
            validate_answer_index([], 0)


class TestCourseSchemas:
    """Test course and lesson schemas."""

    def test_lesson_defaults(self):
        lesson = Lesson(id="l1", course_id="c1", title="Intro", order=1)
        assert lesson.pdf_url == DEFAULT_PDF_URL
        assert lesson.quiz_set_id is None
        assert lesson.instructor_notes == ""

    def test_lesson_order_must_be_positive(self):
        with pytest.raises(ValueError):
            Lesson(id="l1", course_id="c1", title="Intro", order=0)

    def test_course_sorts_lessons(self):
        course = Course(
            id="c1",
            title="Course",
            lessons=[
                Lesson(id="b", course_id="c1", title="B", order=2),
                Lesson(id="a", course_id="c1", title="A", order=1),
            ]
        )
        assert [lesson.id for lesson in course.lessons] == ["a", "b"]

    def test_lesson_lookup(self, course):
        assert course.lesson_at(2).id == "l2"
        assert course.lesson_at(9) is None
        assert course.get_lesson("l3").order == 3
        assert course.get_lesson("missing") is None


class TestQuizSchemas:
    """Test quiz schemas."""

    def test_question_valid(self):
        q = QuizQuestion(id="q1", question="2+2?", options=["3", "4"], correct_answer=1)
        assert q.correct_answer == 1

    def test_question_answer_out_of_bounds(self):
        with pytest.raises(ValueError):
            QuizQuestion(id="q1", question="2+2?", options=["3", "4"], correct_answer=2)

    def test_quiz_set_question_count(self, quiz_set):
        assert quiz_set.question_count == 4
        assert QuizSet(id="empty", title="Empty").question_count == 0

    def test_settings_defaults(self):
        settings = QuizSettings()
        assert settings.pass_mark_percentage == 70
        assert settings.enforce_pass_mark is True
        assert settings.required_percentage == 70

    def test_settings_not_enforced_requires_nothing(self):
        assert QuizSettings(pass_mark_percentage=90, enforce_pass_mark=False).required_percentage == 0

    def test_settings_bounds(self):
        with pytest.raises(ValueError):
            QuizSettings(pass_mark_percentage=101)
        with pytest.raises(ValueError):
            QuizSettings(pass_mark_percentage=-1)


class TestStudentSchemas:
    """Test student, assignment and service schemas."""

    def test_student_role(self):
        student = Student(id="u1", name="Ada", email="ada@example.com")
        assert student.role == StudentRole.STUDENT
        assert not student.is_admin

        admin = Student(id="a1", name="Root", email="root@example.com", role="admin")
        assert admin.is_admin

    def test_invalid_role(self):
        with pytest.raises(ValueError):
            Student(id="u1", name="Ada", email="ada@example.com", role="instructor")

    def test_assignment_unlocked_by_default(self):
        assert CourseAssignment(user_id="u1", course_id="c1").locked is False

    def test_service_offering(self):
        service = ServiceOffering(id="s1", title="Advisory", type="advisory")
        assert service.status == ServiceStatus.ACTIVE
        with pytest.raises(ValueError):
            ServiceOffering(id="s2", title="Bad", type="consulting")


class TestProgressSchemas:
    """Test progress schemas."""

    def test_progress_defaults(self):
        p = StudentProgress(user_id="u1", course_id="c1", lesson_id="l1")
        assert p.completed is False
        assert p.time_spent == 0
        assert p.pdf_viewed is False
        assert p.quiz_score is None
        assert p.quiz_attempts == 0

    def test_to_row_drops_denormalized_fields(self):
        p = StudentProgress(
            user_id="u1", course_id="c1", lesson_id="l1",
            quiz_set_id="qs1", locked=True,
        )
        row = p.to_row()
        assert "quiz_set_id" not in row
        assert "locked" not in row
        assert row["lesson_id"] == "l1"

    def test_negative_time_rejected(self):
        with pytest.raises(ValueError):
            StudentProgress(user_id="u1", course_id="c1", lesson_id="l1", time_spent=-5)

    def test_quiz_totals_percentage(self):
        assert QuizTotals(score=3, total=4).percentage == 75.0

    def test_quiz_totals_zero_total(self):
        totals = QuizTotals(score=0, total=0)
        assert totals.percentage is None
