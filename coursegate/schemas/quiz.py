"""
Quiz schemas for CourseGate.

Defines Pydantic models for:
- Quiz sets and multiple-choice questions
- The process-wide quiz settings (pass mark policy)
- Evaluation results
"""

from pydantic import BaseModel, Field, model_validator


DEFAULT_PASS_MARK_PERCENTAGE = 70
DEFAULT_ENFORCE_PASS_MARK = True


def validate_answer_index(options: list[str], correct_answer: int) -> int:
    """Shared answer validation: 0-based index into a non-empty option list."""
    if not options:
        raise ValueError('Question must have at least one option')
    if correct_answer < 0 or correct_answer >= len(options):
        raise ValueError(
            f'Correct answer index {correct_answer} out of range for {len(options)} options'
        )
    return correct_answer


class QuizQuestion(BaseModel):
    id: str
    quiz_set_id: str = ""
    question: str
    options: list[str]
    correct_answer: int   # index into options

    @model_validator(mode='after')
    def answer_in_bounds(self):
        validate_answer_index(self.options, self.correct_answer)
        return self


class QuizSet(BaseModel):
    id: str
    title: str
    questions: list[QuizQuestion] = []

    @property
    def question_count(self) -> int:
        return len(self.questions)


class QuizSettings(BaseModel):
    """Pass mark policy. At most one row exists in the store."""
    pass_mark_percentage: int = Field(DEFAULT_PASS_MARK_PERCENTAGE, ge=0, le=100)
    enforce_pass_mark: bool = DEFAULT_ENFORCE_PASS_MARK

    @property
    def required_percentage(self) -> int:
        return self.pass_mark_percentage if self.enforce_pass_mark else 0


class QuizResult(BaseModel):
    """Outcome of scoring one attempt; computed locally, never stored."""
    raw_score: int = Field(..., ge=0)
    question_count: int = Field(..., ge=0)
    score_percentage: float
    required_percentage: float
    passed: bool
