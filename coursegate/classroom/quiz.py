"""
Quiz evaluation - Scoring attempts against the answer key and pass mark.

Provides:
- Raw score and percentage calculation
- Pass/fail against the configured pass mark
- QuizAttempt for client-side answering and retries before committing
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from coursegate.schemas import QuizResult, QuizSet, QuizSettings


def raw_score(quiz_set: QuizSet, selections: Sequence[Optional[int]]) -> int:
    """
    Count questions whose selected option matches the correct answer.

    Missing, None or out-of-range selections never match.
    """
    correct = 0
    for index, question in enumerate(quiz_set.questions):
        if index >= len(selections):
            break
        selected = selections[index]
        if selected is None or not 0 <= selected < len(question.options):
            continue
        if selected == question.correct_answer:
            correct += 1
    return correct


def score_percentage(score: int, question_count: int) -> float:
    """Score as a percentage; an empty quiz counts as 100%."""
    if question_count == 0:
        return 100.0
    return score / question_count * 100


def passes_pass_mark(score: int, question_count: int, settings: QuizSettings) -> bool:
    return score_percentage(score, question_count) >= settings.required_percentage


def evaluate_quiz(
    quiz_set: QuizSet,
    selections: Sequence[Optional[int]],
    settings: QuizSettings,
) -> QuizResult:
    """
    Score an attempt.

    Args:
        quiz_set: Quiz with its questions and answer key
        selections: Selected option index per question, in question order
        settings: Pass mark policy

    Returns:
        QuizResult with raw score, percentage and pass/fail
    """
    score = raw_score(quiz_set, selections)
    count = quiz_set.question_count
    return QuizResult(
        raw_score=score,
        question_count=count,
        score_percentage=score_percentage(score, count),
        required_percentage=settings.required_percentage,
        passed=passes_pass_mark(score, count, settings),
    )


@dataclass
class QuizAttempt:
    """
    A student's in-progress answers to one quiz.

    Nothing here touches the store; only the committed raw score is passed
    on to the completion workflow.
    """
    quiz_set: QuizSet
    selections: list[Optional[int]] = field(default_factory=list)
    submitted: bool = False

    def __post_init__(self):
        if not self.selections:
            self.selections = [None] * self.quiz_set.question_count

    def select(self, question_index: int, option_index: int):
        if self.submitted:
            raise ValueError("Attempt already submitted; retry to answer again")
        self.selections[question_index] = option_index

    @property
    def is_complete(self) -> bool:
        return all(s is not None for s in self.selections)

    def submit(self, settings: QuizSettings) -> QuizResult:
        self.submitted = True
        return evaluate_quiz(self.quiz_set, self.selections, settings)

    def retry(self):
        """Clear answers for another try."""
        self.selections = [None] * self.quiz_set.question_count
        self.submitted = False
