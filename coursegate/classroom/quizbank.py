"""
Quiz bank - Quiz set, question and quiz settings management.

Quiz settings are a single row, created with defaults on first read and
updated in place afterwards.
"""

import logging
from typing import Optional

from coursegate.errors import NotFoundError, ValidationError
from coursegate.schemas import QuizQuestion, QuizSet, QuizSettings, validate_answer_index
from coursegate.store import RemoteStore, Table


logger = logging.getLogger(__name__)


SETTINGS_ROW_ID = "default"


# -----------------------------------------------------------------------------
# Quiz sets
# -----------------------------------------------------------------------------

async def fetch_quiz_sets(store: RemoteStore) -> list[QuizSet]:
    """All quiz sets with their questions."""
    set_rows = await store.list(Table.QUIZ_SETS)
    question_rows = await store.list(Table.QUIZ_QUESTIONS)

    questions_by_set: dict[str, list[QuizQuestion]] = {}
    for row in question_rows:
        questions_by_set.setdefault(row["quiz_set_id"], []).append(QuizQuestion(**row))

    return [
        QuizSet(**row, questions=questions_by_set.get(row["id"], []))
        for row in set_rows
    ]


async def fetch_quiz_set(store: RemoteStore, quiz_set_id: str) -> QuizSet:
    row = await store.get(Table.QUIZ_SETS, {"id": quiz_set_id})
    if row is None:
        raise NotFoundError("quiz set", quiz_set_id)
    question_rows = await store.list(Table.QUIZ_QUESTIONS, {"quiz_set_id": quiz_set_id})
    return QuizSet(**row, questions=[QuizQuestion(**r) for r in question_rows])


async def add_quiz_set(store: RemoteStore, title: str) -> QuizSet:
    if not title.strip():
        raise ValidationError("Quiz set title is required")
    row = await store.insert(Table.QUIZ_SETS, {"title": title})
    logger.info(f"Added quiz set {row['id']}: {title}")
    return QuizSet(**row)


async def update_quiz_set(store: RemoteStore, quiz_set_id: str, title: str) -> QuizSet:
    if not title.strip():
        raise ValidationError("Quiz set title is required")
    await store.update(Table.QUIZ_SETS, {"id": quiz_set_id}, {"title": title})
    return await fetch_quiz_set(store, quiz_set_id)


async def delete_quiz_set(store: RemoteStore, quiz_set_id: str):
    """Delete a quiz set, its questions, and detach it from lessons."""
    if await store.delete(Table.QUIZ_SETS, {"id": quiz_set_id}) == 0:
        raise NotFoundError("quiz set", quiz_set_id)

    await store.delete(Table.QUIZ_QUESTIONS, {"quiz_set_id": quiz_set_id})
    for lesson in await store.list(Table.LESSONS, {"quiz_set_id": quiz_set_id}):
        await store.update(Table.LESSONS, {"id": lesson["id"]}, {"quiz_set_id": None})

    logger.info(f"Deleted quiz set {quiz_set_id}")


# -----------------------------------------------------------------------------
# Questions
# -----------------------------------------------------------------------------

def _validate_question(question: str, options: list[str], correct_answer: int):
    if not question.strip():
        raise ValidationError("Question text is required")
    try:
        validate_answer_index(options, correct_answer)
    except ValueError as e:
        raise ValidationError(str(e)) from e


async def add_quiz_question(
    store: RemoteStore,
    quiz_set_id: str,
    question: str,
    options: list[str],
    correct_answer: int,
) -> QuizQuestion:
    _validate_question(question, options, correct_answer)
    if await store.get(Table.QUIZ_SETS, {"id": quiz_set_id}) is None:
        raise NotFoundError("quiz set", quiz_set_id)

    row = await store.insert(Table.QUIZ_QUESTIONS, {
        "quiz_set_id": quiz_set_id,
        "question": question,
        "options": list(options),
        "correct_answer": correct_answer,
    })
    return QuizQuestion(**row)


async def update_quiz_question(
    store: RemoteStore,
    question_id: str,
    question: Optional[str] = None,
    options: Optional[list[str]] = None,
    correct_answer: Optional[int] = None,
) -> QuizQuestion:
    """Update a question; the merged result must still be valid."""
    existing = await store.get(Table.QUIZ_QUESTIONS, {"id": question_id})
    if existing is None:
        raise NotFoundError("quiz question", question_id)

    changes = {}
    if question is not None:
        changes["question"] = question
    if options is not None:
        changes["options"] = list(options)
    if correct_answer is not None:
        changes["correct_answer"] = correct_answer

    merged = {**existing, **changes}
    _validate_question(merged["question"], merged["options"], merged["correct_answer"])

    row = await store.update(Table.QUIZ_QUESTIONS, {"id": question_id}, changes)
    return QuizQuestion(**row)


async def delete_quiz_question(store: RemoteStore, question_id: str):
    if await store.delete(Table.QUIZ_QUESTIONS, {"id": question_id}) == 0:
        raise NotFoundError("quiz question", question_id)


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------

async def fetch_quiz_settings(
    store: RemoteStore,
    defaults: Optional[QuizSettings] = None,
) -> QuizSettings:
    """Quiz settings, creating the row from defaults if it doesn't exist yet."""
    rows = await store.list(Table.QUIZ_SETTINGS)
    if rows:
        return QuizSettings(**rows[0])

    settings = defaults or QuizSettings()
    await store.upsert(Table.QUIZ_SETTINGS, {"id": SETTINGS_ROW_ID, **settings.model_dump()})
    logger.info(
        f"Created quiz settings (pass mark {settings.pass_mark_percentage}%, "
        f"enforced: {settings.enforce_pass_mark})"
    )
    return settings


async def update_quiz_settings(
    store: RemoteStore,
    pass_mark_percentage: Optional[int] = None,
    enforce_pass_mark: Optional[bool] = None,
    defaults: Optional[QuizSettings] = None,
) -> QuizSettings:
    """Partially update the settings row in place."""
    if pass_mark_percentage is not None and not 0 <= pass_mark_percentage <= 100:
        raise ValidationError(f"Pass mark must be between 0 and 100: {pass_mark_percentage}")

    await fetch_quiz_settings(store, defaults)
    rows = await store.list(Table.QUIZ_SETTINGS)
    row_id = rows[0]["id"]

    changes = {}
    if pass_mark_percentage is not None:
        changes["pass_mark_percentage"] = pass_mark_percentage
    if enforce_pass_mark is not None:
        changes["enforce_pass_mark"] = enforce_pass_mark

    row = await store.update(Table.QUIZ_SETTINGS, {"id": row_id}, changes)
    return QuizSettings(**row)
