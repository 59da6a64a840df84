"""Resolve a stored test's question references into a normalized payload.

A test's ``questions`` column holds a mix of question ids (created through
the authoring API) and fully inlined question objects (written by the
random level-test generator).  Both forms assemble to the same shape:
``{id, question, options}`` with options sorted by letter.
"""

from __future__ import annotations

import logging
from typing import Any

from lms.core.metrics import QUESTION_REFS_DROPPED
from lms.models.assessment import (
    AssembledQuestion,
    AssembledTest,
    Assessment,
    ByReference,
    Inline,
    Question,
    QuestionOption,
    parse_question_refs,
)
from lms.repos.question_repo import QuestionRepo

logger = logging.getLogger(__name__)


def sort_options(options) -> tuple[QuestionOption, ...]:
    # plain string ordering; a missing letter sorts first
    return tuple(sorted(options, key=lambda o: o.option_letter or ""))


def normalize_question(question: Question) -> AssembledQuestion:
    return AssembledQuestion(
        id=question.id,
        question=question.question,
        options=sort_options(question.options),
    )


def _text(value: Any) -> str | None:
    # stored JSON from other writers may carry numbers where text belongs
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _inline_option(raw: dict[str, Any]) -> QuestionOption:
    return QuestionOption(
        id=_text(raw.get("id")),
        option_text=_text(raw.get("optionText")),
        option_letter=_text(raw.get("optionLetter")) or "",
        is_correct=bool(raw.get("isCorrect", False)),
    )


def normalize_inline(payload: dict[str, Any]) -> AssembledQuestion:
    raw_options = payload.get("options")
    if not isinstance(raw_options, list):
        raw_options = []
    return AssembledQuestion(
        id=_text(payload.get("id")),
        question=_text(payload.get("question")),
        options=sort_options(
            _inline_option(o) for o in raw_options if isinstance(o, dict)
        ),
    )


def inline_question(question: Question) -> dict[str, Any]:
    """The embedded form of a question, as stored in a test's questions list."""
    return {
        "id": question.id,
        "question": question.question,
        "isActive": question.is_active,
        "options": [
            {
                "id": o.id,
                "optionText": o.option_text,
                "optionLetter": o.option_letter,
                "isCorrect": o.is_correct,
            }
            for o in sort_options(question.options)
        ],
    }


async def resolve_questions(
    raw: object, questions: QuestionRepo
) -> list[AssembledQuestion]:
    """Resolve every reference in order, dropping ids that no longer exist.

    Lookups run one after another so the output keeps the stored order.
    """
    resolved: list[AssembledQuestion] = []
    for ref in parse_question_refs(raw):
        match ref:
            case ByReference(question_id=question_id):
                question = await questions.get(question_id)
                if question is None:
                    logger.debug("Dropping unresolved question ref id=%s", question_id)
                    QUESTION_REFS_DROPPED.inc()
                    continue
                resolved.append(normalize_question(question))
            case Inline(payload=payload):
                resolved.append(normalize_inline(payload))
    return resolved


async def assemble_test(
    assessment: Assessment, questions: QuestionRepo
) -> AssembledTest:
    """Build the normalized test.  The caller handles a missing test."""
    resolved = await resolve_questions(assessment.questions, questions)
    return AssembledTest(assessment=assessment, questions=tuple(resolved))
