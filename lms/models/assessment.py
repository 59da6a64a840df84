from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from lms.models.catalog import new_id

AssessmentKind = Literal["level", "subtopic", "module"]

DEFAULT_PASSING_SCORE = 70
DEFAULT_LEVEL_TIME_LIMIT = 1800  # seconds
DEFAULT_SUB_TOPIC_TIME_LIMIT = 600
DEFAULT_MODULE_TIME_LIMIT = 3600


@dataclass(frozen=True, slots=True)
class QuestionOption:
    id: str
    option_text: str
    option_letter: str
    is_correct: bool = False


@dataclass(frozen=True, slots=True)
class Question:
    id: str
    question: str
    options: tuple[QuestionOption, ...] = ()
    is_active: bool = True

    @staticmethod
    def new(
        *,
        question: str,
        options: list[tuple[str, str, bool]],
        is_active: bool = True,
    ) -> Question:
        """Build a question from ``(letter, text, is_correct)`` triples."""
        return Question(
            id=new_id(),
            question=question,
            options=tuple(
                QuestionOption(
                    id=new_id(),
                    option_text=text,
                    option_letter=letter,
                    is_correct=is_correct,
                )
                for letter, text, is_correct in options
            ),
            is_active=is_active,
        )


# --- Question references stored on a test ---


@dataclass(frozen=True, slots=True)
class ByReference:
    """A stored question identifier that must be looked up."""

    question_id: str


@dataclass(frozen=True, slots=True)
class Inline:
    """A question embedded in the test record, already resolved."""

    payload: dict[str, Any]


QuestionRef = ByReference | Inline


def parse_question_refs(raw: object) -> list[QuestionRef]:
    """Turn the stored ``questions`` JSON into tagged references.

    A missing or non-list value yields an empty list.  Elements that are
    neither strings nor objects are dropped.
    """
    if not isinstance(raw, list):
        return []
    refs: list[QuestionRef] = []
    for element in raw:
        if isinstance(element, str):
            refs.append(ByReference(element))
        elif isinstance(element, dict):
            refs.append(Inline(element))
    return refs


@dataclass(frozen=True, slots=True)
class Assessment:
    """A level, subtopic or module test.  ``parent_id`` is the id of the
    level, subtopic or module it belongs to."""

    id: str
    kind: AssessmentKind
    parent_id: str
    title: str
    description: str | None = None
    questions: list[Any] = field(default_factory=list)  # raw stored JSON
    total_questions: int | None = None
    passing_score: int = DEFAULT_PASSING_SCORE
    time_limit: int = DEFAULT_LEVEL_TIME_LIMIT
    is_active: bool = True
    created_at: datetime | None = None

    @staticmethod
    def new(
        *,
        kind: AssessmentKind,
        parent_id: str,
        title: str,
        description: str | None = None,
        questions: list[Any] | None = None,
        total_questions: int | None = None,
        passing_score: int = DEFAULT_PASSING_SCORE,
        time_limit: int = DEFAULT_LEVEL_TIME_LIMIT,
        is_active: bool = True,
        created_at: datetime | None = None,
    ) -> Assessment:
        return Assessment(
            id=new_id(),
            kind=kind,
            parent_id=parent_id,
            title=title,
            description=description,
            questions=list(questions or []),
            total_questions=total_questions,
            passing_score=passing_score,
            time_limit=time_limit,
            is_active=is_active,
            created_at=created_at,
        )


@dataclass(frozen=True, slots=True)
class AssembledQuestion:
    id: str | None
    question: str | None
    options: tuple[QuestionOption, ...]


@dataclass(frozen=True, slots=True)
class AssembledTest:
    assessment: Assessment
    questions: tuple[AssembledQuestion, ...]
