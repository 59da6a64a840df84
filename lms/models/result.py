from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from lms.models.assessment import AssessmentKind
from lms.models.catalog import new_id


@dataclass(frozen=True, slots=True)
class AssessmentResult:
    """One completed test attempt.  Never updated after creation.

    Module (final) test results carry no level.
    """

    id: str
    kind: AssessmentKind
    user_id: str
    test_id: str
    module_id: str
    level_id: str | None
    score: float
    completed_at: datetime
    sub_topic_id: str | None = None
    total_questions: int | None = None
    correct_answers: int | None = None
    passed: bool = False
    answers: Any = None

    @staticmethod
    def new(
        *,
        kind: AssessmentKind,
        user_id: str,
        test_id: str,
        module_id: str,
        level_id: str | None,
        score: float,
        completed_at: datetime,
        sub_topic_id: str | None = None,
        total_questions: int | None = None,
        correct_answers: int | None = None,
        passed: bool = False,
        answers: Any = None,
    ) -> AssessmentResult:
        return AssessmentResult(
            id=new_id(),
            kind=kind,
            user_id=user_id,
            test_id=test_id,
            module_id=module_id,
            level_id=level_id,
            score=score,
            completed_at=completed_at,
            sub_topic_id=sub_topic_id,
            total_questions=total_questions,
            correct_answers=correct_answers,
            passed=passed,
            answers=answers,
        )


@dataclass(frozen=True, slots=True)
class NamedRef:
    id: str
    title: str


@dataclass(frozen=True, slots=True)
class ResultDetail:
    """A result joined with its test, module, level (not for module
    results) and subtopic (subtopic results only)."""

    result: AssessmentResult
    test_title: str
    test_description: str | None
    module: NamedRef
    level: NamedRef | None
    sub_topic: NamedRef | None = None
