"""Level/subtopic/module test authoring, lookup and result recording.

Authoring checks run in a fixed order: required fields first (400), then
the caller's role (403), then the parent's existence (404) and the
one-test-per-parent rule.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from lms.core.metrics import RESULTS_RECORDED
from lms.models.assessment import (
    DEFAULT_LEVEL_TIME_LIMIT,
    DEFAULT_MODULE_TIME_LIMIT,
    DEFAULT_PASSING_SCORE,
    DEFAULT_SUB_TOPIC_TIME_LIMIT,
    AssembledTest,
    Assessment,
    AssessmentKind,
)
from lms.models.principal import ROLE_MASTER_PRACTITIONER, Principal
from lms.models.result import AssessmentResult
from lms.repos.bundle import Repos
from lms.services import certificates as certificate_service
from lms.services.assembly import assemble_test
from lms.services.errors import ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def require_author(principal: Principal) -> None:
    if not principal.has_role(ROLE_MASTER_PRACTITIONER):
        logger.warning(
            "Test authoring denied: user=%s missing role=%s",
            principal.user_id,
            ROLE_MASTER_PRACTITIONER,
        )
        raise ForbiddenError("Forbidden")


async def get_level_test(repos: Repos, level_id: str) -> AssembledTest | None:
    """Assembled test for a level, or None when the level has none."""
    test = await repos.assessments.get_for_parent("level", level_id)
    if test is None:
        return None
    return await assemble_test(test, repos.questions)


async def get_sub_topic_test(repos: Repos, sub_topic_id: str) -> AssembledTest:
    test = await repos.assessments.get_for_parent("subtopic", sub_topic_id)
    if test is None:
        raise NotFoundError("Test not found", sub_topic_id=sub_topic_id)
    return await assemble_test(test, repos.questions)


async def get_module_test(repos: Repos, module_id: str) -> AssembledTest | None:
    test = await repos.assessments.get_for_parent("module", module_id)
    if test is None:
        return None
    return await assemble_test(test, repos.questions)


async def list_module_tests(repos: Repos) -> list[AssembledTest]:
    """Every module test, newest first, each with its questions resolved."""
    return [
        await assemble_test(test, repos.questions)
        for test in await repos.assessments.list_all("module")
    ]


async def create_level_test(
    repos: Repos,
    principal: Principal,
    *,
    level_id: str | None,
    title: str | None,
    description: str | None = None,
    questions: list[Any] | None = None,
    total_questions: int | None = None,
    passing_score: int | None = None,
    time_limit: int | None = None,
    is_active: bool | None = None,
) -> Assessment:
    if not level_id or not title:
        raise ValidationError("Level ID and title are required")
    require_author(principal)
    if await repos.catalog.get_level(level_id) is None:
        raise NotFoundError("Level not found", level_id=level_id)

    questions = questions or []
    test = Assessment.new(
        kind="level",
        parent_id=level_id,
        title=title,
        description=description,
        questions=questions,
        total_questions=(
            total_questions if total_questions is not None else len(questions)
        ),
        passing_score=DEFAULT_PASSING_SCORE if passing_score is None else passing_score,
        time_limit=DEFAULT_LEVEL_TIME_LIMIT if time_limit is None else time_limit,
        is_active=True if is_active is None else is_active,
    )
    # ConflictError propagates from the store's unique constraint
    await repos.assessments.add(test)
    logger.info("Level test created id=%s level=%s", test.id, level_id)
    return test


async def create_sub_topic_test(
    repos: Repos,
    principal: Principal,
    *,
    sub_topic_id: str | None,
    title: str | None = None,
    description: str | None = None,
    questions: list[Any] | None = None,
    passing_score: int | None = None,
    time_limit: int | None = None,
) -> Assessment:
    if not sub_topic_id:
        raise ValidationError("Sub-topic ID is required")
    require_author(principal)
    sub_topic = await repos.catalog.get_sub_topic(sub_topic_id)
    if sub_topic is None:
        raise NotFoundError("Sub-topic not found", sub_topic_id=sub_topic_id)

    questions = questions or []
    test = Assessment.new(
        kind="subtopic",
        parent_id=sub_topic_id,
        title=title or f"Test for {sub_topic.title}",
        description=description or f"Test questions for {sub_topic.title}",
        questions=questions,
        total_questions=len(questions),
        passing_score=DEFAULT_PASSING_SCORE if passing_score is None else passing_score,
        time_limit=DEFAULT_SUB_TOPIC_TIME_LIMIT if time_limit is None else time_limit,
    )
    await repos.assessments.add(test)
    logger.info("Sub-topic test created id=%s sub_topic=%s", test.id, sub_topic_id)
    return test


async def create_module_test(
    repos: Repos,
    principal: Principal,
    *,
    module_id: str | None,
    title: str | None,
    description: str | None = None,
    questions: list[Any] | None = None,
    total_questions: int | None = None,
    passing_score: int | None = None,
    time_limit: int | None = None,
    is_active: bool | None = None,
    now: datetime | None = None,
) -> Assessment:
    if not module_id or not title:
        raise ValidationError("Module ID and title are required")
    require_author(principal)
    if await repos.catalog.get_module(module_id) is None:
        raise NotFoundError("Module not found", module_id=module_id)

    questions = questions or []
    test = Assessment.new(
        kind="module",
        parent_id=module_id,
        title=title,
        description=description,
        questions=questions,
        total_questions=(
            total_questions if total_questions is not None else len(questions)
        ),
        passing_score=passing_score or DEFAULT_PASSING_SCORE,
        time_limit=time_limit or DEFAULT_MODULE_TIME_LIMIT,
        is_active=True if is_active is None else is_active,
        created_at=now or datetime.now(UTC),
    )
    await repos.assessments.add(test)
    logger.info("Module test created id=%s module=%s", test.id, module_id)
    return test


def _missing_fields(
    kind: AssessmentKind,
    test_id: str | None,
    module_id: str | None,
    level_id: str | None,
    sub_topic_id: str | None,
    score: float | None,
) -> list[str]:
    required: list[tuple[str, object]] = [
        ("moduleTestId" if kind == "module" else "testId", test_id),
        ("moduleId", module_id),
    ]
    if kind != "module":
        required.append(("levelId", level_id))
    if kind == "subtopic":
        required.append(("subTopicId", sub_topic_id))
    required.append(("score", score))
    return [name for name, value in required if value is None]


async def record_result(
    repos: Repos,
    principal: Principal,
    kind: AssessmentKind,
    *,
    test_id: str | None,
    module_id: str | None,
    level_id: str | None,
    score: float | None,
    sub_topic_id: str | None = None,
    total_questions: int | None = None,
    correct_answers: int | None = None,
    passed: bool | None = None,
    answers: Any = None,
    now: datetime | None = None,
) -> AssessmentResult:
    """Append a result for the calling user.  Earlier attempts are kept.

    A passed module test also completes the enrollment and starts the
    certificate clock.
    """
    missing = _missing_fields(kind, test_id, module_id, level_id, sub_topic_id, score)
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}", fields=missing
        )

    test = await repos.assessments.get(kind, test_id)
    if test is None:
        raise NotFoundError("Test not found", test_id=test_id)

    now = now or datetime.now(UTC)
    result = AssessmentResult.new(
        kind=kind,
        user_id=principal.user_id,
        test_id=test_id,
        module_id=module_id,
        level_id=None if kind == "module" else level_id,
        sub_topic_id=sub_topic_id if kind == "subtopic" else None,
        score=score,
        total_questions=total_questions,
        correct_answers=correct_answers,
        passed=score >= test.passing_score if passed is None else passed,
        answers=answers,
        completed_at=now,
    )
    await repos.results.add(result)
    RESULTS_RECORDED.labels(kind=kind).inc()
    logger.info(
        "Result recorded kind=%s test=%s user=%s score=%s",
        kind,
        test_id,
        principal.user_id,
        score,
    )

    if kind == "module" and result.passed:
        await certificate_service.record_final_test_pass(
            repos, principal.user_id, module_id, score=score, now=now
        )
    return result
