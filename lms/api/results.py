"""Test result endpoints.

  GET  /test-results?userId=&type=all|level|subtopic   merged, newest first
  GET  /level-test-results?testId=&userId=              per-type read
  POST /level-test-results                              append a result
  GET  /sub-topic-test-results?testId=&userId=
  POST /sub-topic-test-results
  GET  /module-test-results?testId=&userId=
  POST /module-test-results                             a pass starts the
                                                        certificate clock
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Query, status

from lms.api.dependencies import CurrentUser, RequestRepos
from lms.api.errors import http_error
from lms.api.schemas import ModuleResultIn, ResultIn, ResultOut
from lms.models.assessment import AssessmentKind
from lms.models.principal import Principal
from lms.repos.bundle import Repos
from lms.services import assessments as assessment_service
from lms.services import results as results_service
from lms.services.errors import ServiceError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["results"])

UserIdQuery = Annotated[str | None, Query(alias="userId")]
TestIdQuery = Annotated[str | None, Query(alias="testId")]


@router.get("/test-results", response_model=list[ResultOut])
async def list_test_results(
    principal: CurrentUser,
    repos: RequestRepos,
    user_id: UserIdQuery = None,
    type_filter: Annotated[str, Query(alias="type")] = "all",
) -> list[ResultOut]:
    try:
        details = await results_service.list_results(
            repos, principal, user_id, type_filter
        )
    except ServiceError as e:
        raise http_error(e) from None
    return [ResultOut.of(d) for d in details]


async def _read(
    repos: Repos,
    principal: Principal,
    kind: AssessmentKind,
    test_id: str | None,
    user_id: str | None,
) -> list[ResultOut]:
    try:
        if test_id:
            detail = await results_service.get_result_for_test(
                repos, principal, kind, test_id, user_id
            )
            return [ResultOut.of(detail)]
        details = await results_service.list_results_of_kind(
            repos, principal, kind, user_id
        )
    except ServiceError as e:
        raise http_error(e) from None
    return [ResultOut.of(d) for d in details]


async def _record(
    repos: Repos, principal: Principal, kind: AssessmentKind, payload: ResultIn
) -> ResultOut:
    try:
        result = await assessment_service.record_result(
            repos,
            principal,
            kind,
            test_id=payload.test_id,
            module_id=payload.module_id,
            level_id=payload.level_id,
            sub_topic_id=payload.sub_topic_id,
            score=payload.score,
            total_questions=payload.total_questions,
            correct_answers=payload.correct_answers,
            passed=payload.passed,
            answers=payload.answers,
        )
        detail = await results_service.describe_result(repos, result)
    except ServiceError as e:
        raise http_error(e) from None
    return ResultOut.of(detail)


@router.get("/level-test-results", response_model=list[ResultOut])
async def read_level_results(
    principal: CurrentUser,
    repos: RequestRepos,
    test_id: TestIdQuery = None,
    user_id: UserIdQuery = None,
) -> list[ResultOut]:
    return await _read(repos, principal, "level", test_id, user_id)


@router.post(
    "/level-test-results",
    response_model=ResultOut,
    status_code=status.HTTP_201_CREATED,
)
async def record_level_result(
    payload: ResultIn, principal: CurrentUser, repos: RequestRepos
) -> ResultOut:
    return await _record(repos, principal, "level", payload)


@router.get("/sub-topic-test-results", response_model=list[ResultOut])
async def read_sub_topic_results(
    principal: CurrentUser,
    repos: RequestRepos,
    test_id: TestIdQuery = None,
    user_id: UserIdQuery = None,
) -> list[ResultOut]:
    return await _read(repos, principal, "subtopic", test_id, user_id)


@router.post(
    "/sub-topic-test-results",
    response_model=ResultOut,
    status_code=status.HTTP_201_CREATED,
)
async def record_sub_topic_result(
    payload: ResultIn, principal: CurrentUser, repos: RequestRepos
) -> ResultOut:
    return await _record(repos, principal, "subtopic", payload)


@router.get("/module-test-results", response_model=list[ResultOut])
async def read_module_results(
    principal: CurrentUser,
    repos: RequestRepos,
    test_id: TestIdQuery = None,
    user_id: UserIdQuery = None,
) -> list[ResultOut]:
    return await _read(repos, principal, "module", test_id, user_id)


@router.post(
    "/module-test-results",
    response_model=ResultOut,
    status_code=status.HTTP_201_CREATED,
)
async def record_module_result(
    payload: ModuleResultIn, principal: CurrentUser, repos: RequestRepos
) -> ResultOut:
    try:
        result = await assessment_service.record_result(
            repos,
            principal,
            "module",
            test_id=payload.module_test_id,
            module_id=payload.module_id,
            level_id=None,
            score=payload.score,
            total_questions=payload.total_questions,
            correct_answers=payload.correct_answers,
            passed=payload.passed,
            answers=payload.answers,
        )
        detail = await results_service.describe_result(repos, result)
    except ServiceError as e:
        raise http_error(e) from None
    return ResultOut.of(detail)
