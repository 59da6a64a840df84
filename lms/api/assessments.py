"""Level, sub-topic and module tests: assembled reads and authoring.

Every collection is fixed-shape: GET and POST only.  Any other verb gets
405 with ``Allow: GET, POST``.

Authoring needs a signed-in caller (401); the body is then checked for
required fields (400) before the caller's role (403).
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, status

from lms.api.dependencies import CurrentUser, RequestRepos
from lms.api.errors import http_error, method_not_allowed
from lms.api.schemas import (
    LevelTestIn,
    LevelTestOut,
    ModuleTestIn,
    ModuleTestOut,
    SubTopicTestIn,
    SubTopicTestOut,
    stored_questions,
)
from lms.models.assessment import AssembledTest
from lms.repos.bundle import Repos
from lms.services import assessments as assessment_service
from lms.services.assembly import assemble_test
from lms.services.errors import ConflictError, ServiceError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["assessments"])

_ALLOWED = ["GET", "POST"]


# --- Level tests ---


@router.get("/level-tests", response_model=LevelTestOut | None)
async def get_level_test(
    _principal: CurrentUser,
    repos: RequestRepos,
    level_id: Annotated[str | None, Query(alias="levelId")] = None,
) -> LevelTestOut | None:
    if not level_id:
        raise HTTPException(status_code=400, detail="Level ID is required")
    test = await assessment_service.get_level_test(repos, level_id)
    # a level without a test is not an error
    return None if test is None else LevelTestOut.of(test)


@router.post(
    "/level-tests",
    response_model=LevelTestOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_level_test(
    payload: LevelTestIn, principal: CurrentUser, repos: RequestRepos
) -> LevelTestOut:
    try:
        test = await assessment_service.create_level_test(
            repos,
            principal,
            level_id=payload.level_id,
            title=payload.title,
            description=payload.description,
            questions=stored_questions(payload.questions),
            total_questions=payload.total_questions,
            passing_score=payload.passing_score,
            time_limit=payload.time_limit,
            is_active=payload.is_active,
        )
    except ConflictError:
        logger.warning(
            "Duplicate level test rejected level=%s user=%s",
            payload.level_id,
            principal.user_id,
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Test already exists for this level",
        ) from None
    except ServiceError as e:
        raise http_error(e) from None
    return LevelTestOut.of(await assemble_test(test, repos.questions))


@router.api_route(
    "/level-tests", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False
)
async def level_tests_unsupported() -> Response:
    return method_not_allowed(_ALLOWED)


# --- Sub-topic tests ---


@router.get("/sub-topic-tests", response_model=SubTopicTestOut)
async def get_sub_topic_test(
    _principal: CurrentUser,
    repos: RequestRepos,
    sub_topic_id: Annotated[str | None, Query(alias="subTopicId")] = None,
) -> SubTopicTestOut:
    if not sub_topic_id:
        raise HTTPException(status_code=400, detail="Sub-topic ID is required")
    try:
        test: AssembledTest = await assessment_service.get_sub_topic_test(
            repos, sub_topic_id
        )
    except ServiceError as e:
        raise http_error(e) from None
    return SubTopicTestOut.of(test)


@router.post(
    "/sub-topic-tests",
    response_model=SubTopicTestOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_sub_topic_test(
    payload: SubTopicTestIn, principal: CurrentUser, repos: RequestRepos
) -> SubTopicTestOut:
    try:
        test = await assessment_service.create_sub_topic_test(
            repos,
            principal,
            sub_topic_id=payload.sub_topic_id,
            title=payload.title,
            description=payload.description,
            questions=stored_questions(payload.questions),
            passing_score=payload.passing_score,
            time_limit=payload.time_limit,
        )
    except ServiceError as e:
        if isinstance(e, ConflictError):
            logger.warning(
                "Duplicate sub-topic test rejected sub_topic=%s user=%s",
                payload.sub_topic_id,
                principal.user_id,
            )
        raise http_error(e) from None
    return SubTopicTestOut.of(await assemble_test(test, repos.questions))


@router.api_route(
    "/sub-topic-tests", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False
)
async def sub_topic_tests_unsupported() -> Response:
    return method_not_allowed(_ALLOWED)


# --- Module tests ---


async def _module_test_out(repos: Repos, test: AssembledTest) -> ModuleTestOut:
    module = await repos.catalog.get_module(test.assessment.parent_id)
    return ModuleTestOut.of(test, module)


@router.get(
    "/module-tests",
    response_model=ModuleTestOut | list[ModuleTestOut] | None,
)
async def get_module_tests(
    _principal: CurrentUser,
    repos: RequestRepos,
    module_id: Annotated[str | None, Query(alias="moduleId")] = None,
) -> ModuleTestOut | list[ModuleTestOut] | None:
    """One module's test (null when it has none), or every module test."""
    if module_id:
        test = await assessment_service.get_module_test(repos, module_id)
        return None if test is None else await _module_test_out(repos, test)
    return [
        await _module_test_out(repos, test)
        for test in await assessment_service.list_module_tests(repos)
    ]


@router.post(
    "/module-tests",
    response_model=ModuleTestOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_module_test(
    payload: ModuleTestIn, principal: CurrentUser, repos: RequestRepos
) -> ModuleTestOut:
    try:
        test = await assessment_service.create_module_test(
            repos,
            principal,
            module_id=payload.module_id,
            title=payload.title,
            description=payload.description,
            questions=stored_questions(payload.questions),
            total_questions=payload.total_questions,
            passing_score=payload.passing_score,
            time_limit=payload.time_limit,
            is_active=payload.is_active,
        )
    except ConflictError:
        logger.warning(
            "Duplicate module test rejected module=%s user=%s",
            payload.module_id,
            principal.user_id,
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Test already exists for this module",
        ) from None
    except ServiceError as e:
        raise http_error(e) from None
    return await _module_test_out(repos, await assemble_test(test, repos.questions))


@router.api_route(
    "/module-tests", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False
)
async def module_tests_unsupported() -> Response:
    return method_not_allowed(_ALLOWED)
