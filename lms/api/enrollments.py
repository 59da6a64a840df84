"""Module enrollment and progress endpoints.

  POST  /modules/{id}/enroll   -> 201 enrollment | 404 | 400 inactive | 409 duplicate
  PATCH /modules/{id}/enroll   -> 200 enrollment | 400 out of range | 404
  GET   /user/module-enrollments
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, status

from lms.api.dependencies import CurrentUser, RequestRepos
from lms.api.errors import http_error
from lms.api.schemas import (
    EnrollmentOut,
    EnrollmentWithModuleOut,
    ModuleOut,
    ProgressIn,
)
from lms.models.enrollment import ProgressUpdate
from lms.services import enrollment as enrollment_service
from lms.services.errors import ServiceError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["enrollments"])


@router.post(
    "/modules/{module_id}/enroll",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
)
async def enroll(
    module_id: str, principal: CurrentUser, repos: RequestRepos
) -> EnrollmentOut:
    try:
        enrollment = await enrollment_service.enroll(repos, principal, module_id)
    except ServiceError as e:
        raise http_error(e) from None
    return EnrollmentOut.of(enrollment)


@router.patch("/modules/{module_id}/enroll", response_model=EnrollmentOut)
async def update_progress(
    module_id: str,
    payload: ProgressIn,
    principal: CurrentUser,
    repos: RequestRepos,
) -> EnrollmentOut:
    change = ProgressUpdate(
        progress=payload.progress, completed=bool(payload.completed)
    )
    try:
        enrollment = await enrollment_service.update_progress(
            repos, principal, module_id, change
        )
    except ServiceError as e:
        raise http_error(e) from None
    return EnrollmentOut.of(enrollment)


@router.get(
    "/user/module-enrollments", response_model=list[EnrollmentWithModuleOut]
)
async def my_enrollments(
    principal: CurrentUser, repos: RequestRepos
) -> list[EnrollmentWithModuleOut]:
    items = await enrollment_service.list_enrollments(repos, principal)
    return [
        EnrollmentWithModuleOut(
            **EnrollmentOut.of(item.enrollment).model_dump(),
            module=ModuleOut.of(item.module) if item.module is not None else None,
        )
        for item in items
    ]
