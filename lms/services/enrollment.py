"""Module enrollment lifecycle: enroll, update progress, list.

Uniqueness of (user, module) is left to the store.  ``enroll`` never
checks for an existing row first; the repo's insert raises ConflictError,
so two concurrent enrolls yield exactly one success.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from lms.core.metrics import ENROLLMENTS_CREATED
from lms.models.catalog import Module
from lms.models.enrollment import ModuleEnrollment, ProgressUpdate
from lms.models.principal import Principal
from lms.repos.bundle import Repos
from lms.services.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    OutOfRangeError,
)

logger = logging.getLogger(__name__)

PROGRESS_MIN = 0
PROGRESS_MAX = 100


@dataclass(frozen=True, slots=True)
class EnrollmentWithModule:
    enrollment: ModuleEnrollment
    module: Module | None


async def enroll(
    repos: Repos,
    principal: Principal,
    module_id: str,
    *,
    now: datetime | None = None,
) -> ModuleEnrollment:
    module = await repos.catalog.get_module(module_id)
    if module is None:
        raise NotFoundError("Module not found", module_id=module_id)
    if not module.is_active:
        raise InvalidStateError("Module is not available", module_id=module_id)

    enrollment = ModuleEnrollment.new(
        user_id=principal.user_id,
        module_id=module_id,
        enrolled_at=now or datetime.now(UTC),
    )
    try:
        await repos.enrollments.add(enrollment)
    except ConflictError:
        logger.warning(
            "Duplicate enrollment user=%s module=%s", principal.user_id, module_id
        )
        raise

    ENROLLMENTS_CREATED.inc()
    logger.info("User %s enrolled in module %s", principal.user_id, module_id)
    return enrollment


def _validate_progress(progress: int | float | None) -> None:
    if progress is None:
        return
    if progress < PROGRESS_MIN or progress > PROGRESS_MAX:
        raise OutOfRangeError(
            "Progress must be between 0 and 100", progress=progress
        )


async def update_progress(
    repos: Repos,
    principal: Principal,
    module_id: str,
    change: ProgressUpdate,
    *,
    now: datetime | None = None,
) -> ModuleEnrollment:
    """Apply a progress update.

    Range is checked before the enrollment is looked up.  ``completed_at``
    is overwritten on every call: set to now when ``completed`` is truthy,
    cleared otherwise, even if the enrollment was completed before.
    """
    _validate_progress(change.progress)

    completed_at = (now or datetime.now(UTC)) if change.completed else None
    updated = await repos.enrollments.update_progress(
        principal.user_id,
        module_id,
        progress=change.progress,
        completed_at=completed_at,
    )
    if updated is None:
        raise NotFoundError("Enrollment not found", module_id=module_id)

    logger.info(
        "Progress updated user=%s module=%s progress=%s completed=%s",
        principal.user_id,
        module_id,
        updated.progress_percentage,
        updated.completed_at is not None,
    )
    return updated


async def list_enrollments(
    repos: Repos, principal: Principal
) -> list[EnrollmentWithModule]:
    """The caller's enrollments, newest first, each with its module."""
    out: list[EnrollmentWithModule] = []
    for enrollment in await repos.enrollments.list_for_user(principal.user_id):
        module = await repos.catalog.get_module(enrollment.module_id)
        out.append(EnrollmentWithModule(enrollment=enrollment, module=module))
    return out
