from __future__ import annotations

import logging

from fastapi import APIRouter

from lms.api.dependencies import CurrentUser, RequestRepos
from lms.api.errors import http_error
from lms.api.schemas import (
    CertificateDataOut,
    CertificateIssuedOut,
    CertificateUserOut,
    LevelSummaryOut,
    ModuleSummaryOut,
    ScoredItemOut,
)
from lms.services import certificates as certificate_service
from lms.services.certificates import ScoredItem
from lms.services.errors import ServiceError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["certificates"])


@router.post("/users/{user_id}/issue-certificate", response_model=CertificateIssuedOut)
async def issue_certificate(
    user_id: str, principal: CurrentUser, repos: RequestRepos
) -> CertificateIssuedOut:
    try:
        issued = await certificate_service.issue_certificate(repos, principal, user_id)
    except ServiceError as e:
        raise http_error(e) from None
    return CertificateIssuedOut(
        certificate_url=issued.certificate_url, issued_at=issued.issued_at
    )


def _scored(item: ScoredItem | None) -> ScoredItemOut | None:
    if item is None:
        return None
    return ScoredItemOut(
        id=item.id,
        title=item.title,
        score=item.score,
        passed=item.passed,
        completed_at=item.completed_at,
    )


@router.get("/certificate-data", response_model=CertificateDataOut)
async def certificate_data(
    principal: CurrentUser, repos: RequestRepos
) -> CertificateDataOut:
    try:
        data = await certificate_service.certificate_data(repos, principal)
    except ServiceError as e:
        raise http_error(e) from None

    p = data.profile
    return CertificateDataOut(
        user=CertificateUserOut(
            id=p.id,
            first_name=p.first_name,
            last_name=p.last_name,
            email=p.email,
            role=p.role,
        ),
        modules=[
            ModuleSummaryOut(
                id=m.id,
                title=m.title,
                completed_at=m.completed_at,
                average_score=m.average_score,
                levels=[
                    LevelSummaryOut(
                        id=lv.id,
                        title=lv.title,
                        sub_topics=[_scored(s) for s in lv.sub_topics],
                        level_test=_scored(lv.level_test),
                        average_score=lv.average_score,
                    )
                    for lv in m.levels
                ],
            )
            for m in data.modules
        ],
    )
