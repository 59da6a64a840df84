"""Certificate issuance and the data behind a certificate.

Passing a module (final) test marks the profile test-completed and
starts a 48-hour availability clock.  Issuance is gated on the profile:
the final test must be completed, the certificate must not have been
issued, and the availability delay must have elapsed.  The write itself
is conditional on ``certificate_issued`` still being false, so two racing
requests issue exactly once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from lms.core.metrics import CERTIFICATES_ISSUED
from lms.models.principal import Principal
from lms.models.profile import Profile
from lms.models.result import AssessmentResult
from lms.repos.bundle import Repos
from lms.services.errors import ForbiddenError, InvalidStateError, NotFoundError

logger = logging.getLogger(__name__)

CERTIFICATE_DELAY = timedelta(hours=48)


@dataclass(frozen=True, slots=True)
class IssuedCertificate:
    certificate_url: str
    issued_at: datetime


def certificate_url_for(user_id: str) -> str:
    return f"certificate-{user_id}.pdf"


async def record_final_test_pass(
    repos: Repos,
    user_id: str,
    module_id: str,
    *,
    score: float,
    now: datetime,
) -> datetime | None:
    """Start the certificate clock after a passed module test.

    The learner's enrollment in the module is marked completed.  Returns
    when the certificate becomes available, or None when there is no
    profile or a certificate was already issued.
    """
    await repos.enrollments.update_progress(
        user_id, module_id, progress=None, completed_at=now
    )
    available_at = now + CERTIFICATE_DELAY
    if not await repos.profiles.record_test_completion(
        user_id, score=score, available_at=available_at
    ):
        logger.info("No certificate clock started for user=%s", user_id)
        return None
    logger.info(
        "Final test passed user=%s module=%s certificate available at %s",
        user_id,
        module_id,
        available_at.isoformat(),
    )
    return available_at


async def issue_certificate(
    repos: Repos,
    principal: Principal,
    user_id: str,
    *,
    now: datetime | None = None,
) -> IssuedCertificate:
    if principal.user_id != user_id:
        logger.warning(
            "Certificate issuance denied: user=%s target=%s",
            principal.user_id,
            user_id,
        )
        raise ForbiddenError("Forbidden")

    profile = await repos.profiles.get(user_id)
    if profile is None:
        raise NotFoundError("Profile not found", user_id=user_id)
    if not profile.test_completed:
        raise InvalidStateError("Test not completed")
    if profile.certificate_issued:
        raise InvalidStateError("Certificate already issued")

    now = now or datetime.now(UTC)
    available_at = profile.certificate_available_at
    if available_at is None:
        raise InvalidStateError("Certificate not yet available")
    if now < available_at:
        raise InvalidStateError(
            "Certificate not yet available", available_at=available_at
        )

    url = certificate_url_for(user_id)
    if not await repos.profiles.mark_certificate_issued(
        user_id, certificate_url=url, issued_at=now
    ):
        # lost the race against a concurrent issuance
        raise InvalidStateError("Certificate already issued")

    CERTIFICATES_ISSUED.inc()
    logger.info("Certificate issued user=%s url=%s", user_id, url)
    return IssuedCertificate(certificate_url=url, issued_at=now)


# ---------------------------------------------------------------------------
# Certificate data
# ---------------------------------------------------------------------------


@dataclass
class ScoredItem:
    id: str | None
    title: str | None
    score: float
    passed: bool
    completed_at: datetime


@dataclass
class LevelSummary:
    id: str
    title: str
    sub_topics: list[ScoredItem] = field(default_factory=list)
    level_test: ScoredItem | None = None
    average_score: int = 0


@dataclass
class ModuleSummary:
    id: str
    title: str
    completed_at: datetime | None
    levels: list[LevelSummary] = field(default_factory=list)
    average_score: int = 0


@dataclass
class CertificateData:
    profile: Profile
    modules: list[ModuleSummary] = field(default_factory=list)


def _average(scores: list[float]) -> int:
    # half rounds up, matching Math.round on non-negative scores
    if not scores:
        return 0
    return int(sum(scores) / len(scores) + 0.5)


def _scored(result: AssessmentResult, ident: str | None, title: str | None):
    return ScoredItem(
        id=ident,
        title=title,
        score=result.score,
        passed=result.passed,
        completed_at=result.completed_at,
    )


async def certificate_data(repos: Repos, principal: Principal) -> CertificateData:
    """Per enrolled module: per level, the latest subtopic and level
    results with rounded averages, and a module-wide average."""
    user_id = principal.user_id
    profile = await repos.profiles.get(user_id)
    if profile is None:
        raise NotFoundError("Profile not found", user_id=user_id)

    data = CertificateData(profile=profile)
    for enrollment in await repos.enrollments.list_for_user(user_id):
        module = await repos.catalog.get_module(enrollment.module_id)
        if module is None:
            continue
        module_summary = ModuleSummary(
            id=module.id, title=module.title, completed_at=enrollment.completed_at
        )
        module_scores: list[float] = []

        for level in await repos.catalog.list_levels(module.id):
            level_summary = LevelSummary(id=level.id, title=level.title)
            level_scores: list[float] = []

            for sub_topic in await repos.catalog.list_sub_topics(level.id):
                test = await repos.assessments.get_for_parent("subtopic", sub_topic.id)
                if test is None:
                    continue
                result = await repos.results.latest_for_test(
                    user_id, "subtopic", test.id
                )
                if result is None:
                    continue
                level_summary.sub_topics.append(
                    _scored(result, sub_topic.id, sub_topic.title)
                )
                level_scores.append(result.score)

            level_test = await repos.assessments.get_for_parent("level", level.id)
            if level_test is not None:
                result = await repos.results.latest_for_test(
                    user_id, "level", level_test.id
                )
                if result is not None:
                    level_summary.level_test = _scored(result, None, None)
                    level_scores.append(result.score)

            level_summary.average_score = _average(level_scores)
            module_scores.extend(level_scores)
            module_summary.levels.append(level_summary)

        module_summary.average_score = _average(module_scores)
        data.modules.append(module_summary)

    return data
