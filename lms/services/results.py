"""Merged view over level-test and subtopic-test results.

Module (final) test results are read on their own; the merged view
covers level and subtopic results only.

Visibility: a user always sees their own results; seeing anyone else's
requires a privileged role (admin or master_practitioner).
"""

from __future__ import annotations

import logging

from lms.models.assessment import AssessmentKind
from lms.models.principal import Principal
from lms.models.result import AssessmentResult, NamedRef, ResultDetail
from lms.repos.bundle import Repos
from lms.services.errors import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)

TYPE_ALL = "all"
TYPE_LEVEL = "level"
TYPE_SUBTOPIC = "subtopic"


def check_visibility(principal: Principal, target_user_id: str | None) -> str:
    """Return the user id to read, raising ForbiddenError if not allowed."""
    target = target_user_id or principal.user_id
    if target != principal.user_id and not principal.is_privileged():
        logger.warning(
            "Results access denied: user=%s target=%s", principal.user_id, target
        )
        raise ForbiddenError("Forbidden", target_user_id=target)
    return target


def kinds_for_filter(type_filter: str | None) -> tuple[AssessmentKind, ...]:
    # anything unrecognized behaves like "all"
    if type_filter == TYPE_LEVEL:
        return ("level",)
    if type_filter == TYPE_SUBTOPIC:
        return ("subtopic",)
    return ("level", "subtopic")


class _Joiner:
    """Attaches test/module/level/subtopic names, caching lookups per call."""

    def __init__(self, repos: Repos) -> None:
        self._repos = repos
        self._names: dict[tuple[str, str], str] = {}

    async def _title(self, what: str, ident: str | None) -> str:
        if ident is None:
            return ""
        key = (what, ident)
        if key not in self._names:
            entity = None
            if what == "module":
                entity = await self._repos.catalog.get_module(ident)
            elif what == "level":
                entity = await self._repos.catalog.get_level(ident)
            elif what == "subtopic":
                entity = await self._repos.catalog.get_sub_topic(ident)
            self._names[key] = entity.title if entity is not None else ""
        return self._names[key]

    async def detail(self, result: AssessmentResult) -> ResultDetail:
        test = await self._repos.assessments.get(result.kind, result.test_id)
        sub_topic = None
        if result.kind == "subtopic":
            sub_topic = NamedRef(
                id=result.sub_topic_id,
                title=await self._title("subtopic", result.sub_topic_id),
            )
        return ResultDetail(
            result=result,
            test_title=test.title if test is not None else "",
            test_description=test.description if test is not None else None,
            module=NamedRef(
                id=result.module_id,
                title=await self._title("module", result.module_id),
            ),
            level=(
                None
                if result.level_id is None
                else NamedRef(
                    id=result.level_id,
                    title=await self._title("level", result.level_id),
                )
            ),
            sub_topic=sub_topic,
        )


async def list_results_of_kind(
    repos: Repos,
    principal: Principal,
    kind: AssessmentKind,
    target_user_id: str | None = None,
) -> list[ResultDetail]:
    """One stream, newest first."""
    target = check_visibility(principal, target_user_id)
    joiner = _Joiner(repos)
    return [
        await joiner.detail(r) for r in await repos.results.list_for_user(target, kind)
    ]


async def list_results(
    repos: Repos,
    principal: Principal,
    target_user_id: str | None = None,
    type_filter: str | None = TYPE_ALL,
) -> list[ResultDetail]:
    """Level results then subtopic results, stable-sorted newest first.

    Equal timestamps keep fetch order, so level entries precede subtopic
    entries on a tie.
    """
    target = check_visibility(principal, target_user_id)
    joiner = _Joiner(repos)

    merged: list[ResultDetail] = []
    for kind in kinds_for_filter(type_filter):
        for result in await repos.results.list_for_user(target, kind):
            merged.append(await joiner.detail(result))

    merged.sort(key=lambda d: d.result.completed_at, reverse=True)
    return merged


async def get_result_for_test(
    repos: Repos,
    principal: Principal,
    kind: AssessmentKind,
    test_id: str,
    target_user_id: str | None = None,
) -> ResultDetail:
    """The most recent result of one test for the target user."""
    target = check_visibility(principal, target_user_id)
    result = await repos.results.latest_for_test(target, kind, test_id)
    if result is None:
        raise NotFoundError("Result not found", test_id=test_id)
    return await _Joiner(repos).detail(result)


async def describe_result(repos: Repos, result: AssessmentResult) -> ResultDetail:
    """Join one result with its test, module, level and subtopic names."""
    return await _Joiner(repos).detail(result)
