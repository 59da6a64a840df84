"""PostgreSQL implementation of ResultRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.tables import (
    LevelTestResultRow,
    ModuleTestResultRow,
    SubTopicTestResultRow,
)
from lms.models.assessment import AssessmentKind
from lms.models.result import AssessmentResult

_TABLES = {
    "level": LevelTestResultRow,
    "subtopic": SubTopicTestResultRow,
    "module": ModuleTestResultRow,
}


class PgResultRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, result: AssessmentResult) -> None:
        fields = dict(
            id=result.id,
            user_id=result.user_id,
            test_id=result.test_id,
            module_id=result.module_id,
            score=result.score,
            total_questions=result.total_questions,
            correct_answers=result.correct_answers,
            passed=result.passed,
            answers=result.answers,
            completed_at=result.completed_at,
        )
        # module results have no level column
        if result.kind != "module":
            fields["level_id"] = result.level_id
        if result.kind == "subtopic":
            fields["sub_topic_id"] = result.sub_topic_id
        self._session.add(_TABLES[result.kind](**fields))
        await self._session.flush()

    async def list_for_user(
        self, user_id: str, kind: AssessmentKind
    ) -> list[AssessmentResult]:
        table = _TABLES[kind]
        stmt = (
            select(table)
            .where(table.user_id == user_id)
            .order_by(table.completed_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_result(kind, r) for r in rows]

    async def latest_for_test(
        self, user_id: str, kind: AssessmentKind, test_id: str
    ) -> AssessmentResult | None:
        table = _TABLES[kind]
        stmt = (
            select(table)
            .where(table.user_id == user_id, table.test_id == test_id)
            .order_by(table.completed_at.desc())
            .limit(1)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return None if row is None else _row_to_result(kind, row)


def _row_to_result(kind: AssessmentKind, row) -> AssessmentResult:
    return AssessmentResult(
        id=row.id,
        kind=kind,
        user_id=row.user_id,
        test_id=row.test_id,
        module_id=row.module_id,
        level_id=getattr(row, "level_id", None),
        sub_topic_id=getattr(row, "sub_topic_id", None),
        score=row.score,
        total_questions=row.total_questions,
        correct_answers=row.correct_answers,
        passed=row.passed,
        answers=row.answers,
        completed_at=row.completed_at,
    )
