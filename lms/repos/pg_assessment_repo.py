"""PostgreSQL implementation of AssessmentRepo.

Level, subtopic and module tests live in separate tables; ``kind``
selects which one.  The unique constraint on the parent column is what
rejects a second test for the same parent.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.tables import LevelTestRow, ModuleTestRow, SubTopicTestRow
from lms.models.assessment import Assessment, AssessmentKind
from lms.services.errors import ConflictError

_TABLES = {
    "level": LevelTestRow,
    "subtopic": SubTopicTestRow,
    "module": ModuleTestRow,
}
_PARENT_ATTR = {
    "level": "level_id",
    "subtopic": "sub_topic_id",
    "module": "module_id",
}


def _parent_column(kind: AssessmentKind):
    return getattr(_TABLES[kind], _PARENT_ATTR[kind])


class PgAssessmentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, kind: AssessmentKind, test_id: str) -> Assessment | None:
        row = await self._session.get(_TABLES[kind], test_id)
        return None if row is None else _row_to_assessment(kind, row)

    async def get_for_parent(
        self, kind: AssessmentKind, parent_id: str
    ) -> Assessment | None:
        stmt = select(_TABLES[kind]).where(_parent_column(kind) == parent_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return None if row is None else _row_to_assessment(kind, row)

    async def add(self, assessment: Assessment) -> None:
        fields = dict(
            id=assessment.id,
            title=assessment.title,
            description=assessment.description,
            questions=assessment.questions,
            total_questions=assessment.total_questions,
            passing_score=assessment.passing_score,
            time_limit=assessment.time_limit,
            is_active=assessment.is_active,
        )
        fields[_PARENT_ATTR[assessment.kind]] = assessment.parent_id
        if assessment.created_at is not None:
            fields["created_at"] = assessment.created_at
        row = _TABLES[assessment.kind](**fields)

        # SAVEPOINT so a duplicate does not poison the request transaction
        try:
            async with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError:
            raise ConflictError(
                f"A test already exists for this {assessment.kind}",
                parent_id=assessment.parent_id,
            ) from None

    async def parents_with_tests(self, kind: AssessmentKind) -> set[str]:
        rows = await self._session.execute(select(_parent_column(kind)))
        return set(rows.scalars().all())

    async def list_all(self, kind: AssessmentKind) -> list[Assessment]:
        table = _TABLES[kind]
        stmt = select(table).order_by(table.created_at.desc())
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_assessment(kind, r) for r in rows]


def _row_to_assessment(kind: AssessmentKind, row) -> Assessment:
    return Assessment(
        id=row.id,
        kind=kind,
        parent_id=getattr(row, _PARENT_ATTR[kind]),
        title=row.title,
        description=row.description,
        questions=row.questions,
        total_questions=row.total_questions,
        passing_score=row.passing_score,
        time_limit=row.time_limit,
        is_active=row.is_active,
        created_at=row.created_at,
    )
