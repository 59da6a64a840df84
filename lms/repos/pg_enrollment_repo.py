"""PostgreSQL implementation of EnrollmentRepo."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.tables import ModuleEnrollmentRow
from lms.models.enrollment import ModuleEnrollment
from lms.services.errors import ConflictError


class PgEnrollmentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str, module_id: str) -> ModuleEnrollment | None:
        stmt = select(ModuleEnrollmentRow).where(
            ModuleEnrollmentRow.user_id == user_id,
            ModuleEnrollmentRow.module_id == module_id,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return None if row is None else _row_to_enrollment(row)

    async def add(self, enrollment: ModuleEnrollment) -> None:
        row = ModuleEnrollmentRow(
            id=enrollment.id,
            user_id=enrollment.user_id,
            module_id=enrollment.module_id,
            progress_percentage=enrollment.progress_percentage,
            completed_at=enrollment.completed_at,
            payment_status=enrollment.payment_status,
            completed_sub_topics=enrollment.completed_sub_topics,
            enrolled_at=enrollment.enrolled_at,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError:
            raise ConflictError(
                "Already enrolled in this module", module_id=enrollment.module_id
            ) from None

    async def update_progress(
        self,
        user_id: str,
        module_id: str,
        *,
        progress: int | None,
        completed_at: datetime | None,
    ) -> ModuleEnrollment | None:
        values: dict = {"completed_at": completed_at}
        if progress is not None:
            values["progress_percentage"] = progress
        stmt = (
            update(ModuleEnrollmentRow)
            .where(
                ModuleEnrollmentRow.user_id == user_id,
                ModuleEnrollmentRow.module_id == module_id,
            )
            .values(**values)
            .returning(ModuleEnrollmentRow)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return None if row is None else _row_to_enrollment(row)

    async def list_for_user(self, user_id: str) -> list[ModuleEnrollment]:
        stmt = (
            select(ModuleEnrollmentRow)
            .where(ModuleEnrollmentRow.user_id == user_id)
            .order_by(ModuleEnrollmentRow.enrolled_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_enrollment(r) for r in rows]


def _row_to_enrollment(row: ModuleEnrollmentRow) -> ModuleEnrollment:
    return ModuleEnrollment(
        id=row.id,
        user_id=row.user_id,
        module_id=row.module_id,
        enrolled_at=row.enrolled_at,
        progress_percentage=row.progress_percentage,
        completed_at=row.completed_at,
        payment_status=row.payment_status,
        completed_sub_topics=row.completed_sub_topics,
    )
