"""PostgreSQL implementation of ProfileRepo."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.tables import ProfileRow
from lms.models.profile import Profile


class PgProfileRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str) -> Profile | None:
        row = await self._session.get(ProfileRow, user_id)
        if row is None:
            return None
        return Profile(
            id=row.id,
            email=row.email,
            first_name=row.first_name,
            last_name=row.last_name,
            role=row.role,
            test_completed=row.test_completed,
            test_score=row.test_score,
            certificate_issued=row.certificate_issued,
            certificate_available_at=row.certificate_available_at,
            certificate_url=row.certificate_url,
            certificate_issued_at=row.certificate_issued_at,
        )

    async def add(self, profile: Profile) -> None:
        self._session.add(
            ProfileRow(
                id=profile.id,
                email=profile.email,
                first_name=profile.first_name,
                last_name=profile.last_name,
                role=profile.role,
                test_completed=profile.test_completed,
                test_score=profile.test_score,
                certificate_issued=profile.certificate_issued,
                certificate_available_at=profile.certificate_available_at,
                certificate_url=profile.certificate_url,
                certificate_issued_at=profile.certificate_issued_at,
            )
        )
        await self._session.flush()

    async def mark_certificate_issued(
        self, user_id: str, *, certificate_url: str, issued_at: datetime
    ) -> bool:
        # Conditional write: only one concurrent caller sees rowcount == 1
        stmt = (
            update(ProfileRow)
            .where(
                ProfileRow.id == user_id,
                ProfileRow.certificate_issued.is_(False),
            )
            .values(
                certificate_issued=True,
                certificate_url=certificate_url,
                certificate_issued_at=issued_at,
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def record_test_completion(
        self, user_id: str, *, score: float, available_at: datetime
    ) -> bool:
        stmt = (
            update(ProfileRow)
            .where(
                ProfileRow.id == user_id,
                ProfileRow.certificate_issued.is_(False),
            )
            .values(
                test_completed=True,
                test_score=score,
                certificate_available_at=available_at,
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1
