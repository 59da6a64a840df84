from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Protocol

from lms.models.enrollment import ModuleEnrollment
from lms.repos.memory import MemoryDB
from lms.services.errors import ConflictError


class EnrollmentRepo(Protocol):
    async def get(self, user_id: str, module_id: str) -> ModuleEnrollment | None: ...
    async def add(self, enrollment: ModuleEnrollment) -> None:
        """Insert; raises ConflictError if (user_id, module_id) exists."""
        ...
    async def update_progress(
        self,
        user_id: str,
        module_id: str,
        *,
        progress: int | None,
        completed_at: datetime | None,
    ) -> ModuleEnrollment | None:
        """Single-statement update.  ``progress=None`` leaves it unchanged;
        ``completed_at`` is always written.  Returns None if no row."""
        ...
    async def list_for_user(self, user_id: str) -> list[ModuleEnrollment]: ...


class InMemoryEnrollmentRepo:
    def __init__(self, db: MemoryDB) -> None:
        self._db = db

    async def get(self, user_id: str, module_id: str) -> ModuleEnrollment | None:
        return self._db.enrollments.get((user_id, module_id))

    async def add(self, enrollment: ModuleEnrollment) -> None:
        key = (enrollment.user_id, enrollment.module_id)
        if key in self._db.enrollments:
            raise ConflictError(
                "Already enrolled in this module", module_id=enrollment.module_id
            )
        self._db.enrollments[key] = enrollment

    async def update_progress(
        self,
        user_id: str,
        module_id: str,
        *,
        progress: int | None,
        completed_at: datetime | None,
    ) -> ModuleEnrollment | None:
        current = self._db.enrollments.get((user_id, module_id))
        if current is None:
            return None
        updated = replace(
            current,
            progress_percentage=(
                current.progress_percentage if progress is None else progress
            ),
            completed_at=completed_at,
        )
        self._db.enrollments[(user_id, module_id)] = updated
        return updated

    async def list_for_user(self, user_id: str) -> list[ModuleEnrollment]:
        mine = [e for e in self._db.enrollments.values() if e.user_id == user_id]
        return sorted(mine, key=lambda e: e.enrolled_at, reverse=True)
