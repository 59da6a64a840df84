from __future__ import annotations

from typing import Protocol

from lms.models.assessment import AssessmentKind
from lms.models.result import AssessmentResult
from lms.repos.memory import MemoryDB


class ResultRepo(Protocol):
    async def add(self, result: AssessmentResult) -> None: ...
    async def list_for_user(
        self, user_id: str, kind: AssessmentKind
    ) -> list[AssessmentResult]:
        """Newest first (completed_at descending)."""
        ...
    async def latest_for_test(
        self, user_id: str, kind: AssessmentKind, test_id: str
    ) -> AssessmentResult | None: ...


class InMemoryResultRepo:
    """Append-only: results are never updated or removed except by cascade."""

    def __init__(self, db: MemoryDB) -> None:
        self._db = db

    async def add(self, result: AssessmentResult) -> None:
        self._db.results.append(result)

    async def list_for_user(
        self, user_id: str, kind: AssessmentKind
    ) -> list[AssessmentResult]:
        mine = [r for r in self._db.results if r.user_id == user_id and r.kind == kind]
        return sorted(mine, key=lambda r: r.completed_at, reverse=True)

    async def latest_for_test(
        self, user_id: str, kind: AssessmentKind, test_id: str
    ) -> AssessmentResult | None:
        for r in await self.list_for_user(user_id, kind):
            if r.test_id == test_id:
                return r
        return None
