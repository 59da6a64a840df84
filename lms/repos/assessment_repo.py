from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol

from lms.models.assessment import Assessment, AssessmentKind
from lms.repos.memory import MemoryDB
from lms.services.errors import ConflictError

_NEVER = datetime.min.replace(tzinfo=UTC)


class AssessmentRepo(Protocol):
    async def get(self, kind: AssessmentKind, test_id: str) -> Assessment | None: ...
    async def get_for_parent(
        self, kind: AssessmentKind, parent_id: str
    ) -> Assessment | None: ...
    async def add(self, assessment: Assessment) -> None:
        """Insert; raises ConflictError if the parent already has a test."""
        ...
    async def parents_with_tests(self, kind: AssessmentKind) -> set[str]: ...
    async def list_all(self, kind: AssessmentKind) -> list[Assessment]:
        """Every test of one kind, newest first."""
        ...


class InMemoryAssessmentRepo:
    def __init__(self, db: MemoryDB) -> None:
        self._db = db

    async def get(self, kind: AssessmentKind, test_id: str) -> Assessment | None:
        test = self._db.tests.get(test_id)
        if test is None or test.kind != kind:
            return None
        return test

    async def get_for_parent(
        self, kind: AssessmentKind, parent_id: str
    ) -> Assessment | None:
        test_id = self._db.tests_by_parent.get((kind, parent_id))
        if test_id is None:
            return None
        return self._db.tests.get(test_id)

    async def add(self, assessment: Assessment) -> None:
        key = (assessment.kind, assessment.parent_id)
        if key in self._db.tests_by_parent:
            raise ConflictError(
                f"A test already exists for this {assessment.kind}",
                parent_id=assessment.parent_id,
            )
        self._db.tests_by_parent[key] = assessment.id
        self._db.tests[assessment.id] = assessment

    async def parents_with_tests(self, kind: AssessmentKind) -> set[str]:
        return {parent for k, parent in self._db.tests_by_parent if k == kind}

    async def list_all(self, kind: AssessmentKind) -> list[Assessment]:
        tests = [t for t in self._db.tests.values() if t.kind == kind]
        return sorted(tests, key=lambda t: t.created_at or _NEVER, reverse=True)
