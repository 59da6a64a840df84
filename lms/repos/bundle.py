"""The set of repositories a service call works against.

``Repos.in_memory()`` wires every repo to the shared process-local store;
``Repos.postgres(session)`` wires them to one request-scoped session so a
request's writes commit or roll back together.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from lms.repos.assessment_repo import AssessmentRepo, InMemoryAssessmentRepo
from lms.repos.catalog_repo import CatalogRepo, InMemoryCatalogRepo
from lms.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from lms.repos.memory import MemoryDB, memory_db
from lms.repos.profile_repo import InMemoryProfileRepo, ProfileRepo
from lms.repos.question_repo import InMemoryQuestionRepo, QuestionRepo
from lms.repos.result_repo import InMemoryResultRepo, ResultRepo


@dataclass(frozen=True, slots=True)
class Repos:
    catalog: CatalogRepo
    questions: QuestionRepo
    assessments: AssessmentRepo
    enrollments: EnrollmentRepo
    results: ResultRepo
    profiles: ProfileRepo

    @staticmethod
    def in_memory(db: MemoryDB | None = None) -> Repos:
        db = memory_db if db is None else db
        return Repos(
            catalog=InMemoryCatalogRepo(db),
            questions=InMemoryQuestionRepo(db),
            assessments=InMemoryAssessmentRepo(db),
            enrollments=InMemoryEnrollmentRepo(db),
            results=InMemoryResultRepo(db),
            profiles=InMemoryProfileRepo(db),
        )

    @staticmethod
    def postgres(session: AsyncSession) -> Repos:
        # Imported here so the in-memory path never loads the table metadata.
        from lms.repos.pg_assessment_repo import PgAssessmentRepo
        from lms.repos.pg_catalog_repo import PgCatalogRepo
        from lms.repos.pg_enrollment_repo import PgEnrollmentRepo
        from lms.repos.pg_profile_repo import PgProfileRepo
        from lms.repos.pg_question_repo import PgQuestionRepo
        from lms.repos.pg_result_repo import PgResultRepo

        return Repos(
            catalog=PgCatalogRepo(session),
            questions=PgQuestionRepo(session),
            assessments=PgAssessmentRepo(session),
            enrollments=PgEnrollmentRepo(session),
            results=PgResultRepo(session),
            profiles=PgProfileRepo(session),
        )
