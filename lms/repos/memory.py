"""Process-local store backing the in-memory repositories.

Used when DATABASE_URL is not configured (local dev, tests).  Every
in-memory repo holds a reference to the same ``MemoryDB`` so that
cross-entity behavior (cascading deletes, joins) matches what the
PostgreSQL schema does with foreign keys.

Mutating methods on the repos never ``await`` between their uniqueness
check and their insert, so on a single event loop each check-and-insert
runs to completion before another coroutine can observe the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from lms.models.assessment import Assessment, AssessmentKind, Question
from lms.models.catalog import Level, Module, SubTopic, SubTopicContent
from lms.models.enrollment import ModuleEnrollment
from lms.models.profile import Profile
from lms.models.result import AssessmentResult


@dataclass
class MemoryDB:
    modules: dict[str, Module] = field(default_factory=dict)
    levels: dict[str, Level] = field(default_factory=dict)
    sub_topics: dict[str, SubTopic] = field(default_factory=dict)
    contents: dict[str, SubTopicContent] = field(default_factory=dict)
    questions: dict[str, Question] = field(default_factory=dict)
    # keyed by assessment id; uniqueness on (kind, parent_id) via tests_by_parent
    tests: dict[str, Assessment] = field(default_factory=dict)
    tests_by_parent: dict[tuple[AssessmentKind, str], str] = field(
        default_factory=dict
    )
    # keyed by (user_id, module_id)
    enrollments: dict[tuple[str, str], ModuleEnrollment] = field(
        default_factory=dict
    )
    results: list[AssessmentResult] = field(default_factory=list)
    profiles: dict[str, Profile] = field(default_factory=dict)

    def clear(self) -> None:
        self.modules.clear()
        self.levels.clear()
        self.sub_topics.clear()
        self.contents.clear()
        self.questions.clear()
        self.tests.clear()
        self.tests_by_parent.clear()
        self.enrollments.clear()
        self.results.clear()
        self.profiles.clear()


# Shared by the in-memory Repos bundle; tests reset it between cases.
memory_db = MemoryDB()
