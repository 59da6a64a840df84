from __future__ import annotations

import asyncio
import random

from lms.models.assessment import Assessment
from lms.repos.bundle import Repos
from lms.services.generation import generate_level_tests
from tests.conftest import seed_level, seed_module, seed_question


def test_generates_tests_only_for_levels_without_one(repos: Repos) -> None:
    module = seed_module()
    covered = seed_level(module, "Covered", order_index=0)
    bare = seed_level(module, "Bare", order_index=1)
    asyncio.run(
        repos.assessments.add(
            Assessment.new(kind="level", parent_id=covered.id, title="existing")
        )
    )
    for i in range(3):
        seed_question(f"q{i}")

    report = asyncio.run(generate_level_tests(repos, rng=random.Random(7)))

    assert report.created == [bare.id]
    test = asyncio.run(repos.assessments.get_for_parent("level", bare.id))
    assert test is not None
    assert test.title == "Bare Assessment"
    assert test.description == "Test your knowledge of Bare"
    assert test.total_questions == 3
    assert test.time_limit == 1800
    assert test.passing_score == 70
    # questions are stored inline, not as ids
    assert all(isinstance(q, dict) for q in test.questions)


def test_sample_capped_and_inactive_questions_skipped(repos: Repos) -> None:
    level = seed_level(seed_module())
    for i in range(15):
        seed_question(f"q{i}")
    inactive = seed_question("retired", is_active=False)

    asyncio.run(generate_level_tests(repos, rng=random.Random(1)))

    test = asyncio.run(repos.assessments.get_for_parent("level", level.id))
    ids = [q["id"] for q in test.questions]
    assert len(ids) == 10
    assert len(set(ids)) == 10
    assert inactive.id not in ids


def test_nothing_pending_creates_nothing(repos: Repos) -> None:
    seed_question()
    report = asyncio.run(generate_level_tests(repos))
    assert report.created == []
    assert report.skipped == []


def test_empty_pool_still_creates_empty_test(repos: Repos) -> None:
    level = seed_level(seed_module())

    report = asyncio.run(generate_level_tests(repos))

    assert report.created == [level.id]
    test = asyncio.run(repos.assessments.get_for_parent("level", level.id))
    assert test.questions == []
    assert test.total_questions == 0
