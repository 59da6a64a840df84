"""Random level-test generation (operator tooling).

For every level that has no test yet, sample up to ``sample_size`` active
questions and create a level test with the questions inlined.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from lms.models.assessment import DEFAULT_LEVEL_TIME_LIMIT, Assessment
from lms.repos.bundle import Repos
from lms.services.errors import ConflictError
from lms.services.assembly import inline_question

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 10


@dataclass
class GenerationReport:
    created: list[str] = field(default_factory=list)  # level ids
    skipped: list[str] = field(default_factory=list)


async def generate_level_tests(
    repos: Repos,
    *,
    rng: random.Random | None = None,
    sample_size: int = SAMPLE_SIZE,
) -> GenerationReport:
    rng = rng or random.Random()
    report = GenerationReport()

    levels = await repos.catalog.list_levels()
    with_tests = await repos.assessments.parents_with_tests("level")
    pending = [lv for lv in levels if lv.id not in with_tests]
    logger.info("Found %d levels without tests", len(pending))
    if not pending:
        return report

    pool = await repos.questions.list_active()
    logger.info("Found %d active questions", len(pool))

    for level in pending:
        picked = rng.sample(pool, min(sample_size, len(pool)))
        test = Assessment.new(
            kind="level",
            parent_id=level.id,
            title=f"{level.title} Assessment",
            description=f"Test your knowledge of {level.title}",
            questions=[inline_question(q) for q in picked],
            total_questions=len(picked),
            time_limit=DEFAULT_LEVEL_TIME_LIMIT,
        )
        try:
            await repos.assessments.add(test)
        except ConflictError:
            logger.warning("Level %s gained a test concurrently, skipping", level.id)
            report.skipped.append(level.id)
            continue
        logger.info(
            "Created test for level=%s with %d questions", level.title, len(picked)
        )
        report.created.append(level.id)

    return report
