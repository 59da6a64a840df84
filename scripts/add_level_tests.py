"""Create a randomly sampled test for every level that has none.

Run with:
    DATABASE_URL=postgresql+asyncpg://... python scripts/add_level_tests.py

Each new test embeds up to 10 active questions inline.  Levels that
already have a test are left alone.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from lms.core.config import SETTINGS
from lms.core.logging import setup_logging
from lms.db import engine as db_engine
from lms.repos.bundle import Repos
from lms.services.generation import generate_level_tests

logger = logging.getLogger("add_level_tests")


async def main() -> int:
    if db_engine.async_session_factory is None:
        logger.error("DATABASE_URL is not set; nothing to seed")
        return 1

    try:
        async with db_engine.session_scope() as session:
            report = await generate_level_tests(Repos.postgres(session))
    except Exception:
        logger.exception("Level test generation failed")
        return 1
    finally:
        await db_engine.engine.dispose()

    print(f"created: {len(report.created)}  skipped: {len(report.skipped)}")
    return 0


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    sys.exit(asyncio.run(main()))
