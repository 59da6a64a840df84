"""Print enrollment progress and result counts for a quick sanity check.

Run with:
    DATABASE_URL=postgresql+asyncpg://... python scripts/check_progress.py
"""

from __future__ import annotations

import asyncio
import json
import sys

from sqlalchemy import func, select

from lms.db import engine as db_engine
from lms.db.tables import (
    LevelTestResultRow,
    ModuleEnrollmentRow,
    ModuleRow,
    SubTopicTestResultRow,
)


def _completed_count(blob: object) -> int:
    # stored either as a list of ids or as {"subtopics": [...]}
    if isinstance(blob, list):
        return len(blob)
    if isinstance(blob, dict):
        return len(blob.get("subtopics") or [])
    return 0


async def main() -> int:
    if db_engine.async_session_factory is None:
        print("DATABASE_URL is not set", file=sys.stderr)
        return 1

    async with db_engine.session_scope() as session:
        rows = (
            await session.execute(
                select(ModuleEnrollmentRow, ModuleRow.title)
                .join(ModuleRow, ModuleRow.id == ModuleEnrollmentRow.module_id)
                .order_by(ModuleEnrollmentRow.enrolled_at.desc())
            )
        ).all()

        print(f"Module enrollments: {len(rows)}")
        for enrollment, module_title in rows:
            print(f"  - user: {enrollment.user_id}")
            print(f"    module: {module_title}")
            print(f"    progress: {enrollment.progress_percentage}%")
            print(f"    completed: {enrollment.completed_at or '-'}")
            print(
                "    completed sub-topics: "
                f"{_completed_count(enrollment.completed_sub_topics)}"
            )
            print(f"    raw: {json.dumps(enrollment.completed_sub_topics)}")

        level_results = await session.scalar(
            select(func.count()).select_from(LevelTestResultRow)
        )
        sub_topic_results = await session.scalar(
            select(func.count()).select_from(SubTopicTestResultRow)
        )
        print("\nTest results:")
        print(f"  - sub-topic test results: {sub_topic_results}")
        print(f"  - level test results: {level_results}")

    await db_engine.engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
