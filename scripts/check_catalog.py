"""Dump the course catalog as JSON for a quick sanity check.

Run with:
    DATABASE_URL=postgresql+asyncpg://... python scripts/check_catalog.py [MODULE_ID]

Modules hold their levels, levels their sub-topics, sub-topics their
content titles.  Each level and module says whether it has a test, and
the closing ``counts`` block totals every table.  Pass a module id to
limit the dump to that module.
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from sqlalchemy import select

from lms.db import engine as db_engine
from lms.db.tables import (
    LevelRow,
    LevelTestRow,
    ModuleRow,
    ModuleTestRow,
    SubTopicContentRow,
    SubTopicRow,
)


def _by(rows: Iterable[Any], key: str) -> dict[str, list[Any]]:
    grouped: dict[str, list[Any]] = defaultdict(list)
    for row in sorted(rows, key=lambda r: (r.order_index, r.title)):
        grouped[getattr(row, key)].append(row)
    return grouped


def catalog_tree(
    modules: Iterable[Any],
    levels: Iterable[Any],
    sub_topics: Iterable[Any],
    contents: Iterable[Any],
    *,
    tested_levels: set[str],
    tested_modules: set[str],
    only_module: str | None = None,
) -> dict[str, Any]:
    """Nest flat table rows into one JSON-ready tree.

    Rows only need the attributes the tables have.  Children whose parent
    is missing are counted under ``orphans`` rather than dropped silently.
    """
    modules = [m for m in modules if only_module in (None, m.id)]
    levels_of = _by(levels, "module_id")
    subs_of = _by(sub_topics, "level_id")
    contents_of = _by(contents, "sub_topic_id")

    tree: list[dict[str, Any]] = []
    counts = dict.fromkeys(("modules", "levels", "subTopics", "contents"), 0)
    for module in sorted(modules, key=lambda m: m.title):
        counts["modules"] += 1
        level_nodes = []
        for level in levels_of.get(module.id, []):
            counts["levels"] += 1
            sub_nodes = []
            for sub in subs_of.get(level.id, []):
                items = contents_of.get(sub.id, [])
                counts["subTopics"] += 1
                counts["contents"] += len(items)
                sub_nodes.append(
                    {
                        "id": sub.id,
                        "title": sub.title,
                        "active": sub.is_active,
                        "contents": [
                            {"id": c.id, "title": c.title, "published": c.is_published}
                            for c in items
                        ],
                    }
                )
            level_nodes.append(
                {
                    "id": level.id,
                    "title": level.title,
                    "hasTest": level.id in tested_levels,
                    "subTopics": sub_nodes,
                }
            )
        tree.append(
            {
                "id": module.id,
                "title": module.title,
                "active": module.is_active,
                "hasFinalTest": module.id in tested_modules,
                "levels": level_nodes,
            }
        )

    report: dict[str, Any] = {"modules": tree, "counts": counts}
    if only_module is None:
        module_ids = {m.id for m in modules}
        level_ids = {lv.id for rows in levels_of.values() for lv in rows}
        sub_ids = {s.id for rows in subs_of.values() for s in rows}
        report["orphans"] = {
            "levels": sum(
                len(rows) for mid, rows in levels_of.items() if mid not in module_ids
            ),
            "subTopics": sum(
                len(rows) for lid, rows in subs_of.items() if lid not in level_ids
            ),
            "contents": sum(
                len(rows) for sid, rows in contents_of.items() if sid not in sub_ids
            ),
        }
    return report


async def main(only_module: str | None = None) -> int:
    if db_engine.async_session_factory is None:
        print("DATABASE_URL is not set", file=sys.stderr)
        return 1

    async with db_engine.session_scope() as session:
        modules = (await session.scalars(select(ModuleRow))).all()
        if only_module is not None and only_module not in {m.id for m in modules}:
            print(f"Module {only_module!r} not found", file=sys.stderr)
            await db_engine.engine.dispose()
            return 1
        report = catalog_tree(
            modules,
            (await session.scalars(select(LevelRow))).all(),
            (await session.scalars(select(SubTopicRow))).all(),
            (await session.scalars(select(SubTopicContentRow))).all(),
            tested_levels=set(
                (await session.scalars(select(LevelTestRow.level_id))).all()
            ),
            tested_modules=set(
                (await session.scalars(select(ModuleTestRow.module_id))).all()
            ),
            only_module=only_module,
        )

    print(json.dumps(report, indent=2))
    await db_engine.engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None)))
