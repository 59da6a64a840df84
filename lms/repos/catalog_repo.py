from __future__ import annotations

from dataclasses import replace
from typing import Any, Protocol

from lms.models.catalog import (
    SUB_TOPIC_MUTABLE_FIELDS,
    Level,
    Module,
    SubTopic,
    SubTopicContent,
)
from lms.repos.memory import MemoryDB


class CatalogRepo(Protocol):
    async def get_module(self, module_id: str) -> Module | None: ...
    async def list_modules(self, *, active_only: bool = True) -> list[Module]: ...
    async def add_module(self, module: Module) -> None: ...
    async def get_level(self, level_id: str) -> Level | None: ...
    async def list_levels(self, module_id: str | None = None) -> list[Level]: ...
    async def add_level(self, level: Level) -> None: ...
    async def delete_level(self, level_id: str) -> bool: ...
    async def get_sub_topic(self, sub_topic_id: str) -> SubTopic | None: ...
    async def list_sub_topics(self, level_id: str) -> list[SubTopic]: ...
    async def add_sub_topic(self, sub_topic: SubTopic) -> None: ...
    async def update_sub_topic(
        self, sub_topic_id: str, changes: dict[str, Any]
    ) -> SubTopic | None: ...
    async def delete_sub_topic(self, sub_topic_id: str) -> bool: ...
    async def get_content(self, content_id: str) -> SubTopicContent | None: ...
    async def list_published_contents(
        self, sub_topic_id: str
    ) -> list[SubTopicContent]: ...
    async def add_content(self, content: SubTopicContent) -> None: ...


class InMemoryCatalogRepo:
    def __init__(self, db: MemoryDB) -> None:
        self._db = db

    async def get_module(self, module_id: str) -> Module | None:
        return self._db.modules.get(module_id)

    async def list_modules(self, *, active_only: bool = True) -> list[Module]:
        modules = list(self._db.modules.values())
        if active_only:
            modules = [m for m in modules if m.is_active]
        return sorted(modules, key=lambda m: m.title)

    async def add_module(self, module: Module) -> None:
        if module.id in self._db.modules:
            raise ValueError("module already exists")
        self._db.modules[module.id] = module

    async def get_level(self, level_id: str) -> Level | None:
        return self._db.levels.get(level_id)

    async def list_levels(self, module_id: str | None = None) -> list[Level]:
        levels = [
            lv
            for lv in self._db.levels.values()
            if module_id is None or lv.module_id == module_id
        ]
        return sorted(levels, key=lambda lv: lv.order_index)

    async def add_level(self, level: Level) -> None:
        if level.id in self._db.levels:
            raise ValueError("level already exists")
        self._db.levels[level.id] = level

    async def delete_level(self, level_id: str) -> bool:
        if self._db.levels.pop(level_id, None) is None:
            return False
        sub_topic_ids = [
            st.id for st in self._db.sub_topics.values() if st.level_id == level_id
        ]
        for sub_topic_id in sub_topic_ids:
            self._remove_sub_topic(sub_topic_id)
        self._remove_test("level", level_id)
        return True

    async def get_sub_topic(self, sub_topic_id: str) -> SubTopic | None:
        return self._db.sub_topics.get(sub_topic_id)

    async def list_sub_topics(self, level_id: str) -> list[SubTopic]:
        subs = [st for st in self._db.sub_topics.values() if st.level_id == level_id]
        return sorted(subs, key=lambda st: st.order_index)

    async def add_sub_topic(self, sub_topic: SubTopic) -> None:
        if sub_topic.level_id not in self._db.levels:
            raise KeyError("level not found")
        self._db.sub_topics[sub_topic.id] = sub_topic

    async def update_sub_topic(
        self, sub_topic_id: str, changes: dict[str, Any]
    ) -> SubTopic | None:
        current = self._db.sub_topics.get(sub_topic_id)
        if current is None:
            return None
        allowed = {k: v for k, v in changes.items() if k in SUB_TOPIC_MUTABLE_FIELDS}
        updated = replace(current, **allowed)
        self._db.sub_topics[sub_topic_id] = updated
        return updated

    async def delete_sub_topic(self, sub_topic_id: str) -> bool:
        if sub_topic_id not in self._db.sub_topics:
            return False
        self._remove_sub_topic(sub_topic_id)
        return True

    async def get_content(self, content_id: str) -> SubTopicContent | None:
        return self._db.contents.get(content_id)

    async def list_published_contents(
        self, sub_topic_id: str
    ) -> list[SubTopicContent]:
        items = [
            c
            for c in self._db.contents.values()
            if c.sub_topic_id == sub_topic_id and c.is_published
        ]
        return sorted(items, key=lambda c: c.order_index)

    async def add_content(self, content: SubTopicContent) -> None:
        if content.sub_topic_id not in self._db.sub_topics:
            raise KeyError("sub topic not found")
        self._db.contents[content.id] = content

    # --- cascade helpers (mirror ON DELETE CASCADE) ---

    def _remove_sub_topic(self, sub_topic_id: str) -> None:
        self._db.sub_topics.pop(sub_topic_id, None)
        for content_id in [
            c.id for c in self._db.contents.values() if c.sub_topic_id == sub_topic_id
        ]:
            del self._db.contents[content_id]
        self._remove_test("subtopic", sub_topic_id)

    def _remove_test(self, kind: str, parent_id: str) -> None:
        test_id = self._db.tests_by_parent.pop((kind, parent_id), None)  # type: ignore[arg-type]
        if test_id is None:
            return
        self._db.tests.pop(test_id, None)
        self._db.results[:] = [
            r
            for r in self._db.results
            if not (r.kind == kind and r.test_id == test_id)
        ]
