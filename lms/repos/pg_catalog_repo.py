"""PostgreSQL implementation of CatalogRepo."""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.tables import LevelRow, ModuleRow, SubTopicContentRow, SubTopicRow
from lms.models.catalog import (
    SUB_TOPIC_MUTABLE_FIELDS,
    Level,
    Module,
    SubTopic,
    SubTopicContent,
)


class PgCatalogRepo:
    """Satisfies the CatalogRepo Protocol using PostgreSQL via SQLAlchemy.

    Deletes rely on ``ON DELETE CASCADE`` to remove subtopics, contents,
    tests and results.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # --- modules ---

    async def get_module(self, module_id: str) -> Module | None:
        row = await self._session.get(ModuleRow, module_id)
        return None if row is None else _row_to_module(row)

    async def list_modules(self, *, active_only: bool = True) -> list[Module]:
        stmt = select(ModuleRow).order_by(ModuleRow.title)
        if active_only:
            stmt = stmt.where(ModuleRow.is_active.is_(True))
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_module(r) for r in rows]

    async def add_module(self, module: Module) -> None:
        self._session.add(
            ModuleRow(
                id=module.id,
                title=module.title,
                description=module.description,
                is_active=module.is_active,
            )
        )
        await self._session.flush()

    # --- levels ---

    async def get_level(self, level_id: str) -> Level | None:
        row = await self._session.get(LevelRow, level_id)
        return None if row is None else _row_to_level(row)

    async def list_levels(self, module_id: str | None = None) -> list[Level]:
        stmt = select(LevelRow).order_by(LevelRow.order_index)
        if module_id is not None:
            stmt = stmt.where(LevelRow.module_id == module_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_level(r) for r in rows]

    async def add_level(self, level: Level) -> None:
        self._session.add(
            LevelRow(
                id=level.id,
                module_id=level.module_id,
                title=level.title,
                order_index=level.order_index,
            )
        )
        await self._session.flush()

    async def delete_level(self, level_id: str) -> bool:
        result = await self._session.execute(
            delete(LevelRow).where(LevelRow.id == level_id)
        )
        return result.rowcount > 0

    # --- subtopics ---

    async def get_sub_topic(self, sub_topic_id: str) -> SubTopic | None:
        row = await self._session.get(SubTopicRow, sub_topic_id)
        return None if row is None else _row_to_sub_topic(row)

    async def list_sub_topics(self, level_id: str) -> list[SubTopic]:
        stmt = (
            select(SubTopicRow)
            .where(SubTopicRow.level_id == level_id)
            .order_by(SubTopicRow.order_index)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_sub_topic(r) for r in rows]

    async def add_sub_topic(self, sub_topic: SubTopic) -> None:
        self._session.add(
            SubTopicRow(
                id=sub_topic.id,
                level_id=sub_topic.level_id,
                title=sub_topic.title,
                description=sub_topic.description,
                order_index=sub_topic.order_index,
                estimated_duration=sub_topic.estimated_duration,
                learning_objectives=sub_topic.learning_objectives,
                is_active=sub_topic.is_active,
            )
        )
        await self._session.flush()

    async def update_sub_topic(
        self, sub_topic_id: str, changes: dict[str, Any]
    ) -> SubTopic | None:
        allowed = {k: v for k, v in changes.items() if k in SUB_TOPIC_MUTABLE_FIELDS}
        if allowed:
            result = await self._session.execute(
                update(SubTopicRow)
                .where(SubTopicRow.id == sub_topic_id)
                .values(**allowed)
                .returning(SubTopicRow)
            )
            row = result.scalar_one_or_none()
            return None if row is None else _row_to_sub_topic(row)
        return await self.get_sub_topic(sub_topic_id)

    async def delete_sub_topic(self, sub_topic_id: str) -> bool:
        result = await self._session.execute(
            delete(SubTopicRow).where(SubTopicRow.id == sub_topic_id)
        )
        return result.rowcount > 0

    # --- contents ---

    async def get_content(self, content_id: str) -> SubTopicContent | None:
        row = await self._session.get(SubTopicContentRow, content_id)
        return None if row is None else _row_to_content(row)

    async def list_published_contents(
        self, sub_topic_id: str
    ) -> list[SubTopicContent]:
        stmt = (
            select(SubTopicContentRow)
            .where(
                SubTopicContentRow.sub_topic_id == sub_topic_id,
                SubTopicContentRow.is_published.is_(True),
            )
            .order_by(SubTopicContentRow.order_index)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_content(r) for r in rows]

    async def add_content(self, content: SubTopicContent) -> None:
        self._session.add(
            SubTopicContentRow(
                id=content.id,
                sub_topic_id=content.sub_topic_id,
                title=content.title,
                body=content.body,
                order_index=content.order_index,
                is_published=content.is_published,
            )
        )
        await self._session.flush()


def _row_to_module(row: ModuleRow) -> Module:
    return Module(
        id=row.id,
        title=row.title,
        description=row.description or "",
        is_active=row.is_active,
    )


def _row_to_level(row: LevelRow) -> Level:
    return Level(
        id=row.id, module_id=row.module_id, title=row.title, order_index=row.order_index
    )


def _row_to_sub_topic(row: SubTopicRow) -> SubTopic:
    return SubTopic(
        id=row.id,
        level_id=row.level_id,
        title=row.title,
        description=row.description,
        order_index=row.order_index,
        estimated_duration=row.estimated_duration,
        learning_objectives=row.learning_objectives,
        is_active=row.is_active,
    )


def _row_to_content(row: SubTopicContentRow) -> SubTopicContent:
    return SubTopicContent(
        id=row.id,
        sub_topic_id=row.sub_topic_id,
        title=row.title,
        body=row.body or "",
        order_index=row.order_index,
        is_published=row.is_published,
    )
