"""Async engine, session factory and unit-of-work scope for PostgreSQL.

Everything here is None when DATABASE_URL is unset; callers check
``async_session_factory`` and fall back to the in-memory store.  The
same ``session_scope`` wraps API requests (via ``get_repos``) and the
operator scripts, so both commit or roll back the same way.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from lms.core.config import SETTINGS

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the LMS tables."""


def sync_database_url(url: str) -> str:
    """The psycopg2 form of an asyncpg URL, for Alembic's sync migrations."""
    return url.replace("postgresql+asyncpg", "postgresql", 1)


if SETTINGS.database_url:
    engine = create_async_engine(
        SETTINGS.database_url,
        echo=SETTINGS.is_dev,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # drop connections the server closed while idle
    )
    async_session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
else:
    engine = None
    async_session_factory = None


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """One session that commits on clean exit and rolls back on error."""
    if async_session_factory is None:
        raise RuntimeError("DATABASE_URL is not configured")
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def lifespan_db():
    """Engine startup/shutdown, entered from the app lifespan."""
    if engine is None:
        logger.info("No DATABASE_URL configured, using in-memory repositories")
        yield
        return

    logger.info(
        "Database engine created: %s", engine.url.render_as_string(hide_password=True)
    )
    yield
    await engine.dispose()
    logger.info("Database engine disposed")
