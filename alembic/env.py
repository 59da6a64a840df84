"""Alembic environment for the LMS schema.

The database URL comes from DATABASE_URL via lms.core.config, the same
source the service reads, converted to the psycopg2 driver because
migrations run synchronously.  ``alembic.ini`` only holds a placeholder.
"""

from __future__ import annotations

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context
from lms.core.config import SETTINGS
from lms.db.engine import Base, sync_database_url

config = context.config

if SETTINGS.database_url:
    config.set_main_option("sqlalchemy.url", sync_database_url(SETTINGS.database_url))

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Registers every LMS table on Base.metadata for autogenerate
import lms.db.tables  # noqa: E402, F401

target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    # compare_type catches column type drift (e.g. String length on ids)
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
