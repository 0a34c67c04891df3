"""Alembic environment for the billing schema.

The URL comes from the application settings unless overridden on the
command line with ``alembic -x database_url=... upgrade head``.
"""

from __future__ import annotations

import asyncio
from logging.config import fileConfig
from typing import Any

from alembic import context
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import create_async_engine

from agegate.db import models  # noqa: F401
from agegate.infrastructure.database.base import Base
from agegate.infrastructure.database.session import dispose_engine, get_engine

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# SQLite cannot ALTER most constraints in place
MIGRATION_OPTIONS: dict[str, Any] = {
    "target_metadata": target_metadata,
    "render_as_batch": True,
    "compare_type": True,
}


def _override_url() -> str | None:
    return context.get_x_argument(as_dictionary=True).get("database_url")


def _offline_url() -> str:
    override = _override_url()
    url = make_url(override) if override else get_engine().url
    if url.drivername == "sqlite+aiosqlite":
        url = url.set(drivername="sqlite")
    return url.render_as_string(hide_password=False)


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting."""
    context.configure(
        url=_offline_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **MIGRATION_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def _apply(connection: Connection) -> None:
    context.configure(connection=connection, **MIGRATION_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    override = _override_url()
    engine = create_async_engine(override) if override else get_engine()
    async with engine.connect() as connection:
        await connection.run_sync(_apply)
    if override:
        await engine.dispose()
    else:
        await dispose_engine()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
