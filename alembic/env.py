"""Alembic environment for the passwordless token schema."""

from __future__ import annotations

import asyncio

import sqlalchemy as sa
from sqlalchemy.engine import Connection
from sqlalchemy.pool import NullPool

from alembic import context
from passwordless_tokenstore.config.settings import Settings
from passwordless_tokenstore.infrastructure.db.metadata import metadata
from passwordless_tokenstore.infrastructure.db.session import create_token_store_engine
from passwordless_tokenstore.infrastructure.logging import configure_logging

config = context.config

_DEFAULT_ALEMBIC_URL = "sqlite:///./tokenstore.db"
_ASYNC_DRIVERS = ("+aiosqlite", "+asyncpg")


def _resolve_database_url() -> str:
    """Prefer an explicit sqlalchemy.url, then DATABASE_URL from settings."""

    configured_url = config.get_main_option("sqlalchemy.url") or _DEFAULT_ALEMBIC_URL
    if configured_url != _DEFAULT_ALEMBIC_URL:
        return configured_url
    settings = Settings()
    configure_logging(level=settings.log_level)
    return settings.database_url or configured_url


def _configure_and_run(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=metadata)
    with context.begin_transaction():
        context.run_migrations()


async def _run_with_async_engine(database_url: str) -> None:
    engine = create_token_store_engine(database_url)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_configure_and_run)
    finally:
        await engine.dispose()


def _run_with_sync_engine(database_url: str) -> None:
    engine = sa.create_engine(database_url, poolclass=NullPool)
    try:
        with engine.connect() as connection:
            _configure_and_run(connection)
    finally:
        engine.dispose()


def run_migrations_offline(database_url: str) -> None:
    """Emit migration SQL without a database connection."""

    context.configure(
        url=database_url,
        target_metadata=metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online(database_url: str) -> None:
    """Apply migrations over a live connection using the URL's driver."""

    if any(driver in database_url for driver in _ASYNC_DRIVERS):
        asyncio.run(_run_with_async_engine(database_url))
        return
    _run_with_sync_engine(database_url)


if context.is_offline_mode():
    run_migrations_offline(_resolve_database_url())
else:
    run_migrations_online(_resolve_database_url())
