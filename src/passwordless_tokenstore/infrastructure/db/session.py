"""Async engine and session helpers for the SQL token store backend."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

DEFAULT_CONNECT_TIMEOUT_SECONDS = 5.0


def create_token_store_engine(
    database_url: str,
    *,
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
) -> AsyncEngine:
    """Create the async engine used by the token store.

    Both supported drivers take a `timeout` connect argument: asyncpg bounds
    connection setup with it, aiosqlite waits that long on a locked database
    before failing.
    """

    return create_async_engine(
        database_url,
        connect_args={"timeout": connect_timeout_seconds},
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Bind a session factory to an engine whose lifetime the caller owns."""

    return async_sessionmaker(engine, expire_on_commit=False)
