"""SQLAlchemy adapter for passwordless token persistence."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any, cast

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult, RowMapping
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from passwordless_tokenstore.application.ports.token_store_backend_port import (
    DuplicateTokenError,
    TokenStoreBackendPort,
    TokenStoreUnavailableError,
)
from passwordless_tokenstore.domain.token_record import TokenRecord
from passwordless_tokenstore.infrastructure.db.metadata import passwordless_tokens
from passwordless_tokenstore.infrastructure.db.session import create_session_factory

logger = logging.getLogger(__name__)


def _is_duplicate_token_error(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "uq_passwordless_tokens_token" in message or "passwordless_tokens.token" in message


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; rows are always written in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _to_token_record(row: RowMapping) -> TokenRecord:
    return TokenRecord(
        user_id=cast(str, row["user_id"]),
        token=cast(str, row["token"]),
        expires_at=_as_utc(cast(datetime, row["expires_at"])),
        referrer=cast(str, row["referrer"]),
    )


class SqlAlchemyTokenStoreBackend(TokenStoreBackendPort):
    """Token store backend persisted through SQLAlchemy async sessions.

    The unique constraint on `token` decides races between concurrent claims of
    one token value; replacement of a user's record happens in one transaction.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    async def upsert(self, record: TokenRecord) -> None:
        """Replace the user's row with the new token inside one transaction."""

        delete_statement = sa.delete(passwordless_tokens).where(
            passwordless_tokens.c.user_id == record.user_id
        )
        insert_statement = sa.insert(passwordless_tokens).values(
            user_id=record.user_id,
            token=record.token,
            expires_at=_as_utc(record.expires_at),
            referrer=record.referrer,
        )

        async with self._session("upsert") as session:
            try:
                await session.execute(delete_statement)
                await session.execute(insert_statement)
                await session.commit()
            except IntegrityError as error:
                await session.rollback()
                if _is_duplicate_token_error(error):
                    raise DuplicateTokenError("token is already held by another user") from error
                raise

    async def get_by_user_id(self, *, user_id: str) -> TokenRecord | None:
        statement = sa.select(*passwordless_tokens.c).where(
            passwordless_tokens.c.user_id == user_id
        )

        async with self._session("get_by_user_id") as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_token_record(row)

    async def delete_by_token(self, *, token: str) -> int:
        statement = sa.delete(passwordless_tokens).where(passwordless_tokens.c.token == token)
        return await self._delete("delete_by_token", statement)

    async def delete_by_user_id(self, *, user_id: str) -> int:
        statement = sa.delete(passwordless_tokens).where(
            passwordless_tokens.c.user_id == user_id
        )
        return await self._delete("delete_by_user_id", statement)

    async def delete_all(self) -> int:
        return await self._delete("delete_all", sa.delete(passwordless_tokens))

    async def delete_expired(self, *, now: datetime) -> int:
        statement = sa.delete(passwordless_tokens).where(
            passwordless_tokens.c.expires_at <= _as_utc(now)
        )
        return await self._delete("delete_expired", statement)

    async def count(self) -> int:
        statement = sa.select(sa.func.count()).select_from(passwordless_tokens)

        async with self._session("count") as session:
            result = await session.execute(statement)

        return int(result.scalar_one())

    async def aclose(self) -> None:
        """Dispose the engine pool so no connection outlives the event loop."""

        await self._engine.dispose()

    async def _delete(self, operation: str, statement: sa.Delete) -> int:
        async with self._session(operation) as session:
            result = cast(CursorResult[Any], await session.execute(statement))
            await session.commit()

        return int(result.rowcount or 0)

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except (SQLAlchemyError, OSError) as error:
            logger.warning(
                "token_store_database_error operation=%s error=%s",
                operation,
                type(error).__name__,
            )
            raise TokenStoreUnavailableError(
                f"token store database failed during {operation}"
            ) from error
