"""In-process token store backend."""

from __future__ import annotations

import asyncio
from datetime import datetime

from passwordless_tokenstore.application.ports.token_store_backend_port import (
    DuplicateTokenError,
    TokenStoreBackendPort,
)
from passwordless_tokenstore.domain.token_record import TokenRecord


class InMemoryTokenStoreBackend(TokenStoreBackendPort):
    """Dictionary-backed records keyed by user id with a token-to-user index.

    Both maps change together under one lock, so a token is never visible in
    one map without the other.
    """

    def __init__(self) -> None:
        self._records: dict[str, TokenRecord] = {}
        self._owners: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def upsert(self, record: TokenRecord) -> None:
        async with self._lock:
            owner = self._owners.get(record.token)
            if owner is not None and owner != record.user_id:
                raise DuplicateTokenError("token is already held by another user")

            previous = self._records.get(record.user_id)
            if previous is not None:
                del self._owners[previous.token]
            self._records[record.user_id] = record
            self._owners[record.token] = record.user_id

    async def get_by_user_id(self, *, user_id: str) -> TokenRecord | None:
        async with self._lock:
            return self._records.get(user_id)

    async def delete_by_token(self, *, token: str) -> int:
        async with self._lock:
            owner = self._owners.pop(token, None)
            if owner is None:
                return 0
            del self._records[owner]
            return 1

    async def delete_by_user_id(self, *, user_id: str) -> int:
        async with self._lock:
            record = self._records.pop(user_id, None)
            if record is None:
                return 0
            del self._owners[record.token]
            return 1

    async def delete_all(self) -> int:
        async with self._lock:
            removed = len(self._records)
            self._records.clear()
            self._owners.clear()
            return removed

    async def delete_expired(self, *, now: datetime) -> int:
        async with self._lock:
            expired = [record for record in self._records.values() if record.is_expired(now=now)]
            for record in expired:
                del self._records[record.user_id]
                del self._owners[record.token]
            return len(expired)

    async def count(self) -> int:
        async with self._lock:
            return len(self._records)

    async def aclose(self) -> None:
        return None
