"""Port for passwordless token persistence backends."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from passwordless_tokenstore.domain.token_record import TokenRecord


class TokenStoreOperationalError(RuntimeError):
    """Base class for failures reported by an awaited token store operation."""


class DuplicateTokenError(TokenStoreOperationalError):
    """Raised when a token value is already held by a different user id."""


class TokenStoreUnavailableError(TokenStoreOperationalError):
    """Raised when the storage backend fails or does not answer in time."""


class TokenStoreBackendPort(Protocol):
    """Persistence contract every token store backend must satisfy.

    Backends receive validated arguments only. `upsert` must check token
    uniqueness and write in one atomic step and leave the previous record for
    the user intact when it fails.
    """

    async def upsert(self, record: TokenRecord) -> None:
        """Insert or fully replace the record keyed by `record.user_id`."""

    async def get_by_user_id(self, *, user_id: str) -> TokenRecord | None:
        """Return the record held for one user id, expired or not."""

    async def delete_by_token(self, *, token: str) -> int:
        """Delete the record holding `token` and return the removed count."""

    async def delete_by_user_id(self, *, user_id: str) -> int:
        """Delete the record held for `user_id` and return the removed count."""

    async def delete_all(self) -> int:
        """Delete every record and return the removed count."""

    async def delete_expired(self, *, now: datetime) -> int:
        """Delete records with `expires_at <= now` and return the removed count."""

    async def count(self) -> int:
        """Return the number of stored records, expired ones included."""

    async def aclose(self) -> None:
        """Release held resources; calling it more than once is allowed."""
