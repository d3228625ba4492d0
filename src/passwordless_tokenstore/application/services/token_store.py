"""Passwordless token store service enforcing the store contract over any backend."""

from __future__ import annotations

import asyncio
import hmac
import logging
from collections.abc import Awaitable, Coroutine
from dataclasses import dataclass
from typing import Any, TypeVar

from passwordless_tokenstore.application.ports.clock_port import ClockPort
from passwordless_tokenstore.application.ports.token_store_backend_port import (
    DuplicateTokenError,
    TokenStoreBackendPort,
    TokenStoreUnavailableError,
)
from passwordless_tokenstore.domain.token_inputs import (
    TokenStoreContractError,
    require_referrer,
    require_time_to_live,
    require_token,
    require_user_id,
)
from passwordless_tokenstore.domain.token_record import TokenRecord

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

DEFAULT_OPERATION_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class AuthenticationResult:
    """Outcome of presenting a token for a user id."""

    valid: bool
    referrer: str | None = None


_REJECTED = AuthenticationResult(valid=False, referrer=None)


class TokenStore:
    """Issue, check and invalidate passwordless tokens.

    Every public method validates its arguments when called and raises
    `TokenStoreContractError` right away, before any backend access. On valid
    input it returns an awaitable; failures of the awaited operation are
    `TokenStoreOperationalError` subclasses.
    """

    def __init__(
        self,
        *,
        backend: TokenStoreBackendPort,
        clock: ClockPort,
        operation_timeout_seconds: float = DEFAULT_OPERATION_TIMEOUT_SECONDS,
    ) -> None:
        if operation_timeout_seconds <= 0:
            raise ValueError("operation_timeout_seconds must be greater than zero")
        self._backend = backend
        self._clock = clock
        self._operation_timeout_seconds = operation_timeout_seconds

    def store_or_update(
        self,
        *,
        token: str,
        user_id: str,
        ms_to_live: float,
        referrer: str,
    ) -> Coroutine[Any, Any, None]:
        """Store a token for a user id, replacing whatever the user held before.

        Expiry is stamped from the clock when the method is called. Raises
        `DuplicateTokenError` when the token already belongs to another user
        id; the store is left unchanged in that case.
        """

        valid_token = require_token(token=token)
        valid_user_id = require_user_id(user_id=user_id)
        time_to_live = require_time_to_live(ms_to_live=ms_to_live)
        valid_referrer = require_referrer(referrer=referrer)
        try:
            expires_at = self._clock.now() + time_to_live
        except OverflowError as error:
            raise TokenStoreContractError("ms_to_live puts expiry out of range") from error
        record = TokenRecord(
            user_id=valid_user_id,
            token=valid_token,
            expires_at=expires_at,
            referrer=valid_referrer,
        )

        async def _store() -> None:
            try:
                await self._run("store_or_update", self._backend.upsert(record))
            except DuplicateTokenError:
                logger.warning("token_store_duplicate_token user_id=%s", valid_user_id)
                raise
            logger.info(
                "token_stored user_id=%s expires_at=%s",
                valid_user_id,
                record.expires_at.isoformat(),
            )

        return _store()

    def authenticate(
        self,
        *,
        token: str,
        user_id: str,
    ) -> Coroutine[Any, Any, AuthenticationResult]:
        """Check a token for a user id without consuming it.

        Unknown users, mismatched tokens and expired records all yield
        `AuthenticationResult(valid=False, referrer=None)`.
        """

        valid_token = require_token(token=token)
        valid_user_id = require_user_id(user_id=user_id)

        async def _authenticate() -> AuthenticationResult:
            record = await self._run(
                "authenticate",
                self._backend.get_by_user_id(user_id=valid_user_id),
            )
            if record is None:
                logger.info("token_authentication_rejected user_id=%s", valid_user_id)
                return _REJECTED
            if not hmac.compare_digest(record.token.encode(), valid_token.encode()):
                logger.info("token_authentication_rejected user_id=%s", valid_user_id)
                return _REJECTED
            if record.is_expired(now=self._clock.now()):
                logger.info("token_authentication_expired user_id=%s", valid_user_id)
                return _REJECTED
            logger.info("token_authentication_accepted user_id=%s", valid_user_id)
            return AuthenticationResult(valid=True, referrer=record.referrer)

        return _authenticate()

    def invalidate_token(self, *, token: str) -> Coroutine[Any, Any, None]:
        """Remove the record holding a token, whoever owns it."""

        valid_token = require_token(token=token)

        async def _invalidate() -> None:
            removed = await self._run(
                "invalidate_token",
                self._backend.delete_by_token(token=valid_token),
            )
            logger.info("token_invalidated removed=%s", removed)

        return _invalidate()

    def invalidate_user(self, *, user_id: str) -> Coroutine[Any, Any, None]:
        """Remove the record held for a user id."""

        valid_user_id = require_user_id(user_id=user_id)

        async def _invalidate() -> None:
            removed = await self._run(
                "invalidate_user",
                self._backend.delete_by_user_id(user_id=valid_user_id),
            )
            logger.info("user_tokens_invalidated user_id=%s removed=%s", valid_user_id, removed)

        return _invalidate()

    async def clear(self) -> None:
        """Remove every record."""

        removed = await self._run("clear", self._backend.delete_all())
        logger.info("token_store_cleared removed=%s", removed)

    async def length(self) -> int:
        """Return the number of held records, including expired ones not yet removed."""

        return await self._run("length", self._backend.count())

    async def purge_expired(self) -> int:
        """Remove records that can no longer authenticate and return how many went."""

        removed = await self._run(
            "purge_expired",
            self._backend.delete_expired(now=self._clock.now()),
        )
        logger.info("token_store_expired_purged removed=%s", removed)
        return removed

    async def aclose(self) -> None:
        """Release backend resources such as pooled database connections."""

        await self._backend.aclose()
        logger.info("token_store_closed")

    async def _run(self, operation: str, call: Awaitable[_T]) -> _T:
        try:
            return await asyncio.wait_for(call, timeout=self._operation_timeout_seconds)
        except TimeoutError as error:
            logger.warning(
                "token_store_backend_timeout operation=%s timeout_seconds=%s",
                operation,
                self._operation_timeout_seconds,
            )
            raise TokenStoreUnavailableError(
                f"token store backend timed out during {operation}"
            ) from error
