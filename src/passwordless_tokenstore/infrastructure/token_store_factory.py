"""Compose a token store from runtime settings."""

from __future__ import annotations

from passwordless_tokenstore.application.ports.clock_port import ClockPort
from passwordless_tokenstore.application.ports.token_store_backend_port import (
    TokenStoreBackendPort,
)
from passwordless_tokenstore.application.services.token_store import TokenStore
from passwordless_tokenstore.config.settings import Settings
from passwordless_tokenstore.infrastructure.clock import SystemClock
from passwordless_tokenstore.infrastructure.db.session import create_token_store_engine
from passwordless_tokenstore.infrastructure.db.token_store_backend import (
    SqlAlchemyTokenStoreBackend,
)
from passwordless_tokenstore.infrastructure.memory.token_store_backend import (
    InMemoryTokenStoreBackend,
)


def build_token_store_backend(*, settings: Settings) -> TokenStoreBackendPort:
    """Build the backend selected by TOKEN_STORE_BACKEND."""

    if settings.token_store_backend == "database":
        if settings.database_url is None:
            raise ValueError("DATABASE_URL is required for the database token store backend")
        engine = create_token_store_engine(
            settings.database_url,
            connect_timeout_seconds=settings.operation_timeout_seconds,
        )
        return SqlAlchemyTokenStoreBackend(engine)
    return InMemoryTokenStoreBackend()


def build_token_store(*, settings: Settings, clock: ClockPort | None = None) -> TokenStore:
    """Build a token store service wired to the configured backend and clock."""

    return TokenStore(
        backend=build_token_store_backend(settings=settings),
        clock=clock or SystemClock(),
        operation_timeout_seconds=settings.operation_timeout_seconds,
    )
