import pytest
from pydantic import ValidationError

from passwordless_tokenstore.application.services.token_store import TokenStore
from passwordless_tokenstore.config.settings import Settings
from passwordless_tokenstore.infrastructure.db.token_store_backend import (
    SqlAlchemyTokenStoreBackend,
)
from passwordless_tokenstore.infrastructure.memory.token_store_backend import (
    InMemoryTokenStoreBackend,
)
from passwordless_tokenstore.infrastructure.token_store_factory import (
    build_token_store,
    build_token_store_backend,
)

SETTINGS_ENV = (
    "TOKEN_STORE_BACKEND",
    "DATABASE_URL",
    "TOKEN_STORE_OPERATION_TIMEOUT_SECONDS",
    "LOG_LEVEL",
)


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in SETTINGS_ENV:
        monkeypatch.delenv(key, raising=False)


def test_defaults_are_deterministic(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)

    settings = Settings(_env_file=None)

    assert settings.token_store_backend == "memory"
    assert settings.database_url is None
    assert settings.operation_timeout_seconds == 5.0
    assert settings.log_level == "INFO"


def test_database_backend_requires_database_url(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("TOKEN_STORE_BACKEND", "database")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_unknown_backend_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("TOKEN_STORE_BACKEND", "redis")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.parametrize("timeout", ["0", "-1"])
def test_operation_timeout_must_be_positive(
    monkeypatch: pytest.MonkeyPatch,
    timeout: str,
) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("TOKEN_STORE_OPERATION_TIMEOUT_SECONDS", timeout)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_factory_builds_in_memory_backend_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)

    settings = Settings(_env_file=None)

    assert isinstance(build_token_store_backend(settings=settings), InMemoryTokenStoreBackend)
    assert isinstance(build_token_store(settings=settings), TokenStore)


def test_factory_builds_database_backend_when_configured(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("TOKEN_STORE_BACKEND", "database")
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./unused.db")

    settings = Settings(_env_file=None)

    assert isinstance(build_token_store_backend(settings=settings), SqlAlchemyTokenStoreBackend)
