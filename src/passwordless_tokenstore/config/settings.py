"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
PositiveFloat = Annotated[float, Field(gt=0.0)]


class Settings(BaseSettings):
    """Environment-driven token store settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    token_store_backend: Literal["memory", "database"] = Field(
        default="memory",
        validation_alias="TOKEN_STORE_BACKEND",
    )
    database_url: NonEmptyStr | None = Field(default=None, validation_alias="DATABASE_URL")
    operation_timeout_seconds: PositiveFloat = Field(
        default=5.0,
        validation_alias="TOKEN_STORE_OPERATION_TIMEOUT_SECONDS",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @model_validator(mode="after")
    def _require_database_url_for_database_backend(self) -> "Settings":
        if self.token_store_backend == "database" and self.database_url is None:
            raise ValueError("DATABASE_URL is required when TOKEN_STORE_BACKEND=database")
        return self


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()
