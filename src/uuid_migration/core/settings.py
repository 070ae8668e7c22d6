from __future__ import annotations

from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    SettingsConfigDict,
)


class Settings(BaseSettings):
    """
    Migration settings.

    Loads from `UUID_MIGRATION_*` environment variables and an optional local
    `.env` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="UUID_MIGRATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Default for new rows of converted primary keys (trusted SQL expression).
    DEFAULT_UUID_FUNCTION: str = "uuid_generate_v4()"

    # Naming of staged legacy columns and derived tables/sequences
    LEGACY_COLUMN_SUFFIX: str = "_orig"
    FOREIGN_KEY_SUFFIX: str = "_id"
    SEQUENCE_SUFFIX: str = "_seq"

    # Database (only needed when the library opens its own connection,
    # e.g. the integration tests). Inside Alembic the host connection is used.
    DB_HOST: str | None = None
    DB_PORT: int = 5432
    DB_NAME: str | None = None
    DB_USER: str | None = None
    DB_PASSWORD: str | None = None


settings = Settings()
