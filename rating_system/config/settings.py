"""Configuration management using Pydantic Settings.

Settings are constructed explicitly at startup with `load_settings()` and
handed to whatever needs them (engine factory, logger setup, services).
There is no module-level settings instance.

The configuration is organized into logical groups:
- DatabaseConfig: Database connection and pooling settings
- LoggingConfig: Logging levels and files
- ServiceConfig: Domain policy switches and paging defaults
"""

from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    """Database connection and pooling configuration."""

    url: str = "sqlite+aiosqlite:///data/rating_system.db"
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 15
    pool_timeout: int = 30
    pool_recycle: int = 3600
    pool_pre_ping: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration for console and file output."""

    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_file: Path | None = Path("logs/rating_system.log")
    serialize: bool = True


class ServiceConfig(BaseModel):
    """Behavioral switches for the orchestration layer."""

    # When enabled, update_review rejects callers that do not own the review
    enforce_review_ownership: bool = False
    default_page_size: int = Field(default=10, ge=1)


class Settings(BaseSettings):
    """Main application settings with environment variable support.

    Environment variables use the ``RATING_SYSTEM_`` prefix and nested naming
    (RATING_SYSTEM_DATABASE__URL, RATING_SYSTEM_LOGGING__CONSOLE_LEVEL).
    Keyword overrides also accept flat names (database_url, log_file). A flat
    DATABASE_URL (or RATING_SYSTEM_DATABASE_URL) applies when the nested
    database URL is not set.

    The .env file is loaded for development convenience.
    """

    model_config = SettingsConfigDict(
        env_prefix="RATING_SYSTEM_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    service: ServiceConfig = ServiceConfig()

    # Unprefixed URL shared with other tools; folded into database.url
    database_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("RATING_SYSTEM_DATABASE_URL", "DATABASE_URL"),
        exclude=True,
    )

    @model_validator(mode="before")
    @classmethod
    def transform_flat_env_vars(cls, data: Any) -> Any:
        """Map flat keys onto the nested structure.

        Handles flat names (database_url) and maps them to the nested fields
        expected by the models (database.url).
        """
        if not isinstance(data, dict):
            return data

        transformed: dict[str, dict[str, Any]] = {}

        db_mapping = {
            "database_url": "url",
            "database_echo": "echo",
            "database_pool_size": "pool_size",
            "database_max_overflow": "max_overflow",
            "database_pool_timeout": "pool_timeout",
            "database_pool_recycle": "pool_recycle",
        }
        for env_key, field_key in db_mapping.items():
            if env_key in data:
                transformed.setdefault("database", {})[field_key] = data.pop(env_key)

        log_mapping = {
            "console_log_level": "console_level",
            "file_log_level": "file_level",
            "log_file": "log_file",
        }
        for env_key, field_key in log_mapping.items():
            if env_key in data:
                transformed.setdefault("logging", {})[field_key] = data.pop(env_key)

        for section, values in transformed.items():
            existing = data.get(section)
            if isinstance(existing, dict):
                data[section] = {**existing, **values}
            else:
                data[section] = values

        return data

    @model_validator(mode="after")
    def apply_flat_database_url(self) -> "Settings":
        """Use the flat database URL unless the nested one was given."""
        if self.database_url and "url" not in self.database.model_fields_set:
            self.database = self.database.model_copy(update={"url": self.database_url})
        return self


def load_settings(**overrides: Any) -> Settings:
    """Build a settings object from the environment plus explicit overrides.

    Example:
        >>> settings = load_settings(database={"url": "sqlite+aiosqlite:///:memory:"})
        >>> settings.database.url
        'sqlite+aiosqlite:///:memory:'
    """
    return Settings(**overrides)
