"""
Configuration Management for Khata

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every knob (where data lives, how amounts are displayed, how logs look)
is visible in one place and validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local record store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="KHATA_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: str = Field(
        default="~/.khata",
        description="Directory holding one JSON file per record collection"
    )
    key_prefix: str = Field(
        default="khatapro_",
        description="Prefix applied to every collection key"
    )

    @field_validator('key_prefix')
    @classmethod
    def validate_key_prefix(cls, v: str) -> str:
        """Prefix becomes part of a file name."""
        if any(sep in v for sep in ("/", "\\")):
            raise ValueError("key_prefix cannot contain path separators")
        return v

    @property
    def data_path(self) -> Path:
        """Get the data directory as an expanded path."""
        return Path(self.data_dir).expanduser()


class LedgerSettings(BaseSettings):
    """Ledger entry and display configuration."""

    model_config = SettingsConfigDict(
        env_prefix="KHATA_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_currency: str = Field(
        default="INR",
        min_length=3,
        max_length=3,
        description="Currency code used when the shop profile has none"
    )
    locale: str = Field(
        default="en-IN",
        description="Locale tag used for amount grouping"
    )

    # Sanity checks on entries
    max_entry_amount: float = Field(
        default=10000000.0,
        gt=0,
        description="Entries above this amount are flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=1,
        ge=0,
        description="How many days in the future an entry date can be"
    )

    recent_transactions_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Entries shown in the dashboard activity list"
    )


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="KHATA_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Minimum stdlib log level"
    )
    json_logs: bool = Field(
        default=True,
        description="Render JSON lines instead of the console format"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with a
    `<name>_error` entry describing each failure.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "ledger", "logging"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
