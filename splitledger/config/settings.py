"""
Configuration Management for Split Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The engine itself takes no configuration; only the host shell
(storage locations, share links, backup cadence) is configurable.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local token storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPLITLEDGER_STORAGE_",
        extra="ignore"
    )

    ledger_path: Path = Field(
        default=Path(".splitledger/ledger.token"),
        description="File holding the latest saved ledger token"
    )
    backup_path: Path = Field(
        default=Path(".splitledger/ledger-backup.token"),
        description="File holding the periodic backup token"
    )


class SharingSettings(BaseSettings):
    """Share link configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPLITLEDGER_SHARE_",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:8501/",
        description="Page the share link points at"
    )
    query_param: str = Field(
        default="data",
        min_length=1,
        description="Query parameter carrying the ledger token"
    )

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Share links must be absolute http(s) URLs."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Share base URL must start with http:// or https://: {v}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    currency_symbol: str = Field(
        default="₹",
        max_length=5,
        description="Symbol shown in front of amounts"
    )
    backup_interval_seconds: float = Field(
        default=30.0,
        gt=0,
        description="How often the host writes a backup token"
    )


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
    def sharing(self) -> SharingSettings:
        return SharingSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
