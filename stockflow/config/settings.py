"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "inventory.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms
    acquire_timeout: float | None = None  # seconds to wait for a free connection

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class LedgerSettings(BaseSettings):
    """Movement processing configuration."""

    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    # Retry settings for lock contention / busy database
    max_retries: int = 3
    retry_delay: float = 0.05
    retry_multiplier: float = 2.0


class SyncSettings(BaseSettings):
    """Outbox replication configuration."""

    model_config = SettingsConfigDict(env_prefix="SYNC_")

    provider: Literal["http", "file"] = "file"
    provider_name: str = "default"

    # Batching
    batch_size: int = 100
    max_batches: int | None = None
    push_timeout: float = 10.0  # seconds
    collapse_snapshots: bool = False

    # Local snapshot before a run
    backup_before_sync: bool = False
    backup_dir: Path = Path("data/backups")
    backup_keep: int = 5

    # Periodic mode
    interval_seconds: int = 300

    # HTTP provider
    http_base_url: str = "http://localhost:8080/sync"
    http_token: str | None = None

    # File export provider
    export_path: Path = Path("data/export/outbox.jsonl")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Stockflow"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    # auto: console renderer in development, JSON elsewhere
    log_format: Literal["auto", "console", "json"] = "auto"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
