"""
Configuration management using pydantic-settings.
Loads settings from environment variables and .env file.
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rbac_sync.models.enums import SyncMode


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Database Settings
    database_url: str = Field(
        default="sqlite+aiosqlite:///./rbac.sqlite3",
        description="Async SQLAlchemy connection string"
    )
    database_pool_size: int = Field(default=10, description="Connection pool size")
    database_max_overflow: int = Field(default=20, description="Max overflow connections")
    database_echo: bool = Field(default=False, description="Echo SQL queries")

    # Sync Settings
    rbac_config_path: Path = Field(
        default=Path("./config"),
        description="Directory holding roles.yaml and the permissions/ documents"
    )
    rbac_sync_mode: Optional[SyncMode] = Field(
        default=None,
        description="EXPORT, IMPORT or FULL; unset disables automatic sync"
    )
    system_collection_prefix: str = Field(
        default="system_",
        description="Collections with this prefix are skipped by export unless requested"
    )
    import_concurrency: int = Field(
        default=4,
        description="Maximum number of collections reconciled at once"
    )

    # Logging Settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format (json or text)")

    @field_validator("rbac_sync_mode", mode="before")
    @classmethod
    def validate_sync_mode(cls, v):
        """Accept the mode in any case; an empty value means disabled."""
        if v is None:
            return None
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            return v.upper()
        return v

    @field_validator("import_concurrency")
    @classmethod
    def validate_import_concurrency(cls, v: int) -> int:
        """Validate import concurrency is positive."""
        if v <= 0:
            raise ValueError("IMPORT_CONCURRENCY must be positive")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ("json", "text"):
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return v.lower()

    @property
    def exports_enabled(self) -> bool:
        """Whether mutation events should be exported to documents."""
        return self.rbac_sync_mode in (SyncMode.EXPORT, SyncMode.FULL)

    @property
    def imports_on_start(self) -> bool:
        """Whether documents are imported automatically at startup."""
        return self.rbac_sync_mode in (SyncMode.IMPORT, SyncMode.FULL)

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """
    Get the cached settings instance.

    Returns:
        Settings instance loaded from environment
    """
    return Settings()


def reset_settings_cache() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
