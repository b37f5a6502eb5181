"""
Configuration and settings for the day tracker backend.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_DATA_DIR = PACKAGE_DIR / "data"
DEFAULT_PUBLIC_DIR = PACKAGE_DIR / "public"


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_prefix="DAYTRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_prefix: str = Field(default="/api")

    # Listener
    host: str = Field(
        default="0.0.0.0", validation_alias=AliasChoices("HOST", "host")
    )
    port: int = Field(default=3000, validation_alias=AliasChoices("PORT", "port"))

    # Turso (libSQL) cloud database; both must be set to select it.
    turso_database_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("TURSO_DATABASE_URL", "turso_database_url"),
    )
    turso_auth_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("TURSO_AUTH_TOKEN", "turso_auth_token"),
    )

    # Any SQLAlchemy URL (e.g. sqlite:///days.db), used when Turso is unset.
    database_url: Optional[str] = Field(default=None)

    # Local JSON file storage
    data_dir: str = Field(default=str(DEFAULT_DATA_DIR))

    # Static application shell
    public_dir: str = Field(default=str(DEFAULT_PUBLIC_DIR))

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    @property
    def use_turso(self) -> bool:
        return bool(self.turso_database_url and self.turso_auth_token)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
