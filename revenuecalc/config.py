"""Application configuration."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from ``REVENUECALC_*`` environment variables."""

    api_base: str = "http://localhost:4000"
    customer_directory_path: Optional[Path] = None
    # Cosmetic progress bar; not tied to bytes transferred.
    progress_interval_ms: int = Field(default=200, ge=1)
    progress_step: int = Field(default=10, ge=1)
    progress_cap: int = Field(default=90, ge=0, lt=100)
    progress_hold_ms: int = Field(default=1000, ge=0)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="REVENUECALC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("api_base")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""

    return Settings()
