"""Configuration helpers for the shot tracker."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ROUNDS_DIR = Path("data/rounds")


class Settings(BaseSettings):
    rounds_dir: Path = Field(default=DEFAULT_ROUNDS_DIR, alias="DTL_ROUNDS_DIR")
    directory_file: Optional[Path] = Field(default=None, alias="DTL_DIRECTORY_FILE")
    recent_window: int = Field(default=5, ge=1, alias="DTL_RECENT_WINDOW")
    trend_limit: int = Field(default=20, ge=1, alias="DTL_TREND_LIMIT")
    log_level: str = Field(default="WARNING", alias="DTL_LOG_LEVEL")
    user_id: str = Field(default="local", alias="DTL_USER")

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", populate_by_name=True
    )

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        return value.strip().upper() or "WARNING"

    @field_validator("directory_file", mode="before")
    @classmethod
    def _blank_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]


def reset_settings_cache() -> None:
    """Clear cached settings (primarily for tests)."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache", "DEFAULT_ROUNDS_DIR"]
