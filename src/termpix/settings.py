from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "TERMPIX_"


class Settings(BaseSettings):
    """Runtime overrides sourced from ``TERMPIX_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)

    config_dir: Path | None = None
    cache_dir: Path | None = None
    data_dir: Path | None = None
    terminal_width: int | None = None
    terminal_height: int | None = None


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


__all__ = ["ENV_PREFIX", "Settings", "get_settings"]
