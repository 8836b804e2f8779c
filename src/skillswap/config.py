"""Runtime settings for skillswap, read from SKILLSWAP_* environment variables or .env."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings", "get_settings"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SKILLSWAP_", env_file=".env", extra="ignore")

    data_file: Path = Field(
        default=Path.home() / ".skillswap" / "data.json",
        description="JSON file backing the CLI record store.",
    )
    user: str | None = Field(default=None, description="Identity the CLI acts as.")
    log_level: str = "WARNING"
    api_host: str = "127.0.0.1"
    api_port: int = 8000


@lru_cache
def get_settings() -> Settings:
    return Settings()
