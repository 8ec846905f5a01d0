from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings, overridable with COLLAB_STORE_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="COLLAB_STORE_", extra="ignore")

    title: str = "collab-store"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


def load_settings(env_file: str | Path | None = None) -> Settings:
    """Load Settings from the environment plus an optional .env file.

    The file may also be named by COLLAB_STORE_ENV_FILE; an explicitly named
    file that does not exist is an error.
    """
    explicit = env_file or os.environ.get("COLLAB_STORE_ENV_FILE")
    if explicit is None:
        return Settings()
    path = Path(explicit)
    if not path.exists():
        raise FileNotFoundError(f"settings env file not found: {path}")
    logging.getLogger(__name__).debug("loading settings from %s", path)
    return Settings(_env_file=str(path))
