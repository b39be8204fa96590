"""Application configuration driven by environment variables."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "[%(levelname)s] %(message)s"


class Settings(BaseSettings):
    """Settings read from ``NOTE_STORE_*`` environment variables or a ``.env`` file."""

    model_config = SettingsConfigDict(env_prefix="NOTE_STORE_", env_file=".env", case_sensitive=False)

    # Database; in-memory SQLite when neither is set
    database_url: str | None = None
    sqlite_path: Path | None = None
    echo_sql: bool = False

    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"

    # Treat any fetch failure during existence checks as "absent"
    lenient_exists: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def _check_database_target(self) -> "Settings":
        if self.database_url and self.sqlite_path is not None:
            raise ValueError("Provide either 'database_url' or 'sqlite_path', not both.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


def configure_logging(level: str | int = logging.INFO) -> None:
    """Apply the project's log format at ``level``."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT)


__all__ = ["LOG_FORMAT", "Settings", "configure_logging", "get_settings"]
