"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_DB_PATH = PROJECT_ROOT / "data" / "notebook.db"


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    database_path: Path = Field(..., description="SQLite file holding notes, categories and tags")
    default_search_limit: int = Field(
        default=50, gt=0, description="Result cap applied when a search sets no limit"
    )
    suggestion_limit: int = Field(
        default=5, gt=0, description="Default number of auto-complete suggestions"
    )
    corpus_fetch_timeout: Optional[float] = Field(
        default=10.0,
        description="Seconds allowed for loading the corpus into the index (None disables)",
    )
    log_level: str = Field(default="INFO", description="Root logger level")

    @field_validator("database_path", mode="before")
    @classmethod
    def _normalize_db_path(cls, value: str | Path | None) -> Path:
        if value is None or value == "":
            raise ValueError("NOTEBOOK_DB_PATH is required")
        if isinstance(value, Path):
            path = value
        else:
            path = Path(value)
        return path.expanduser().resolve()

    @field_validator("corpus_fetch_timeout", mode="before")
    @classmethod
    def _normalize_timeout(cls, value: float | str | None) -> Optional[float]:
        if value is None or value == "":
            return None
        seconds = float(value)
        if seconds < 0:
            raise ValueError("CORPUS_FETCH_TIMEOUT must not be negative")
        return seconds or None

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    config = AppConfig(
        database_path=_read_env("NOTEBOOK_DB_PATH", str(DEFAULT_DB_PATH)),
        default_search_limit=_read_env("SEARCH_DEFAULT_LIMIT", "50"),
        suggestion_limit=_read_env("SEARCH_SUGGESTION_LIMIT", "5"),
        corpus_fetch_timeout=_read_env("CORPUS_FETCH_TIMEOUT", "10"),
        log_level=_read_env("LOG_LEVEL", "INFO"),
    )
    # Ensure the data directory exists for downstream services.
    config.database_path.parent.mkdir(parents=True, exist_ok=True)
    return config


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload.

    Service singletons hold values read from the old config, so they are dropped
    and rebuilt on next use.
    """
    from .note_repository import reset_note_repository
    from .note_service import reset_note_service
    from .search_service import reset_search_service

    get_config.cache_clear()
    reset_note_service()
    reset_search_service()
    reset_note_repository()
    return get_config()


__all__ = ["AppConfig", "get_config", "reload_config", "PROJECT_ROOT", "DEFAULT_DB_PATH"]
