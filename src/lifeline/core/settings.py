"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the repository root: .env, .env.local, .env.dev/.env.test/.env.prod
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `LIFELINE_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    data_file : Path
        JSON file backing the event store; maps from `LIFELINE_DATA_FILE`.
    seed_samples : bool
        Seed the two sample events on first run; maps from `LIFELINE_SEED_SAMPLES`.
    """

    environment: EnvName = Field(default="dev", alias="LIFELINE_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    data_file: Path = Field(
        default=Path("artifacts") / "lifeline" / "events.json", alias="LIFELINE_DATA_FILE"
    )
    seed_samples: bool = Field(default=True, alias="LIFELINE_SEED_SAMPLES")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    os.environ.setdefault("LIFELINE_ENV", "dev")
    return Settings()


# Export a ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "lifeline") -> logging.Logger:
    """Return a process-global logger configured to the current log level.

    The level is read through `load_settings()` so that a cache clear in tests
    is reflected by loggers created afterwards.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
