"""
Application settings loaded from environment variables.
It centralizes process-level concerns such as project naming, environment selection, and log level.
Environment files are layered: `.env` first, then `.env.<ENV>` for the active deployment environment.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Final

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

KNOWN_ENVIRONMENTS: Final[tuple[str, ...]] = ("development", "staging", "production", "test")
DEFAULT_ENVIRONMENT: Final[str] = "development"


class Settings(BaseModel):
    """Typed runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    PROJECT_NAME: str = "school-cms-api"
    ENV: str = DEFAULT_ENVIRONMENT
    LOG_LEVEL: str = "INFO"

    @field_validator("ENV")
    @classmethod
    def validate_env(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in KNOWN_ENVIRONMENTS:
            supported = ", ".join(KNOWN_ENVIRONMENTS)
            raise ValueError(f"ENV must be one of: {supported}")
        return normalized


def load_environment_files() -> None:
    """Load `.env` and then the file matching the active `ENV`, without overriding real env vars."""

    load_dotenv()
    environment = os.getenv("ENV", DEFAULT_ENVIRONMENT).strip().lower() or DEFAULT_ENVIRONMENT
    load_dotenv(f".env.{environment}")


def load_settings(*, load_env: bool = True) -> Settings:
    """Load and validate settings from environment files and the process environment."""

    if load_env:
        load_environment_files()

    values = {key: os.environ[key] for key in Settings.model_fields if os.getenv(key)}
    try:
        return Settings.model_validate(values)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached accessor for application settings."""

    return load_settings()
