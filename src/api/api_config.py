# This file defines runtime settings for the API layer in one place.
# It exists so versioning, database, token signing, and file storage can be configured without code edits.
# The config loader reads environment variables and applies safe defaults for local development.
# It also validates the table prefix and version path before any table object is built.

from __future__ import annotations

import os
import re
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.common.settings import get_settings, load_environment_files

_IDENTIFIER_PREFIX_RE = re.compile(r"^([a-zA-Z_][a-zA-Z0-9_]*)?$")
_SUPPORTED_JWT_ALGORITHMS = {"HS256", "HS384", "HS512"}


class ApiConfig(BaseModel):
    """Typed API runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    api_name: str = "School CMS API"
    api_version_path: str = "/api/v1"
    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = "development"
    database_url: str
    table_prefix: str = ""
    jwt_secret: str = Field(min_length=16)
    jwt_algorithm: str = "HS256"
    token_expiry_hours: int = 24
    signup_enabled: bool = True
    storage_directory: str = "files"
    files_mount_path: str = "/files"
    public_base_url: str = ""
    allowed_origins: list[str] = Field(default_factory=list)
    app_version: str = "0.1.0"

    @field_validator("api_version_path")
    @classmethod
    def validate_api_version_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("api_version_path must start with '/'.")
        parts = [part for part in value.split("/") if part]
        if len(parts) < 2 or parts[-1].startswith("v") is False:
            raise ValueError("api_version_path must look like '/api/v1'.")
        return value.rstrip("/")

    @field_validator("files_mount_path")
    @classmethod
    def validate_files_mount_path(cls, value: str) -> str:
        if not value.startswith("/") or value.rstrip("/") == "":
            raise ValueError("files_mount_path must be an absolute, non-root path.")
        return value.rstrip("/")

    @field_validator("table_prefix")
    @classmethod
    def validate_table_prefix(cls, value: str) -> str:
        if not _IDENTIFIER_PREFIX_RE.match(value):
            raise ValueError(f"Unsafe SQL identifier prefix: {value!r}")
        return value

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, value: str) -> str:
        if value not in _SUPPORTED_JWT_ALGORITHMS:
            supported = ", ".join(sorted(_SUPPORTED_JWT_ALGORITHMS))
            raise ValueError(f"jwt_algorithm must be one of: {supported}")
        return value

    @field_validator("port", "token_expiry_hours")
    @classmethod
    def validate_positive_ints(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Value must be greater than 0.")
        return value

    def api_version_label(self) -> str:
        return self.api_version_path.rstrip("/").split("/")[-1]

    def public_files_url(self) -> str:
        """Base URL under which stored files are published."""

        return f"{self.public_base_url.rstrip('/')}{self.files_mount_path}"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "y", "on"}:
        return True
    if value in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be boolean-like, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_list(name: str, default: list[str] | None = None) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default or [])
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_api_config(*, load_env: bool = True) -> ApiConfig:
    """Load API configuration from environment files and the process environment."""

    if load_env:
        load_environment_files()

    config_values: dict[str, object] = {
        "api_name": os.getenv("API_NAME", "School CMS API"),
        "api_version_path": os.getenv("API_VERSION_PATH", "/api/v1"),
        "host": os.getenv("API_HOST", "0.0.0.0"),
        "port": _env_int("API_PORT", 8000),
        "environment": get_settings().ENV,
        "database_url": os.getenv("DATABASE_URL", ""),
        "table_prefix": os.getenv("API_TABLE_PREFIX", ""),
        "jwt_secret": os.getenv("API_JWT_SECRET", ""),
        "jwt_algorithm": os.getenv("API_JWT_ALGORITHM", "HS256"),
        "token_expiry_hours": _env_int("API_TOKEN_EXPIRY_HOURS", 24),
        "signup_enabled": _env_bool("API_SIGNUP_ENABLED", True),
        "storage_directory": os.getenv("API_STORAGE_DIRECTORY", "files"),
        "files_mount_path": os.getenv("API_FILES_MOUNT_PATH", "/files"),
        "public_base_url": os.getenv("API_PUBLIC_BASE_URL", ""),
        "allowed_origins": _env_list("API_ALLOWED_ORIGINS", []),
        "app_version": os.getenv("APP_VERSION", "0.1.0"),
    }
    if not config_values["database_url"]:
        raise RuntimeError("DATABASE_URL is required for API startup.")
    if not config_values["jwt_secret"]:
        raise RuntimeError("API_JWT_SECRET is required for API startup.")

    return ApiConfig.model_validate(config_values)


@lru_cache(maxsize=1)
def get_api_config() -> ApiConfig:
    """Cached accessor for API config."""

    return load_api_config()
