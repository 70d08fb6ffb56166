"""TinyLink settings.

Everything configurable is read once from the environment (or a .env file)
into the module-level ``settings`` object.
"""

from __future__ import annotations

from typing import Any, List, Union
from enum import Enum

from pydantic import field_validator, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class EnvironmentType(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Service settings.

    Precedence is environment variable, then .env entry, then the default below.
    Names are matched case-insensitively and unknown keys are ignored.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Deployment stage, reported by the liveness probe
    ENVIRONMENT: EnvironmentType = EnvironmentType.DEVELOPMENT

    # Identity
    APP_NAME: str = "TinyLink"
    APP_VERSION: str = "1.0"
    APP_DESCRIPTION: str = "A small URL shortening service with click tracking"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # HTTP surface
    BASE_URL: str = "http://localhost:3000"  # Used for generating short URLs
    API_PREFIX: str = "/api"
    DEBUG: bool = False

    # Comma-separated list or "*"
    CORS_ORIGINS: Union[List[str], str] = ["*"]

    # Short code policy
    CODE_LENGTH: int = 6  # Length of generated codes
    CODE_MIN_LENGTH: int = 6
    CODE_MAX_LENGTH: int = 8
    CODE_GENERATION_ATTEMPTS: int = 5  # Candidates tried before giving up

    # Storage connection string. postgres:// and sqlite:// forms are accepted
    # and rewritten to their async drivers.
    DATABASE_URL: str = "sqlite+aiosqlite:///./tinylink.db"

    # Storage client settings
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30  # Seconds to wait for a pooled connection
    DB_POOL_RECYCLE: int = 300
    DB_TIMEOUT: float = 10.0  # Driver-level statement/lock timeout in seconds
    DB_ECHO: bool = False
    DB_CREATE_TABLES: bool = True  # Create missing tables on startup

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILENAME: str = "app.log"
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "7 days"
    LOG_FORMAT: str = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {name}:{line} | {message}"
    LOG_JSON: bool = True  # Serialize file logs as JSON
    LOG_TO_FILE: bool = False
    REQUEST_LOGGING_ENABLED: bool = True

    @field_validator("CORS_ORIGINS")
    def split_origins(cls, v: Union[List[str], str]) -> List[str]:
        """Accept origins as a list or a comma-separated string."""
        if not isinstance(v, str):
            return v
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    @field_validator("DATABASE_URL")
    def validate_database_url(cls, v: Any) -> str:
        """Rewrite plain connection strings to use the async drivers."""
        return normalize_database_url(str(v))

    @field_validator("BASE_URL")
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_code_lengths(self) -> "Settings":
        """Generated codes must satisfy the same rule as custom codes."""
        if self.CODE_MIN_LENGTH < 1:
            raise ValueError("CODE_MIN_LENGTH must be at least 1")
        if not self.CODE_MIN_LENGTH <= self.CODE_LENGTH <= self.CODE_MAX_LENGTH:
            raise ValueError(
                "CODE_LENGTH must lie between CODE_MIN_LENGTH and CODE_MAX_LENGTH"
            )
        return self

    @computed_field
    def DATABASE_BACKEND(self) -> str:
        """Name of the storage backend selected by DATABASE_URL."""
        return database_backend(self.DATABASE_URL)


def normalize_database_url(url: str) -> str:
    """Map a storage connection string onto its async SQLAlchemy driver.

    Args:
        url: Connection string as found in the environment

    Returns:
        str: Connection string usable by create_async_engine
    """
    url = url.strip()
    if url.startswith("postgres://"):
        return "postgresql+asyncpg://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url[len("postgresql://"):]
    if url.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + url[len("sqlite://"):]
    return url


def database_backend(url: str) -> str:
    """Return 'postgresql' or 'sqlite' for a connection string."""
    scheme = url.split(":", 1)[0]
    backend = scheme.split("+", 1)[0]
    if backend == "postgres":
        return "postgresql"
    return backend


settings = Settings()
