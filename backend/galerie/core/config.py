"""
Centralized configuration management using Pydantic Settings.

This module provides type-safe configuration management with validation,
loading settings from environment variables and .env files.
"""

from pathlib import Path
from typing import List
import json
import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Secrets should never be committed to code - use .env file (gitignored).
    """

    project_name: str = Field(
        default="Galerie Pictogrammes API",
        description="Project name displayed in API docs"
    )
    environment: str = Field(
        default="development",
        description="Deployment environment (development, production, test)"
    )

    # Database Configuration (SQLite)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/galerie.db",
        description="Database connection URL"
    )
    migrations_folder: Path = Field(
        default=BACKEND_DIR / "migrations",
        description="Folder holding meta/_journal.json and the <tag>.sql files"
    )
    run_migrations_on_startup: bool = Field(
        default=True,
        description="Apply pending migrations when the application starts"
    )
    migration_preflight_enabled: bool = Field(
        default=True,
        description="Reconcile out-of-band schema changes before migrating"
    )

    # CORS Configuration
    cors_origins: List[str] = Field(
        default=["http://localhost:5173"],
        description="Allowed CORS origins (frontend URLs)"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    log_json: bool = Field(
        default=True,
        description="Emit JSON log lines (False for human-readable output)"
    )

    # Caches
    manifest_cache_ttl_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Lifetime of the cached pictogram manifest and galleries payloads"
    )
    token_cache_ttl_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Lifetime of a cached access-token lookup"
    )
    token_cache_max_size: int = Field(
        default=10_000,
        gt=0,
        description="Maximum number of cached access tokens"
    )

    # Downloads
    anonymous_download_retention_days: int = Field(
        default=7,
        ge=1,
        description="Days of anonymous download counters kept for rate limiting"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """
        Parse cors_origins from JSON string or list.

        Supports comma-separated origins for easier .env configuration.
        """
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "production", "test"}
        if v not in allowed:
            raise ValueError(
                f"ENVIRONMENT must be one of: {', '.join(sorted(allowed))}. Got: {v!r}"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL {v!r} is not a valid logging level")
        return level

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """
        Validate database URL format.

        Only SQLite URLs are accepted: the migration files and the
        already-exists error patterns are SQLite-specific.
        """
        if not v or v.strip() == "":
            raise ValueError("DATABASE_URL is required and cannot be empty")

        valid_schemes = ["sqlite", "sqlite+aiosqlite"]
        if not any(v.startswith(scheme + "://") for scheme in valid_schemes):
            raise ValueError(
                f"DATABASE_URL must start with one of: {', '.join(valid_schemes)}. "
                f"Got: {v[:20]}..."
            )
        return v


# Global settings instance
settings = Settings()
