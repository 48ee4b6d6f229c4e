"""
Tests for configuration validation.

Ensures environment variables are validated at startup.
"""

import pytest
from pydantic import ValidationError

from galerie.core.config import BACKEND_DIR, Settings


class TestEnvironmentValidation:
    def test_production_needs_no_extra_settings(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("JWT_SECRET", "ignored")

        settings = Settings()

        assert settings.environment == "production"
        assert not hasattr(settings, "jwt_secret")

    def test_unknown_environment_rejected(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "staging")

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "ENVIRONMENT must be one of" in str(exc_info.value)


class TestDatabaseURLValidation:
    """Test DATABASE_URL validation."""

    def test_database_url_empty(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "")

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "DATABASE_URL" in str(exc_info.value)

    def test_database_url_invalid_scheme(self, monkeypatch):
        """Only SQLite is supported."""
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://localhost/galerie")

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "must start with one of" in str(exc_info.value).lower()

    @pytest.mark.parametrize(
        "url",
        ["sqlite+aiosqlite:///./data/test.db", "sqlite:///./data/test.db", "sqlite+aiosqlite:///:memory:"],
    )
    def test_database_url_valid_sqlite(self, monkeypatch, url):
        monkeypatch.setenv("DATABASE_URL", url)

        assert Settings().database_url == url


class TestOtherSettings:
    def test_log_level_is_normalised(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert Settings().log_level == "DEBUG"

    def test_invalid_log_level_rejected(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ValidationError):
            Settings()

    def test_cors_origins_from_json(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", '["https://galerie.example.org", "http://localhost:5173"]')

        assert Settings().cors_origins == ["https://galerie.example.org", "http://localhost:5173"]

    def test_cors_origins_comma_separated(self):
        settings = Settings(cors_origins="https://a.example.org, https://b.example.org")

        assert settings.cors_origins == ["https://a.example.org", "https://b.example.org"]

    def test_defaults(self):
        settings = Settings()

        assert settings.migrations_folder == BACKEND_DIR / "migrations"
        assert settings.run_migrations_on_startup is True
        assert settings.migration_preflight_enabled is True
        assert settings.manifest_cache_ttl_seconds == 30
        assert settings.token_cache_ttl_seconds == 300
        assert settings.token_cache_max_size == 10_000
        assert settings.anonymous_download_retention_days == 7

    def test_cache_ttl_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("MANIFEST_CACHE_TTL_SECONDS", "0")

        with pytest.raises(ValidationError):
            Settings()
