"""
Tests for health probe functions.

This module tests:
- check_database() probe
- check_migrations() probe

Tests follow AAA (Arrange, Act, Assert) pattern with mocks for failures.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from galerie.core import probes
from galerie.core.probes import check_database, check_migrations


class TestDatabaseProbe:
    """Tests for database readiness probe."""

    @pytest.mark.asyncio
    async def test_check_database_success(self, async_engine):
        assert await check_database(async_engine) is True

    @pytest.mark.asyncio
    async def test_check_database_connection_error(self):
        """
        Arrange: Engine whose connect() raises
        Act: Call check_database()
        Assert: Returns False (exception caught gracefully)
        """
        # Arrange
        engine = MagicMock()
        engine.connect.side_effect = Exception("Connection failed")

        # Act
        result = await check_database(engine)

        # Assert
        assert result is False

    @pytest.mark.asyncio
    async def test_check_database_timeout(self):
        """
        Arrange: Engine whose connection hangs
        Act: Call check_database() with short timeout
        Assert: Returns False (timeout caught gracefully)
        """
        # Arrange
        async def hang(*args, **kwargs):
            await asyncio.sleep(10)

        connection = MagicMock()
        connection.__aenter__ = AsyncMock(side_effect=hang)
        connection.__aexit__ = AsyncMock(return_value=None)
        engine = MagicMock()
        engine.connect.return_value = connection

        # Act
        result = await check_database(engine, timeout_seconds=0.05)

        # Assert
        assert result is False


class TestMigrationProbe:
    @pytest.mark.asyncio
    async def test_up_to_date(self, async_engine, migrations_folder):
        # Act
        state = await check_migrations(async_engine, migrations_folder)

        # Assert
        assert state.up_to_date
        assert len(state.applied) == 9

    @pytest.mark.asyncio
    async def test_unreadable_journal_returns_none(self, async_engine, tmp_path):
        assert await check_migrations(async_engine, tmp_path / "missing") is None

    @pytest.mark.asyncio
    async def test_status_error_returns_none(self, async_engine, migrations_folder, monkeypatch):
        # Arrange
        monkeypatch.setattr(probes, "migration_status", AsyncMock(side_effect=RuntimeError("locked")))

        # Act
        state = await check_migrations(async_engine, migrations_folder)

        # Assert
        assert state is None
