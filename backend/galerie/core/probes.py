"""
Health probe functions for dependency checks.

Each probe returns a plain result and never raises: failures are reported
as unhealthy so the readiness endpoint can answer 503 instead of 500.
"""

import asyncio
from pathlib import Path
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from galerie.core.database import migration_status
from galerie.core.logging_config import get_logger, log_with_context
from galerie.migrations import MigrationStatus


logger = get_logger(__name__)


async def check_database(engine: AsyncEngine, timeout_seconds: float = 2.0) -> bool:
    """
    Check database connectivity with a ``SELECT 1``.

    Args:
        engine: Engine to probe
        timeout_seconds: Maximum time to wait for response (default: 2.0)

    Returns:
        True if the database answered in time, False otherwise
    """
    try:
        async with asyncio.timeout(timeout_seconds):
            async with engine.connect() as conn:
                result = await conn.execute(text("SELECT 1"))
                result.scalar()
                return True
    except asyncio.TimeoutError:
        log_with_context(logger, "warning", "Database probe timed out", timeout_seconds=timeout_seconds)
        return False
    except Exception as exc:
        log_with_context(logger, "warning", "Database probe failed", error=str(exc))
        return False


async def check_migrations(
    engine: AsyncEngine,
    migrations_folder: Path,
) -> Optional[MigrationStatus]:
    """
    Compare the journal with the tracking table.

    Returns:
        MigrationStatus, or None when the status could not be read
    """
    try:
        return await migration_status(engine, migrations_folder)
    except Exception as exc:
        log_with_context(logger, "warning", "Migration status unavailable", error=str(exc))
        return None
