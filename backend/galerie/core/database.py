"""
Database configuration and session management.

Provides SQLAlchemy async engine setup, session factory, migration startup
hook and migration status for the readiness probe.
"""

from pathlib import Path
from typing import Optional

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from galerie.core.config import settings
from galerie.core.logging_config import get_logger
from galerie.migrations import MigrationReport, MigrationStatus, migrate, status


logger = get_logger(__name__)


def _ensure_sqlite_directory(url: str) -> None:
    database = make_url(url).database
    if database and database != ":memory:" and not database.startswith("file:"):
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def get_async_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Create and configure the async SQLAlchemy engine.

    - StaticPool for in-memory databases so every session sees one database
    - check_same_thread=False for async compatibility
    - foreign_keys=ON on every connection (cascading deletes rely on it)
    - WAL journal for file databases

    Args:
        database_url: Override for settings.database_url (tests, CLI)

    Returns:
        Configured AsyncEngine instance
    """
    url = database_url or settings.database_url
    in_memory = ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:")

    engine_kwargs = {
        "echo": False,
        "connect_args": {"check_same_thread": False},
    }
    if in_memory:
        engine_kwargs["poolclass"] = StaticPool
    else:
        _ensure_sqlite_directory(url)

    engine = create_async_engine(url, **engine_kwargs)

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def get_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Global async engine instance, created once at import
engine = get_async_engine()


async def run_migrations(
    target: Optional[AsyncEngine] = None,
    migrations_folder: Optional[Path] = None,
    preflight: Optional[bool] = None,
) -> MigrationReport:
    """
    Apply pending schema migrations.

    Runs the preflight reconciler and the migration runner synchronously on
    one connection, before anything else touches the database.

    Raises:
        MigrationError: If a migration cannot be applied
    """
    target = target or engine
    folder = migrations_folder or settings.migrations_folder
    if preflight is None:
        preflight = settings.migration_preflight_enabled

    async with target.connect() as conn:
        report = await conn.run_sync(migrate, folder, preflight)

    logger.info(
        "Database ready",
        extra={
            "applied": len(report.applied),
            "auto_fixed": report.preflight.auto_fixed if report.preflight else 0,
        },
    )
    return report


async def migration_status(
    target: Optional[AsyncEngine] = None,
    migrations_folder: Optional[Path] = None,
) -> MigrationStatus:
    target = target or engine
    async with target.connect() as conn:
        return await conn.run_sync(status, migrations_folder or settings.migrations_folder)
