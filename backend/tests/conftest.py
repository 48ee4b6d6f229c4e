"""
Pytest configuration and shared fixtures.

This module provides:
- Environment variable setup for tests
- Synchronous engines for the migration code
- A migrated in-memory async database for repository tests
"""

import os
import sys
from pathlib import Path

import pytest


# Set test environment variables BEFORE any imports
# This must happen first to ensure settings load with test values
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_JSON"] = "false"

# Add backend directory to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

MIGRATIONS_FOLDER = backend_dir / "migrations"


@pytest.fixture
def migrations_folder() -> Path:
    """Folder with the shipped journal and SQL files."""
    return MIGRATIONS_FOLDER


@pytest.fixture
def sync_engine():
    """
    Fresh in-memory SQLite database for synchronous migration tests.

    StaticPool keeps one connection so every ``connect()`` sees the same
    database.
    """
    from sqlalchemy import create_engine
    from sqlalchemy.pool import StaticPool

    engine = create_engine("sqlite://", poolclass=StaticPool)
    yield engine
    engine.dispose()


@pytest.fixture
def write_migrations(tmp_path):
    """
    Build a migrations folder from ``(tag, when, sql)`` tuples.

    Example:
        folder = write_migrations([
            ("0000_init", 1000, "CREATE TABLE a (id integer);"),
        ])
    """
    import json

    def _write(migrations, journal_extra=None):
        folder = tmp_path / "migrations"
        (folder / "meta").mkdir(parents=True, exist_ok=True)
        entries = []
        for idx, (tag, when, sql) in enumerate(migrations):
            if sql is not None:
                with open(folder / f"{tag}.sql", "w", encoding="utf-8", newline="") as handle:
                    handle.write(sql)
            entries.append(
                {"idx": idx, "version": "6", "when": when, "tag": tag, "breakpoints": True}
            )
        journal = {"version": "7", "dialect": "sqlite", "entries": entries}
        journal.update(journal_extra or {})
        (folder / "meta" / "_journal.json").write_text(json.dumps(journal), encoding="utf-8")
        return folder

    return _write


@pytest.fixture
async def async_engine():
    """In-memory aiosqlite engine with every shipped migration applied."""
    from galerie.core.database import get_async_engine, run_migrations

    engine = get_async_engine("sqlite+aiosqlite:///:memory:")
    await run_migrations(engine, MIGRATIONS_FOLDER)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_maker(async_engine):
    from galerie.core.database import get_session_maker

    return get_session_maker(async_engine)


@pytest.fixture
async def async_session(session_maker):
    """
    Provide an async database session on the migrated database.

    Uncommitted work is rolled back when the test ends.
    """
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def seeded_session(async_session):
    """
    Session with two users, two pictograms and one gallery.

    Users: "octocat", "hubot". Pictograms: "velo", "train". Gallery:
    "transports" holding "velo".
    """
    from galerie.repositories.galleries import GalleryRepository
    from galerie.repositories.pictograms import PictogramRepository
    from galerie.repositories.users import UserRepository

    users = UserRepository(async_session)
    await users.upsert_user("octocat", github_name="The Octocat")
    await users.upsert_user("hubot", github_name="Hubot")

    galleries = GalleryRepository(async_session)
    await galleries.create_gallery("transports", "Transports", color="#000091")

    pictograms = PictogramRepository(async_session)
    await pictograms.insert_pictogram(
        id="velo",
        name="Vélo",
        filename="velo.svg",
        url="https://cdn.example.org/velo.svg",
        size=1024,
        last_modified="2026-01-01T00:00:00Z",
        tags=["transport", "mobilité"],
        gallery_ids=["transports"],
    )
    await pictograms.insert_pictogram(
        id="train",
        name="Train",
        filename="train.svg",
        url="https://cdn.example.org/train.svg",
        size=2048,
        last_modified="2026-01-02T00:00:00Z",
    )
    await async_session.flush()
    return async_session
