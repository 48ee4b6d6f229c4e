"""
Journal-driven migration runner.

Applies every journal entry newer than the most recent tracking row, one
file per transaction, and records ``(sha256(file), entry.when)`` for each.
The tracking table layout matches the one written by the gallery's
previous Node backend, so existing databases migrate in place.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List

from sqlalchemy.exc import DBAPIError

from galerie.core.exceptions import MigrationError
from galerie.core.logging_config import get_logger
from galerie.migrations.journal import (
    JournalEntry,
    migration_hash,
    migration_path,
    read_journal,
    read_migration_sql,
    split_statements,
)
from galerie.migrations.preflight import error_message
from galerie.migrations.store import MigrationStore


logger = get_logger(__name__)


@dataclass(frozen=True)
class Migration:
    """A journal entry with its loaded SQL."""

    entry: JournalEntry
    sql: str
    hash: str
    statements: List[str]

    @property
    def tag(self) -> str:
        return self.entry.tag


class MigrationRunner:
    """
    Applies pending migrations atomically per file.

    Attributes:
        store: Tracking table and statement execution handle
        migrations_folder: Folder holding the journal and SQL files
    """

    def __init__(self, store: MigrationStore, migrations_folder: Path):
        self.store = store
        self.migrations_folder = Path(migrations_folder)

    def load_migrations(self) -> List[Migration]:
        """
        Read the journal and every migration file it lists.

        Raises:
            MigrationError: If the journal or a migration file cannot be read
        """
        journal = read_journal(self.migrations_folder)
        migrations = []
        for entry in journal.entries:
            path = migration_path(self.migrations_folder, entry.tag)
            try:
                sql = read_migration_sql(path)
            except OSError as exc:
                raise MigrationError(
                    f"No file {path} found for migration {entry.tag}", tag=entry.tag
                ) from exc
            migrations.append(
                Migration(
                    entry=entry,
                    sql=sql,
                    hash=migration_hash(sql),
                    statements=split_statements(sql),
                )
            )
        return migrations

    def pending(self, migrations: List[Migration]) -> List[Migration]:
        """Migrations newer than the most recent tracking row."""
        if not self.store.table_exists():
            return list(migrations)
        last = self.store.last_applied()
        if last is None:
            return list(migrations)
        return [m for m in migrations if last.created_at < m.entry.when]

    def run(self) -> List[str]:
        """
        Apply every pending migration.

        Returns:
            Tags applied by this run, in order

        Raises:
            MigrationError: If a migration cannot be read or a statement fails;
                the failing file is rolled back, earlier files stay applied
        """
        migrations = self.load_migrations()
        self.store.ensure_table()

        applied: List[str] = []
        for migration in self.pending(migrations):
            self._apply(migration)
            applied.append(migration.tag)

        if applied:
            logger.info("Applied %d migration(s): %s", len(applied), ", ".join(applied))
        else:
            logger.info("Database schema is up to date")
        return applied

    def _apply(self, migration: Migration) -> None:
        self.store.begin()
        try:
            for statement in migration.statements:
                self.store.execute(statement)
            self.store.record(migration.hash, migration.entry.when)
        except DBAPIError as exc:
            self.store.rollback()
            message = error_message(exc)
            logger.error(
                "Migration %s failed: %s",
                migration.tag,
                message,
                extra={"migration": migration.tag},
            )
            raise MigrationError(
                f"Migration {migration.tag} failed: {message}", tag=migration.tag
            ) from exc
        self.store.commit()
        logger.info("Applied migration %s", migration.tag, extra={"migration": migration.tag})
