"""
Migration preflight reconciliation.

The migration runner applies each pending file atomically and treats any
SQL error as fatal. When DDL from a migration was run by hand (an index
created during an incident, a column added from a shell), the runner would
fail forever on "already exists".

Before the runner starts, the preflight walks the pending journal entries
and, for each one, executes its statements one by one:

- a statement failing with an "already exists" class error is skipped;
- any other failure stops the preflight, leaving the migration (and all
  later ones) for the runner, which then reports the real error;
- when every statement succeeded or was skipped, the migration hash is
  inserted into the tracking table exactly as the runner would have done.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from sqlalchemy.exc import DBAPIError

from galerie.core.exceptions import MigrationError
from galerie.core.logging_config import get_logger, preview
from galerie.migrations.journal import (
    JournalEntry,
    migration_hash,
    migration_path,
    read_journal,
    read_migration_sql,
    split_statements,
)
from galerie.migrations.store import MigrationStore


logger = get_logger(__name__)

# SQLite messages for DDL that was already applied.
ALREADY_EXISTS_PATTERNS = ("already exists", "duplicate column name")


def is_already_applied_error(message: str) -> bool:
    lowered = message.lower()
    return any(pattern in lowered for pattern in ALREADY_EXISTS_PATTERNS)


def error_message(exc: DBAPIError) -> str:
    """Driver message of a wrapped DBAPI error."""
    return str(exc.orig) if exc.orig is not None else str(exc)


@dataclass
class PreflightResult:
    """
    Outcome of a preflight pass.

    Attributes:
        applied_count: Tracking rows found before reconciliation
        journal_count: Journal entries
        reconciled: Tags registered by this pass, in order
        skipped_statements: Statements absorbed as already applied
        halted_on: Tag the pass stopped at (missing file or real error)
        halt_reason: Why the pass stopped early
    """

    applied_count: int = 0
    journal_count: int = 0
    reconciled: List[str] = field(default_factory=list)
    skipped_statements: int = 0
    halted_on: Optional[str] = None
    halt_reason: Optional[str] = None

    @property
    def auto_fixed(self) -> int:
        return len(self.reconciled)


class MigrationPreflight:
    """
    Reconciles the journal against the tracking table before migrating.

    Attributes:
        store: Tracking table and statement execution handle
        migrations_folder: Folder holding the journal and SQL files
    """

    def __init__(self, store: MigrationStore, migrations_folder: Path):
        self.store = store
        self.migrations_folder = Path(migrations_folder)

    def run(self) -> PreflightResult:
        """
        Reconcile pending migrations whose DDL is already in the database.

        Never raises for statement failures; those stop the pass and are
        left for the runner to report.

        Returns:
            PreflightResult describing what was registered
        """
        result = PreflightResult()

        try:
            journal = read_journal(self.migrations_folder)
        except MigrationError as exc:
            logger.warning("Could not read migration journal, skipping preflight: %s", exc)
            return result

        result.journal_count = len(journal)

        if not self.store.table_exists():
            # First run: the runner creates the table and applies everything.
            return result

        applied = self.store.applied_migrations()
        result.applied_count = len(applied)

        if result.applied_count >= result.journal_count:
            return result

        self._check_alignment(applied[-1].created_at if applied else None, journal.entries, result.applied_count)

        pending = journal.entries[result.applied_count:]
        logger.info(
            "%d/%d migrations applied. Checking %d pending",
            result.applied_count,
            result.journal_count,
            len(pending),
        )

        for entry in pending:
            if not self._reconcile(entry, result):
                break

        if result.auto_fixed > 0:
            logger.info(
                "Auto-applied %d migration(s) that had partially applied DDL",
                result.auto_fixed,
            )

        return result

    def _reconcile(self, entry: JournalEntry, result: PreflightResult) -> bool:
        """
        Replay one migration statement by statement.

        Returns:
            True to continue with the next pending migration, False to stop
        """
        path = migration_path(self.migrations_folder, entry.tag)
        try:
            sql = read_migration_sql(path)
        except OSError:
            logger.warning("Migration file not found: %s", path, extra={"migration": entry.tag})
            result.halted_on = entry.tag
            result.halt_reason = f"missing file {path}"
            return False

        digest = migration_hash(sql)

        for statement in split_statements(sql):
            try:
                self.store.execute(statement)
            except DBAPIError as exc:
                message = error_message(exc)
                if is_already_applied_error(message):
                    result.skipped_statements += 1
                    logger.info(
                        "Skipped (already exists): %s",
                        preview(statement),
                        extra={"migration": entry.tag},
                    )
                    continue

                logger.error(
                    "Failed: %s (%s)",
                    preview(statement),
                    message,
                    extra={"migration": entry.tag},
                )
                result.halted_on = entry.tag
                result.halt_reason = message
                return False

        self.store.record(digest, entry.when)
        result.reconciled.append(entry.tag)
        logger.info("Registered: %s (auto-applied)", entry.tag, extra={"migration": entry.tag})
        return True

    @staticmethod
    def _check_alignment(
        last_created_at: Optional[int],
        entries: List[JournalEntry],
        applied_count: int,
    ) -> None:
        # Pending entries are picked by position; warn when the newest tracked
        # timestamp is not the one of the journal entry at that position.
        if last_created_at is None or applied_count == 0:
            return
        expected = entries[applied_count - 1]
        if last_created_at != expected.when:
            logger.warning(
                "Tracking table does not line up with the journal: last applied "
                "created_at=%d, journal entry %s has when=%d",
                last_created_at,
                expected.tag,
                expected.when,
                extra={"migration": expected.tag},
            )
