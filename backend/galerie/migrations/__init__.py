"""
Schema migrations.

``migrate()`` is the entry point used at startup and by the CLI: it runs
the preflight reconciler, then the runner, on a single autocommit
connection.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from sqlalchemy.engine import Connection

from galerie.migrations.preflight import MigrationPreflight, PreflightResult
from galerie.migrations.runner import MigrationRunner
from galerie.migrations.store import MIGRATIONS_TABLE, MigrationStore


@dataclass
class MigrationReport:
    """Result of ``migrate()``."""

    preflight: Optional[PreflightResult] = None
    applied: List[str] = field(default_factory=list)


@dataclass
class MigrationStatus:
    """Applied and pending journal tags."""

    applied: List[str] = field(default_factory=list)
    pending: List[str] = field(default_factory=list)

    @property
    def up_to_date(self) -> bool:
        return not self.pending


def _autocommit(connection: Connection) -> Connection:
    if connection.get_execution_options().get("isolation_level") != "AUTOCOMMIT":
        connection = connection.execution_options(isolation_level="AUTOCOMMIT")
    return connection


def run_preflight(connection: Connection, migrations_folder: Path) -> PreflightResult:
    """Run only the preflight reconciler."""
    store = MigrationStore(_autocommit(connection))
    return MigrationPreflight(store, migrations_folder).run()


def migrate(
    connection: Connection,
    migrations_folder: Path,
    preflight: bool = True,
) -> MigrationReport:
    """
    Bring the schema up to date.

    Args:
        connection: Fresh synchronous connection (no transaction begun)
        migrations_folder: Folder holding the journal and SQL files
        preflight: Reconcile out-of-band DDL before running migrations

    Returns:
        MigrationReport with the preflight result and the applied tags

    Raises:
        MigrationError: If the runner cannot apply a migration
    """
    store = MigrationStore(_autocommit(connection))
    report = MigrationReport()
    if preflight:
        report.preflight = MigrationPreflight(store, migrations_folder).run()
    report.applied = MigrationRunner(store, migrations_folder).run()
    return report


def status(connection: Connection, migrations_folder: Path) -> MigrationStatus:
    """
    Report which journal entries are applied.

    Raises:
        MigrationError: If the journal or a migration file cannot be read
    """
    runner = MigrationRunner(MigrationStore(connection), migrations_folder)
    migrations = runner.load_migrations()
    pending = {m.tag for m in runner.pending(migrations)}
    return MigrationStatus(
        applied=[m.tag for m in migrations if m.tag not in pending],
        pending=[m.tag for m in migrations if m.tag in pending],
    )


__all__ = [
    "MIGRATIONS_TABLE",
    "MigrationPreflight",
    "MigrationReport",
    "MigrationRunner",
    "MigrationStatus",
    "MigrationStore",
    "PreflightResult",
    "migrate",
    "run_preflight",
    "status",
]
