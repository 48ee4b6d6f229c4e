"""
Tracking-table access for the migration runner and preflight reconciler.

Wraps a synchronous SQLAlchemy connection running in autocommit mode, so
every statement is its own implicit transaction unless ``begin()`` opens an
explicit one.
"""

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection

from galerie.core.logging_config import get_logger


logger = get_logger(__name__)

MIGRATIONS_TABLE = "__drizzle_migrations"


@dataclass(frozen=True)
class AppliedMigration:
    """Row of the tracking table."""

    hash: str
    created_at: int


def _to_applied(row) -> AppliedMigration:
    # Rows written by hand may lack created_at; they sort before every journal entry.
    if row.created_at is None:
        logger.warning(
            "Tracking row %s has no created_at, treating it as 0",
            row.hash,
            extra={"migration_hash": row.hash},
        )
        return AppliedMigration(hash=row.hash, created_at=0)
    return AppliedMigration(hash=row.hash, created_at=int(row.created_at))


class MigrationStore:
    """
    Database handle used by the migration code.

    Attributes:
        connection: Synchronous connection with ``isolation_level="AUTOCOMMIT"``
        table_name: Name of the tracking table
    """

    def __init__(self, connection: Connection, table_name: str = MIGRATIONS_TABLE):
        self.connection = connection
        self.table_name = table_name

    def table_exists(self) -> bool:
        row = self.connection.execute(
            text("SELECT name FROM sqlite_master WHERE type = 'table' AND name = :name"),
            {"name": self.table_name},
        ).first()
        return row is not None

    def ensure_table(self) -> None:
        self.connection.exec_driver_sql(
            f'CREATE TABLE IF NOT EXISTS "{self.table_name}" ('
            "id INTEGER PRIMARY KEY, "
            "hash text NOT NULL, "
            "created_at numeric)"
        )

    def applied_migrations(self) -> List[AppliedMigration]:
        """All tracking rows, oldest first."""
        rows = self.connection.execute(
            text(f'SELECT hash, created_at FROM "{self.table_name}" ORDER BY created_at')
        ).all()
        return [_to_applied(row) for row in rows]

    def last_applied(self) -> Optional[AppliedMigration]:
        row = self.connection.execute(
            text(
                f'SELECT hash, created_at FROM "{self.table_name}" '
                "ORDER BY created_at DESC LIMIT 1"
            )
        ).first()
        if row is None:
            return None
        return _to_applied(row)

    def record(self, migration_hash: str, created_at: int) -> None:
        self.connection.execute(
            text(f'INSERT INTO "{self.table_name}" (hash, created_at) VALUES (:hash, :created_at)'),
            {"hash": migration_hash, "created_at": created_at},
        )

    def execute(self, statement: str) -> None:
        """
        Execute one raw SQL statement.

        Raises:
            sqlalchemy.exc.DBAPIError: If the database rejects the statement
        """
        self.connection.exec_driver_sql(statement)

    def begin(self) -> None:
        self.connection.exec_driver_sql("BEGIN")

    def commit(self) -> None:
        self.connection.exec_driver_sql("COMMIT")

    def rollback(self) -> None:
        self.connection.exec_driver_sql("ROLLBACK")
