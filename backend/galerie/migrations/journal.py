"""
Migration journal and migration file access.

The migrations folder holds one SQL file per schema version and a journal
(``meta/_journal.json``) listing them in order::

    {
      "version": "7",
      "dialect": "sqlite",
      "entries": [
        {"idx": 0, "version": "6", "when": 1735689600000,
         "tag": "0000_pictograms_galleries", "breakpoints": true}
      ]
    }

Statements inside a file are separated by ``--> statement-breakpoint``.
A migration is identified in the tracking table by the SHA-256 of its
file content, so the hash here is shared by the runner and the preflight
reconciler.
"""

from hashlib import sha256
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, ValidationError

from galerie.core.exceptions import MigrationError


JOURNAL_PATH = Path("meta") / "_journal.json"
STATEMENT_BREAKPOINT = "--> statement-breakpoint"


class JournalEntry(BaseModel):
    """
    One migration in the journal.

    Attributes:
        idx: Position in the journal
        version: Journal format version the entry was generated with
        when: Logical timestamp (ms); stored as ``created_at`` once applied
        tag: File stem of the migration SQL file
        breakpoints: Whether the file uses the statement breakpoint marker
    """

    idx: int
    version: str = ""
    when: int
    tag: str
    breakpoints: bool = True


class Journal(BaseModel):
    """Ordered list of journal entries."""

    entries: List[JournalEntry] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)


def read_journal(migrations_folder: Path) -> Journal:
    """
    Load the journal from ``<migrations_folder>/meta/_journal.json``.

    Raises:
        MigrationError: If the journal is missing or malformed
    """
    path = Path(migrations_folder) / JOURNAL_PATH
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise MigrationError(f"Could not read migration journal {path}: {exc}") from exc

    try:
        journal = Journal.model_validate_json(raw)
    except ValidationError as exc:
        raise MigrationError(f"Invalid migration journal {path}: {exc}") from exc

    return Journal(entries=sorted(journal.entries, key=lambda entry: entry.idx))


def migration_path(migrations_folder: Path, tag: str) -> Path:
    return Path(migrations_folder) / f"{tag}.sql"


def read_migration_sql(path: Path) -> str:
    """
    Read a migration file verbatim.

    Line endings are preserved (``newline=""``) so the hash matches the
    bytes on disk.

    Raises:
        OSError: If the file cannot be read
    """
    with open(path, encoding="utf-8", newline="") as handle:
        return handle.read()


def migration_hash(sql: str) -> str:
    """SHA-256 hex digest of a migration file's text."""
    return sha256(sql.encode("utf-8")).hexdigest()


def split_statements(sql: str) -> List[str]:
    """Split a migration file on the breakpoint marker, dropping blank chunks."""
    return [chunk.strip() for chunk in sql.split(STATEMENT_BREAKPOINT) if chunk.strip()]
