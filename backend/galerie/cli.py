"""
Command-line entry point for schema migrations.

Usage:
    galerie-migrate upgrade                 # preflight + runner
    galerie-migrate upgrade --no-preflight
    galerie-migrate status
    galerie-migrate preflight               # reconcile only

Exit status is 1 when a migration fails or a migration is pending
(``status``), 0 otherwise.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url

from galerie.core.config import settings
from galerie.core.exceptions import MigrationError
from galerie.core.logging_config import get_logger, setup_logging
from galerie.migrations import migrate, run_preflight, status


logger = get_logger(__name__)


def sync_engine(database_url: str) -> Engine:
    """Synchronous engine on the same SQLite file as ``database_url``."""
    url = make_url(database_url).set(drivername="sqlite")
    return create_engine(url)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="galerie-migrate",
        description="Apply and inspect database schema migrations",
    )
    parser.add_argument(
        "--database-url",
        default=settings.database_url,
        help="Database URL (default: DATABASE_URL setting)",
    )
    parser.add_argument(
        "--migrations-folder",
        type=Path,
        default=settings.migrations_folder,
        help="Folder holding meta/_journal.json and the SQL files",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Log level (default: LOG_LEVEL setting)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    upgrade = subparsers.add_parser("upgrade", help="Apply pending migrations")
    upgrade.add_argument(
        "--no-preflight",
        action="store_true",
        help="Skip reconciliation of out-of-band schema changes",
    )
    subparsers.add_parser("status", help="List applied and pending migrations")
    subparsers.add_parser("preflight", help="Only reconcile out-of-band schema changes")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level.upper(), json_format=False)

    engine = sync_engine(args.database_url)
    try:
        with engine.connect() as conn:
            if args.command == "upgrade":
                report = migrate(conn, args.migrations_folder, preflight=not args.no_preflight)
                print(f"Applied {len(report.applied)} migration(s)")
                for tag in report.applied:
                    print(f"  {tag}")
                if report.preflight and report.preflight.auto_fixed:
                    print(f"Registered {report.preflight.auto_fixed} out-of-band migration(s)")
                return 0

            if args.command == "preflight":
                result = run_preflight(conn, args.migrations_folder)
                print(
                    f"{result.applied_count}/{result.journal_count} tracked, "
                    f"{result.auto_fixed} registered"
                )
                if result.halted_on:
                    print(f"Stopped at {result.halted_on}: {result.halt_reason}")
                return 0

            report = status(conn, args.migrations_folder)
            for tag in report.applied:
                print(f"[x] {tag}")
            for tag in report.pending:
                print(f"[ ] {tag}")
            return 0 if report.up_to_date else 1

    except MigrationError as exc:
        logger.error(str(exc), extra={"migration": exc.tag})
        print(f"Migration failed: {exc}", file=sys.stderr)
        return 1
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
