#!/usr/bin/env python3
"""Migration script to add visibility and migration-provenance columns.

Databases created before debt transfer migration existed lack these
columns on the transactions table:
- is_log (BOOLEAN, default 0)
- record_type (VARCHAR, default 'transaction')
- migration_flag (BOOLEAN, default 0)
- needs_review (BOOLEAN, default 0)
- migration_status (VARCHAR, nullable)
- rejection_reason (VARCHAR, nullable)

Stored type strings written with legacy aliases (e.g. 'gelir',
'borç transferi') are rewritten to their canonical values.

Usage:
    python migrations/migrate_add_visibility_columns.py [--db-path PATH]
"""

import sys
from pathlib import Path

# Add src to path so we can import ledgerkeep modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import text, inspect
from ledgerkeep.database.factories import create_sqlite_database
from ledgerkeep.domain.entities import TransactionType

NEW_COLUMNS = (
    ("is_log", "BOOLEAN NOT NULL DEFAULT 0"),
    ("record_type", "VARCHAR NOT NULL DEFAULT 'transaction'"),
    ("migration_flag", "BOOLEAN NOT NULL DEFAULT 0"),
    ("needs_review", "BOOLEAN NOT NULL DEFAULT 0"),
    ("migration_status", "VARCHAR"),
    ("rejection_reason", "VARCHAR"),
)


def existing_columns(engine, table_name: str) -> set[str]:
    """Return the column names of a table."""
    return {col["name"] for col in inspect(engine).get_columns(table_name)}


def migrate_database(database_path: str | None = None) -> None:
    """Add missing columns and canonicalize stored type strings.

    Args:
        database_path: Path to database file. If None, uses default location.
    """
    db = create_sqlite_database(database_path=database_path)
    db.connect()

    try:
        session = db.session_factory()
        try:
            engine = session.bind
            if engine is None:
                raise RuntimeError("Could not get database engine from session")
        finally:
            session.close()

        if "transactions" not in inspect(engine).get_table_names():
            raise RuntimeError("Table 'transactions' does not exist. Please initialize the database schema first.")

        present = existing_columns(engine, "transactions")
        missing = [(name, ddl) for name, ddl in NEW_COLUMNS if name not in present]

        with engine.begin() as conn:
            for name, ddl in missing:
                conn.execute(text(f"ALTER TABLE transactions ADD COLUMN {name} {ddl}"))
                print(f"  Added column: {name}")

            rows = conn.execute(text("SELECT DISTINCT type FROM transactions")).fetchall()
            for (raw,) in rows:
                canonical = TransactionType.parse(raw).value
                if canonical != raw:
                    result = conn.execute(
                        text("UPDATE transactions SET type = :canonical WHERE type = :raw"),
                        {"canonical": canonical, "raw": raw},
                    )
                    print(f"  Rewrote {result.rowcount} '{raw}' record(s) as '{canonical}'")

        if not missing:
            print("Columns already present; type strings checked.")
        print("Migration completed successfully!")
    finally:
        db.disconnect()


def main():
    """Main entry point for migration script."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Add visibility and migration-provenance columns to transactions"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="Path to database file (overrides LEDGERKEEP_DB_PATH environment variable)",
    )
    args = parser.parse_args()

    try:
        migrate_database(database_path=args.db_path)
        return 0
    except Exception as e:
        print(f"\nMigration failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
