#!/usr/bin/env python
"""
Import contacts from a JSON file (same rules as the dashboard import).

Records without a name are skipped; unknown fields are ignored; invalid enum
values are cleared. The batch is inserted in one transaction.

Usage:
    python scripts/import_contacts.py contacts.json
    python scripts/import_contacts.py --dry-run contacts.json

Environment:
    DATABASE_URL: database connection string (defaults to sqlite:///prospects.db)
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.prospects.models import Base  # noqa: E402
from app.prospects.modules.contacts.importer import ContactImportError, import_contacts  # noqa: E402
from app.prospects.modules.contacts.service import (  # noqa: E402
    BackendError,
    ContactValidationError,
    insert_contacts,
)
from scripts._db_utils import database_url_from_env, script_session  # noqa: E402


def run_import(path: Path, *, database_url: str | None = None, dry_run: bool = False) -> int:
    text = path.read_text(encoding="utf-8-sig")
    db_url = database_url_from_env(database_url)

    if dry_run:
        result = import_contacts(text, lambda rows: rows)
        print(f"[dry-run] {result.imported} contact(s) would be imported, {result.skipped} skipped.")
        return 0

    with script_session(db_url) as s:
        Base.metadata.create_all(bind=s.get_bind())
        result = import_contacts(text, lambda rows: insert_contacts(s, rows))
    print(result.summary())
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import contacts from a JSON array file.")
    parser.add_argument("path", type=Path, help="JSON file containing an array of contacts")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    parser.add_argument("--dry-run", action="store_true", help="Validate and count without inserting")
    args = parser.parse_args(argv)

    try:
        return run_import(args.path, database_url=args.database_url, dry_run=args.dry_run)
    except (ContactImportError, ContactValidationError, BackendError, OSError) as e:
        print(f"Import failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
