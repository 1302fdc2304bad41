"""
Create tables and backfill legacy rows (idempotent).

Contacts written before `status` became NOT NULL may carry a null status;
those are set to the default ("Prospect") once here so readers never need
to special-case them.

Usage:
  python scripts/init_db.py
"""

from __future__ import annotations

import sys
from pathlib import Path

from sqlalchemy import inspect, text

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.prospects.constants import DEFAULT_STATUS  # noqa: E402
from app.prospects.models import Base  # noqa: E402
from scripts._db_utils import create_script_engine, database_url_from_env  # noqa: E402


def backfill_null_statuses(conn) -> int:
    """Set status to the default wherever it is null. Returns rows touched."""
    if not inspect(conn).has_table("contacts"):
        return 0
    result = conn.execute(
        text("UPDATE contacts SET status = :status WHERE status IS NULL"),
        {"status": DEFAULT_STATUS},
    )
    return result.rowcount or 0


def init_db(*, database_url: str | None = None) -> int:
    db_url = database_url_from_env(database_url)
    engine = create_script_engine(db_url)
    try:
        with engine.begin() as conn:
            Base.metadata.create_all(bind=conn)
            touched = backfill_null_statuses(conn)
    finally:
        engine.dispose()
    return touched


def main() -> None:
    touched = init_db()
    print("Initialized database.")
    print(f"Backfilled status on {touched} contact(s).")


if __name__ == "__main__":
    main()
