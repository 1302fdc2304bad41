#!/usr/bin/env python
"""
Export every contact as pretty-printed JSON, newest first.

Usage:
    python scripts/export_contacts.py                 # writes contacts-export-YYYY-MM-DD.json
    python scripts/export_contacts.py -o backup.json
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.prospects.modules.contacts.controller import DashboardController  # noqa: E402
from scripts._db_utils import database_url_from_env, script_session  # noqa: E402


def run_export(output: Path | None = None, *, database_url: str | None = None) -> Path | None:
    with script_session(database_url_from_env(database_url)) as s:
        ctrl = DashboardController(s)
        export = ctrl.export()
    if export is None:
        err = ctrl.last_error
        print(f"Export failed: {err.error if err else 'unknown error'}", file=sys.stderr)
        return None
    path = output or Path(export.filename)
    path.write_text(export.content + "\n", encoding="utf-8")
    print(f"Exported {export.count} contact(s) to {path}")
    return path


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Export all contacts to a JSON file.")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Output file (default: dated filename)")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    args = parser.parse_args(argv)
    return 0 if run_export(args.output, database_url=args.database_url) else 1


if __name__ == "__main__":
    sys.exit(main())
