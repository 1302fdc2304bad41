"""Tests for the maintenance scripts (init/backfill, import, export)."""
import json

from sqlalchemy import create_engine, text

from scripts.export_contacts import run_export
from scripts.import_contacts import main as import_main
from scripts.init_db import init_db


def test_init_db_backfills_legacy_null_status(tmp_path):
    db_url = f"sqlite:///{tmp_path/'legacy.db'}"
    engine = create_engine(db_url)
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE contacts (id VARCHAR(36) PRIMARY KEY, created_at DATETIME, name TEXT, status VARCHAR(32))"))
        conn.execute(text("INSERT INTO contacts (id, name, status) VALUES ('1', 'Old', NULL), ('2', 'Kept', 'Archived')"))
    engine.dispose()

    assert init_db(database_url=db_url) == 1
    assert init_db(database_url=db_url) == 0

    engine = create_engine(db_url)
    with engine.connect() as conn:
        rows = dict(conn.execute(text("SELECT name, status FROM contacts")).all())
        tables = {r[0] for r in conn.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))}
    engine.dispose()
    assert rows == {"Old": "Prospect", "Kept": "Archived"}
    assert "preferences" in tables


def test_import_then_export_cli(tmp_path, capsys):
    db_url = f"sqlite:///{tmp_path/'cli.db'}"
    src = tmp_path / "contacts.json"
    src.write_text(json.dumps([{"name": "A", "temperature": "Hot"}, {"email": "x@example.com"}]), encoding="utf-8")

    assert import_main([str(src), "--database-url", db_url]) == 0
    assert "Successfully imported 1 contact." in capsys.readouterr().out

    out = tmp_path / "backup.json"
    assert run_export(out, database_url=db_url) == out
    rows = json.loads(out.read_text(encoding="utf-8"))
    assert [(r["name"], r["temperature"], r["status"]) for r in rows] == [("A", "Hot", "Prospect")]


def test_import_cli_reports_errors(tmp_path, capsys):
    src = tmp_path / "bad.json"
    src.write_text("{oops", encoding="utf-8")
    assert import_main([str(src), "--database-url", f"sqlite:///{tmp_path/'x.db'}"]) == 1
    assert "Invalid JSON format" in capsys.readouterr().err
