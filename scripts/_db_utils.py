"""Engine/session helpers for scripts run outside the Flask app."""
from __future__ import annotations

import os
from contextlib import contextmanager
from collections.abc import Generator

from sqlalchemy import Engine
from sqlalchemy.orm import Session

from app.prospects.db import build_engine, build_sessionmaker

DEFAULT_DATABASE_URL = "sqlite:///prospects.db"


def database_url_from_env(database_url: str | None = None) -> str:
    return (database_url or os.environ.get("DATABASE_URL") or DEFAULT_DATABASE_URL).strip()


def create_script_engine(db_url: str) -> Engine:
    return build_engine(db_url)


@contextmanager
def script_session(db_url: str) -> Generator[Session, None, None]:
    """One session for the whole script run; committed once at the end."""
    engine = create_script_engine(db_url)
    s = build_sessionmaker(engine)()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
        engine.dispose()
