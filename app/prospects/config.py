import os
from dataclasses import dataclass

from app.prospects.constants import AUTH_COOKIE_MAX_AGE


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str

    master_password: str
    auth_cookie_max_age: int


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///prospects.db"),
        # Not stripped: the shared password is compared byte for byte.
        master_password=os.environ.get("MASTER_PASSWORD") or "",
        auth_cookie_max_age=_getenv_int("AUTH_COOKIE_MAX_AGE", AUTH_COOKIE_MAX_AGE),
    )


def load_config() -> dict:
    s = load_settings()
    is_production = s.env in ("prod", "production")
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "MASTER_PASSWORD": s.master_password,
        "AUTH_COOKIE_MAX_AGE": s.auth_cookie_max_age,
        "AUTH_COOKIE_SECURE": is_production,
        # security defaults
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": is_production,
        # pasted JSON imports stay small
        "MAX_CONTENT_LENGTH": 5 * 1024 * 1024,
    }
