import secrets

from flask import Request

from app.prospects.constants import AUTH_COOKIE_NAME, AUTH_COOKIE_VALUE, PUBLIC_PATH_PREFIXES


def is_public_path(path: str) -> bool:
    """Login-related, health and static paths are reachable without the cookie."""
    return path.startswith(PUBLIC_PATH_PREFIXES)


def is_authenticated(req: Request) -> bool:
    """True when the request carries the shared-password auth cookie."""
    return req.cookies.get(AUTH_COOKIE_NAME) == AUTH_COOKIE_VALUE


def check_master_password(candidate: object, master_password: str) -> bool:
    """Constant-time comparison against the server-held secret."""
    if not isinstance(candidate, str) or not master_password:
        return False
    return secrets.compare_digest(candidate.encode(), master_password.encode())
