from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timedelta

from flask import Blueprint, current_app, flash, g, jsonify, redirect, render_template, request, url_for

from app.prospects.constants import AUTH_COOKIE_NAME, AUTH_COOKIE_VALUE
from app.prospects.security import check_master_password, is_authenticated, is_public_path

bp = Blueprint("auth", __name__)
_login_attempts: dict[str, list[datetime]] = defaultdict(list)
_LOGIN_RATE_LIMIT = 5
_LOGIN_RATE_WINDOW = 300  # seconds


def _check_rate_limit(ip: str) -> bool:
    now = datetime.utcnow()
    cutoff = now - timedelta(seconds=_LOGIN_RATE_WINDOW)
    _login_attempts[ip] = [t for t in _login_attempts[ip] if t > cutoff]
    return len(_login_attempts[ip]) >= _LOGIN_RATE_LIMIT


def _record_attempt(ip: str) -> None:
    _login_attempts[ip].append(datetime.utcnow())


def require_auth():
    """
    Gatekeeper (before_request). Assigns a per-request request_id for log
    correlation, then redirects any request without the auth cookie to /login.
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    if is_public_path(request.path) or is_authenticated(request):
        return None
    return redirect(url_for("auth.login_get"))


@bp.get("/login")
def login_get():
    if is_authenticated(request):
        return redirect(url_for("routes.index"))
    return render_template("auth/login.html")


@bp.post("/api/auth/login")
def login_post():
    wants_json = request.is_json
    data = request.get_json(silent=True) if wants_json else request.form
    password = (data or {}).get("password")
    ip = request.remote_addr or "unknown"

    def _fail(message: str, status: int):
        if wants_json:
            return jsonify({"error": message}), status
        flash(message, "danger")
        return redirect(url_for("auth.login_get"))

    master_password = current_app.config.get("MASTER_PASSWORD") or ""
    if not master_password:
        current_app.logger.error("MASTER_PASSWORD environment variable is not set")
        return _fail("Server configuration error", 500)

    if _check_rate_limit(ip):
        return _fail("Too many login attempts. Please wait 5 minutes.", 429)

    if not check_master_password(password, master_password):
        _record_attempt(ip)
        current_app.logger.warning("Login failed (ip=%s request_id=%s)", ip, getattr(g, "request_id", None))
        return _fail("Invalid password", 401)

    _login_attempts[ip].clear()
    response = jsonify({"success": True}) if wants_json else redirect(url_for("routes.index"))
    response.set_cookie(
        AUTH_COOKIE_NAME,
        AUTH_COOKIE_VALUE,
        max_age=current_app.config.get("AUTH_COOKIE_MAX_AGE"),
        httponly=True,
        secure=bool(current_app.config.get("AUTH_COOKIE_SECURE")),
        samesite="Lax",
        path="/",
    )
    return response


@bp.post("/api/auth/logout")
def logout():
    response = jsonify({"success": True}) if request.is_json else redirect(url_for("auth.login_get"))
    response.delete_cookie(AUTH_COOKIE_NAME, path="/")
    return response
