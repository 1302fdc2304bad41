import logging

from flask import Flask, g, jsonify, render_template, request
from dotenv import load_dotenv

from app.prospects.config import load_config
from app.prospects.models import Base  # noqa: F401  (registers every table before blueprints import models)
from app.prospects.db import create_tables, init_db, teardown_db_session
from app.prospects.routes import bp as routes_bp
from app.prospects.auth import bp as auth_bp, require_auth
from app.prospects.modules.contacts.views import bp as contacts_bp
from app.prospects.modules.preferences.api import bp as preferences_bp


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())

    @app.template_filter("dateformat")
    def _dateformat_filter(value, format: str = "%Y-%m-%d") -> str:
        if value is None:
            return "—"
        if hasattr(value, "strftime"):
            return value.strftime(format)
        return str(value)

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")
    if not app.config.get("MASTER_PASSWORD"):
        # Not fatal: login answers with a generic server error until it is set.
        app.logger.error("MASTER_PASSWORD is not set; login is disabled.")

    init_db(app)
    if env not in ("prod", "production"):
        create_tables(app)

    app.before_request(require_auth)
    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(contacts_bp)
    app.register_blueprint(preferences_bp, url_prefix="/api")

    app.teardown_appcontext(teardown_db_session)

    def _wants_json() -> bool:
        return request.path.startswith("/api/") or request.is_json

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        if _wants_json():
            return jsonify({"error": "Not found"}), 404
        return render_template("errors/404.html"), 404

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        rid = getattr(g, "request_id", None)
        app.logger.exception("Unhandled 500 (request_id=%s)", rid)
        if _wants_json():
            return jsonify({"error": "Internal server error"}), 500
        return render_template("errors/500.html"), 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
