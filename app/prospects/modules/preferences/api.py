from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from app.prospects.db import db_session
from app.prospects.modules.preferences.service import get_preferences, set_preferences

bp = Blueprint("preferences", __name__)


@bp.get("/preferences")
def preferences_get():
    return jsonify(get_preferences(db_session()))


@bp.put("/preferences")
def preferences_put():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Expected a JSON object of preferences"}), 400
    s = db_session()
    try:
        prefs = set_preferences(s, data)
        s.commit()
    except ValueError as e:
        s.rollback()
        return jsonify({"error": str(e)}), 400
    current_app.logger.info("Preferences updated: %s", ", ".join(sorted(data)))
    return jsonify(prefs)
