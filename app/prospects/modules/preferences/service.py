from __future__ import annotations

import json
from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.prospects.modules.preferences.models import Preference

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


THEMES = ("light", "dark")
DEFAULT_PREFERENCES: dict[str, Any] = {
    "theme": "dark",
    "column_visibility": {},
}


def validate_preferences_payload(payload: dict) -> list[str]:
    """Validate a preferences update. Returns list of errors."""
    errors = []
    for key in payload:
        if key not in DEFAULT_PREFERENCES:
            errors.append(f"Unknown preference: {key}.")
    if "theme" in payload and payload["theme"] not in THEMES:
        errors.append(f"Invalid theme. Must be one of: {', '.join(THEMES)}")
    if "column_visibility" in payload:
        cv = payload["column_visibility"]
        if not isinstance(cv, dict) or not all(isinstance(k, str) and isinstance(v, bool) for k, v in cv.items()):
            errors.append("column_visibility must map column names to true/false.")
    return errors


def get_preferences(s: "Session") -> dict[str, Any]:
    """Stored preferences over defaults. Unreadable stored values fall back to the default."""
    prefs = {k: (v.copy() if isinstance(v, dict) else v) for k, v in DEFAULT_PREFERENCES.items()}
    for row in s.query(Preference).filter(Preference.key.in_(list(DEFAULT_PREFERENCES))).all():
        try:
            value = json.loads(row.value_json)
        except ValueError:
            continue
        if not validate_preferences_payload({row.key: value}):
            prefs[row.key] = value
    return prefs


def set_preferences(s: "Session", payload: dict) -> dict[str, Any]:
    errors = validate_preferences_payload(payload)
    if errors:
        raise ValueError(" ".join(errors))
    now = datetime.utcnow()
    for key, value in payload.items():
        row = s.get(Preference, key)
        if row is None:
            row = Preference(key=key, value_json=json.dumps(value, sort_keys=True), updated_at=now)
            s.add(row)
        else:
            row.value_json = json.dumps(value, sort_keys=True)
            row.updated_at = now
    s.flush()
    return get_preferences(s)
