from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# Ensure module models are imported so Base.metadata includes their tables.
# (Kept at bottom to avoid circular imports.)
from app.prospects.modules.contacts.models import Contact  # noqa: E402,F401
from app.prospects.modules.preferences.models import Preference  # noqa: E402,F401
