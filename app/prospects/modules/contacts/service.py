"""
Contacts table access.

This is the only code that talks to the `contacts` table. Every write commits
its own transaction; SQLAlchemy failures are rolled back and re-raised as
BackendError with the driver message intact so callers can surface it verbatim.

Ordering: reads are always `created_at DESC` ("most recently created first").
The dashboard filters in memory and relies on this order being stable.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from app.prospects.constants import (
    CONTACT_STATUSES,
    DEFAULT_STATUS,
    GOOD_FIT_OPTIONS,
    REFERRAL_TYPES,
    TEMPERATURES,
)
from app.prospects.modules.contacts.models import Contact
from app.prospects.modules.contacts.utils import format_phone_number

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class ContactValidationError(ValueError):
    """Payload rejected before reaching the table (missing name, bad enum, bad date)."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__(" ".join(self.errors))


class ContactNotFound(LookupError):
    pass


class BackendError(RuntimeError):
    """A table operation failed; the message is the backend's own."""


ENUM_FIELDS: dict[str, tuple[str, ...]] = {
    "status": CONTACT_STATUSES,
    "temperature": TEMPERATURES,
    "referral_type": REFERRAL_TYPES,
    "good_fit": GOOD_FIT_OPTIONS,
}
DATE_FIELDS = ("initial_touchpoint", "last_touchpoint", "next_follow_up")
TEXT_FIELDS = ("brief", "phone", "email", "referral_source", "notes")
EDITABLE_FIELDS = ("name", "proposal_sent") + tuple(ENUM_FIELDS) + DATE_FIELDS + TEXT_FIELDS
# Assigned by the table: ignored in full-form saves, rejected on inline edits
READ_ONLY_FIELDS = ("id", "created_at")


def parse_date(value: Any, field: str = "date") -> date | None:
    """Parse an ISO 8601 date (a timestamp is truncated to its date part)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if not s:
        return None
    if len(s) > 10 and s[10] in ("T", " "):
        s = s[:10]
    try:
        return date.fromisoformat(s)
    except ValueError as e:
        raise ContactValidationError(f"Invalid date for {field}: {value!r} (expected YYYY-MM-DD).") from e


def _parse_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if value in ("true", "1", 1):
        return True
    if value in ("false", "0", 0, None, ""):
        return False
    raise ContactValidationError(f"Invalid value for {field}: {value!r} (expected true or false).")


def clean_contact_payload(payload: dict, *, partial: bool = False) -> dict[str, Any]:
    """
    Validate an explicit create/update payload and convert it to column values.

    Unlike the import normalizer this is strict: bad enum members and bad dates
    are errors, not coercions. `partial=True` validates only the keys present
    (inline field edits, which may not touch `id` or `created_at`);
    otherwise `name` is required.
    """
    errors: list[str] = []
    cleaned: dict[str, Any] = {}

    for key in payload:
        if key in READ_ONLY_FIELDS:
            if partial:
                errors.append(f"Field {key} is read-only.")
        elif key not in EDITABLE_FIELDS:
            errors.append(f"Unknown field: {key}.")

    if "name" in payload or not partial:
        name = str(payload.get("name") or "").strip()
        if not name:
            errors.append("Name is required.")
        cleaned["name"] = name

    for field, allowed in ENUM_FIELDS.items():
        if field not in payload:
            continue
        raw = payload.get(field)
        if raw is None or raw == "":
            if field == "status":
                errors.append("Status is required.")
            else:
                cleaned[field] = None
            continue
        if raw not in allowed:
            errors.append(f"Invalid {field}. Must be one of: {', '.join(allowed)}")
            continue
        cleaned[field] = raw

    for field in DATE_FIELDS:
        if field not in payload:
            continue
        try:
            cleaned[field] = parse_date(payload.get(field), field)
        except ContactValidationError as e:
            errors.extend(e.errors)

    if "proposal_sent" in payload:
        try:
            cleaned["proposal_sent"] = _parse_bool(payload.get("proposal_sent"), "proposal_sent")
        except ContactValidationError as e:
            errors.extend(e.errors)

    for field in TEXT_FIELDS:
        if field not in payload:
            continue
        raw = payload.get(field)
        value = str(raw).strip() if raw is not None else ""
        if field == "phone":
            value = format_phone_number(value)
        cleaned[field] = value or None

    if errors:
        raise ContactValidationError(errors)
    return cleaned


def _to_columns(row: dict[str, Any]) -> dict[str, Any]:
    values: dict[str, Any] = {k: v for k, v in row.items() if k in EDITABLE_FIELDS}
    for field in DATE_FIELDS:
        if field in values:
            values[field] = parse_date(values[field], field)
    if not values.get("status"):
        values["status"] = DEFAULT_STATUS
    return values


def _commit(s: "Session", action: str) -> None:
    try:
        s.commit()
    except SQLAlchemyError as e:
        s.rollback()
        logger.error("contacts.%s failed: %s", action, e)
        raise BackendError(str(getattr(e, "orig", None) or e)) from e


def list_contacts(
    s: "Session",
    *,
    status: str | None = None,
    temperature: str | None = None,
    proposal_sent: bool | None = None,
    referral_type: str | None = None,
    search: str | None = None,
) -> list[Contact]:
    """Select contacts matching every given predicate, newest first."""
    try:
        query = s.query(Contact)
        if status:
            if status == DEFAULT_STATUS:
                query = query.filter(or_(Contact.status == status, Contact.status.is_(None)))
            else:
                query = query.filter(Contact.status == status)
        if temperature:
            query = query.filter(Contact.temperature == temperature)
        if proposal_sent is not None:
            query = query.filter(Contact.proposal_sent.is_(proposal_sent))
        if referral_type:
            query = query.filter(Contact.referral_type == referral_type)
        if search:
            query = query.filter(Contact.name.icontains(search, autoescape=True))
        return query.order_by(Contact.created_at.desc()).all()
    except SQLAlchemyError as e:
        s.rollback()
        logger.error("contacts.select failed: %s", e)
        raise BackendError(str(getattr(e, "orig", None) or e)) from e


def get_contact_by_id(s: "Session", contact_id: str) -> Contact | None:
    try:
        return s.query(Contact).filter(Contact.id == contact_id).one_or_none()
    except SQLAlchemyError as e:
        s.rollback()
        raise BackendError(str(getattr(e, "orig", None) or e)) from e


def insert_contacts(s: "Session", rows: list[dict[str, Any]]) -> list[Contact]:
    """
    Insert every row in a single transaction and return the created contacts.
    Either all rows are committed or none are.
    """
    contacts = [Contact(**_to_columns(row)) for row in rows]
    s.add_all(contacts)
    _commit(s, "insert")
    return contacts


def create_contact(s: "Session", payload: dict) -> Contact:
    cleaned = clean_contact_payload(payload)
    return insert_contacts(s, [cleaned])[0]


def update_contact(s: "Session", contact_id: str, changes: dict[str, Any]) -> Contact:
    """Apply already-cleaned column values to one contact."""
    contact = get_contact_by_id(s, contact_id)
    if contact is None:
        raise ContactNotFound(f"Contact {contact_id} not found.")
    for field, value in changes.items():
        if field in READ_ONLY_FIELDS:
            continue
        setattr(contact, field, value)
    _commit(s, "update")
    return contact


def delete_contact(s: "Session", contact_id: str) -> None:
    contact = get_contact_by_id(s, contact_id)
    if contact is None:
        raise ContactNotFound(f"Contact {contact_id} not found.")
    s.delete(contact)
    _commit(s, "delete")
