from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from app.prospects.constants import CONTACT_STATUSES, GOOD_FIT_OPTIONS, REFERRAL_TYPES, TEMPERATURES

logger = logging.getLogger(__name__)

NULLABLE_TEXT_FIELDS = (
    "initial_touchpoint",
    "last_touchpoint",
    "next_follow_up",
    "brief",
    "phone",
    "email",
    "referral_source",
    "notes",
)

# Template offered to the operator before pasting an import (GET /api/import/template).
IMPORT_TEMPLATE = [
    {
        "name": "Contact Name (required)",
        "status": " | ".join(CONTACT_STATUSES),
        "email": "email@example.com",
        "phone": "555-1234",
        "temperature": " | ".join(TEMPERATURES),
        "initial_touchpoint": "2024-01-15",
        "last_touchpoint": "2024-01-20",
        "next_follow_up": "2024-02-01",
        "proposal_sent": False,
        "brief": "Markdown text...",
        "notes": "Markdown text...",
        "referral_source": "Referrer name",
        "referral_type": " | ".join(REFERRAL_TYPES),
        "good_fit": " | ".join(GOOD_FIT_OPTIONS),
    }
]


class ContactImportError(ValueError):
    """The whole import was rejected; nothing was inserted."""


@dataclass(frozen=True)
class ImportResult:
    imported: int
    skipped: int
    contacts: list[Any] = field(default_factory=list)

    def summary(self) -> str:
        msg = f"Successfully imported {self.imported} contact{'' if self.imported == 1 else 's'}."
        if self.skipped:
            verb = "was" if self.skipped == 1 else "were"
            msg += f" {self.skipped} contact{'' if self.skipped == 1 else 's'} {verb} skipped (missing name)."
        return msg


def _to_text(value: Any) -> str:
    """Text form of a loosely-typed JSON value (JSON spelling for booleans/containers)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def empty_to_none(value: Any) -> str | None:
    if value is None:
        return None
    s = _to_text(value).strip()
    return s or None


def to_boolean(value: Any) -> bool:
    if value is True or value in ("true", "1"):
        return True
    # numeric 1 counts, the boolean False/True were handled above
    return not isinstance(value, bool) and isinstance(value, (int, float)) and value == 1


def validate_enum(value: Any, allowed: tuple[str, ...]) -> str | None:
    if value is None or value == "":
        return None
    s = _to_text(value)
    return s if s in allowed else None


def normalize_contact(record: Any) -> dict[str, Any] | None:
    """
    Map one untyped record onto an insertable contact payload.

    Returns None when the record must be skipped (not a mapping, or no name
    after trimming). Unknown keys, including `id` and `created_at`, are dropped.
    An invalid `status` is omitted so the table default applies; other invalid
    enum values become None.
    """
    if not isinstance(record, Mapping):
        return None

    name = empty_to_none(record.get("name"))
    if not name:
        return None

    normalized: dict[str, Any] = {"name": name}

    status = validate_enum(record.get("status"), CONTACT_STATUSES)
    if status is not None:
        normalized["status"] = status

    for key in NULLABLE_TEXT_FIELDS:
        normalized[key] = empty_to_none(record.get(key))

    normalized["temperature"] = validate_enum(record.get("temperature"), TEMPERATURES)
    normalized["proposal_sent"] = to_boolean(record.get("proposal_sent"))
    normalized["referral_type"] = validate_enum(record.get("referral_type"), REFERRAL_TYPES)
    normalized["good_fit"] = validate_enum(record.get("good_fit"), GOOD_FIT_OPTIONS)
    return normalized


def parse_import_text(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise ContactImportError("Invalid JSON format. Please check your syntax.") from e


def import_contacts_data(data: Any, insert_many: Callable[[list[dict[str, Any]]], list[Any]]) -> ImportResult:
    """
    Normalize an already-decoded import body and insert it in one batch.

    `insert_many` is the bulk insert; it must be all-or-nothing. Its exceptions
    propagate unchanged so the backend message reaches the operator verbatim.
    """
    if not isinstance(data, list):
        raise ContactImportError(f"Expected an array of contacts. Got: {type(data).__name__}")

    rows: list[dict[str, Any]] = []
    skipped = 0
    for record in data:
        normalized = normalize_contact(record)
        if normalized is None:
            skipped += 1
        else:
            rows.append(normalized)

    if not rows:
        raise ContactImportError("No valid contacts to import. All contacts were missing required fields.")

    created = insert_many(rows)
    logger.info("Imported %s contacts (%s skipped)", len(rows), skipped)
    return ImportResult(imported=len(rows), skipped=skipped, contacts=list(created or []))


def import_contacts(text: str, insert_many: Callable[[list[dict[str, Any]]], list[Any]]) -> ImportResult:
    """Parse pasted JSON text and import it (see import_contacts_data)."""
    return import_contacts_data(parse_import_text(text), insert_many)
