"""
Dashboard controller: mediates every read/write between the UI and the
contacts table and keeps a local copy of the full collection.

Reconciliation rules:
- reload(): replace the local copy wholesale (after create, full save,
  status change, delete, import, and after any failed inline edit).
- patch_local(): patch one field of one cached row in place. Used
  optimistically by update_field() before the write is confirmed.

Operations never raise. Failures are logged and turned into an error
Notification; the operation returns None/False.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any

from app.prospects.constants import CONTACT_STATUSES, EXPORT_FILENAME_TEMPLATE, MARKDOWN_FIELDS
from app.prospects.modules.contacts import service
from app.prospects.modules.contacts.filters import FilterContext, filter_contacts, tab_counts
from app.prospects.modules.contacts.importer import (
    ContactImportError,
    ImportResult,
    import_contacts,
    import_contacts_data,
)
from app.prospects.modules.contacts.service import BackendError, ContactNotFound, ContactValidationError

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_HANDLED = (BackendError, ContactNotFound, ContactValidationError, ContactImportError)


@dataclass(frozen=True)
class Notification:
    level: str  # "success" | "error"
    title: str
    message: str
    error: Exception | None = None


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: str
    count: int


def _json_value(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return value


class DashboardController:
    def __init__(self, s: "Session", *, today: Callable[[], date] = date.today):
        self.s = s
        self.today = today
        self.contacts: list[dict[str, Any]] = []
        self.notifications: list[Notification] = []

    # -- notifications -------------------------------------------------

    def _notify(self, title: str, message: str) -> None:
        self.notifications.append(Notification("success", title, message))

    def _fail(self, title: str, message: str, error: Exception) -> None:
        logger.error("%s: %s (%s)", title, message, error)
        self.notifications.append(Notification("error", title, message, error))

    @property
    def last_error(self) -> Notification | None:
        for n in reversed(self.notifications):
            if n.level == "error":
                return n
        return None

    @property
    def last_success(self) -> Notification | None:
        for n in reversed(self.notifications):
            if n.level == "success":
                return n
        return None

    # -- reads ---------------------------------------------------------

    def _load(self) -> list[dict[str, Any]]:
        self.contacts = [c.to_dict() for c in service.list_contacts(self.s)]
        return self.contacts

    def fetch_all(self) -> list[dict[str, Any]]:
        """Replace the local copy from the table. On failure the stale copy is kept."""
        try:
            return self._load()
        except BackendError as e:
            self._fail("Error", "Failed to load contacts. Please check your database connection.", e)
            return self.contacts

    def reload(self) -> list[dict[str, Any]]:
        return self.fetch_all()

    def get(self, contact_id: str) -> dict[str, Any] | None:
        for c in self.contacts:
            if c["id"] == contact_id:
                return c
        return None

    def filtered(self, ctx: FilterContext) -> list[dict[str, Any]]:
        return filter_contacts(self.contacts, ctx)

    def counts(self) -> dict[str, int]:
        return tab_counts(self.contacts)

    # -- writes --------------------------------------------------------

    def patch_local(self, contact_id: str, field: str, value: Any) -> bool:
        row = self.get(contact_id)
        if row is None:
            return False
        row[field] = _json_value(value)
        return True

    def create(self, payload: dict) -> dict[str, Any] | None:
        try:
            contact = service.create_contact(self.s, payload)
        except ContactValidationError as e:
            self._fail("Validation Error", str(e), e)
            return None
        except BackendError as e:
            self._fail("Error", "Failed to save contact.", e)
            return None
        created = contact.to_dict()
        self._notify("Contact Created", f"{created['name']} has been added.")
        self.fetch_all()
        return created

    def save(self, contact_id: str, payload: dict) -> dict[str, Any] | None:
        """Full-form save of an existing contact."""
        try:
            cleaned = service.clean_contact_payload(payload)
            contact = service.update_contact(self.s, contact_id, cleaned)
        except ContactValidationError as e:
            self._fail("Validation Error", str(e), e)
            return None
        except (BackendError, ContactNotFound) as e:
            self._fail("Error", "Failed to save contact.", e)
            return None
        saved = contact.to_dict()
        self._notify("Contact Updated", f"{saved['name']} has been updated.")
        self.fetch_all()
        return saved

    def update_field(self, contact_id: str, field: str, value: Any) -> bool:
        """
        Inline edit of one field: patch the local copy first, then write.
        A failed write is reconciled by a full reload, never a per-field rollback.
        """
        if field == "status":
            return self.change_status(contact_id, value)
        try:
            cleaned = service.clean_contact_payload({field: value}, partial=True)
        except ContactValidationError as e:
            self._fail("Validation Error", str(e), e)
            return False

        self.patch_local(contact_id, field, cleaned[field])
        try:
            service.update_contact(self.s, contact_id, cleaned)
        except (BackendError, ContactNotFound) as e:
            self._fail("Error", "Failed to update field.", e)
            self.reload()
            return False
        self._notify("Updated", "Field updated successfully.")
        return True

    def save_markdown(self, contact_id: str, field: str, value: str) -> None:
        """
        Save callback for the markdown viewer. Unlike the other operations this
        re-raises after notifying, so the autosave keeps the edit dirty.
        """
        if field not in MARKDOWN_FIELDS:
            raise ContactValidationError(f"Unknown markdown field: {field}.")
        cleaned = service.clean_contact_payload({field: value}, partial=True)
        try:
            service.update_contact(self.s, contact_id, cleaned)
        except (BackendError, ContactNotFound) as e:
            self._fail("Error", "Failed to save content.", e)
            raise
        self.patch_local(contact_id, field, cleaned[field])
        self._notify("Saved", f"{field.capitalize()} updated successfully.")

    def change_status(self, contact_id: str, status: str) -> bool:
        if status not in CONTACT_STATUSES:
            e = ContactValidationError(f"Invalid status. Must be one of: {', '.join(CONTACT_STATUSES)}")
            self._fail("Validation Error", str(e), e)
            return False
        try:
            contact = service.update_contact(self.s, contact_id, {"status": status})
        except (BackendError, ContactNotFound) as e:
            self._fail("Error", "Failed to update contact status.", e)
            return False
        self._notify("Status Updated", f"{contact.name} has been moved to {status}.")
        self.fetch_all()
        return True

    def delete(self, contact_id: str) -> bool:
        try:
            contact = service.get_contact_by_id(self.s, contact_id)
            if contact is None:
                raise ContactNotFound(f"Contact {contact_id} not found.")
            name = contact.name
            service.delete_contact(self.s, contact_id)
        except (BackendError, ContactNotFound) as e:
            self._fail("Error", "Failed to delete contact.", e)
            return False
        self._notify("Contact Deleted", f"{name} has been permanently deleted.")
        self.fetch_all()
        return True

    # -- import / export -----------------------------------------------

    def export(self) -> ExportFile | None:
        try:
            rows = self._load()
        except BackendError as e:
            self._fail("Error", "Failed to export contacts.", e)
            return None
        filename = EXPORT_FILENAME_TEMPLATE.format(date=self.today().isoformat())
        self._notify("Export Complete", f"Exported {len(rows)} contacts.")
        return ExportFile(filename=filename, content=json.dumps(rows, indent=2), count=len(rows))

    def _insert_many(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [c.to_dict() for c in service.insert_contacts(self.s, rows)]

    def _run_import(self, run: Callable[[], ImportResult]) -> ImportResult | None:
        try:
            result = run()
        except _HANDLED as e:
            self._fail("Import Failed", str(e), e)
            return None
        self._notify("Import Complete", result.summary())
        self.fetch_all()
        return result

    def import_text(self, text: str) -> ImportResult | None:
        return self._run_import(lambda: import_contacts(text, self._insert_many))

    def import_data(self, data: Any) -> ImportResult | None:
        return self._run_import(lambda: import_contacts_data(data, self._insert_many))
