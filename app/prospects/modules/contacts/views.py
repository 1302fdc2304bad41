from __future__ import annotations

import hashlib
import io

from flask import Blueprint, abort, current_app, flash, jsonify, redirect, render_template, request, send_file, url_for

from app.prospects.constants import MARKDOWN_FIELDS
from app.prospects.db import db_session
from app.prospects.modules.contacts.autosave import MarkdownAutosave
from app.prospects.modules.contacts.controller import DashboardController, Notification
from app.prospects.modules.contacts.importer import IMPORT_TEMPLATE, ContactImportError
from app.prospects.modules.contacts.service import (
    BackendError,
    ContactNotFound,
    ContactValidationError,
    get_contact_by_id,
    list_contacts,
)
from app.prospects.modules.contacts.utils import render_markdown

bp = Blueprint("contacts", __name__)


def _controller() -> DashboardController:
    return DashboardController(db_session())


def _error_response(n: Notification | None):
    if n is None:
        return jsonify({"error": "Internal server error"}), 500
    err = n.error
    if isinstance(err, ContactNotFound):
        return jsonify({"error": str(err)}), 404
    if isinstance(err, (ContactValidationError, ContactImportError)):
        return jsonify({"error": str(err)}), 400
    # Backend failures carry the backend's own message.
    return jsonify({"error": str(err) if err else n.message}), 500


def _json_object():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None
    return data


def delete_confirm_token(contact_id: str) -> str:
    secret = current_app.config.get("SECRET_KEY") or ""
    return hashlib.sha256(f"{secret}:{contact_id}:DELETE".encode()).hexdigest()[:8]


@bp.get("/api/contacts")
def contacts_list():
    args = request.args
    proposal = (args.get("proposal_sent") or "").strip().lower()
    proposal_sent = None if proposal in ("", "all") else proposal in ("true", "yes", "1")
    try:
        contacts = list_contacts(
            db_session(),
            status=(args.get("status") or "").strip() or None,
            temperature=(args.get("temperature") or "").strip() or None,
            proposal_sent=proposal_sent,
            referral_type=(args.get("referral_type") or "").strip() or None,
            search=(args.get("search") or "").strip() or None,
        )
    except BackendError as e:
        current_app.logger.error("Error fetching contacts: %s", e)
        return jsonify({"error": str(e)}), 500
    return jsonify([c.to_dict() for c in contacts])


@bp.post("/api/contacts")
def contacts_create():
    data = _json_object()
    if data is None:
        return jsonify({"error": "Expected a JSON object"}), 400
    ctrl = _controller()
    created = ctrl.create(data)
    if created is None:
        return _error_response(ctrl.last_error)
    return jsonify(created), 201


@bp.get("/api/contacts/<contact_id>")
def contacts_detail(contact_id: str):
    try:
        contact = get_contact_by_id(db_session(), contact_id)
    except BackendError as e:
        return jsonify({"error": str(e)}), 500
    if contact is None:
        return jsonify({"error": "Contact not found"}), 404
    return jsonify(contact.to_dict())


@bp.put("/api/contacts/<contact_id>")
def contacts_save(contact_id: str):
    """Full-form save."""
    data = _json_object()
    if data is None:
        return jsonify({"error": "Expected a JSON object"}), 400
    ctrl = _controller()
    saved = ctrl.save(contact_id, data)
    if saved is None:
        return _error_response(ctrl.last_error)
    return jsonify(saved)


@bp.patch("/api/contacts/<contact_id>")
def contacts_update_field(contact_id: str):
    """Inline edit: exactly one field per request."""
    data = _json_object()
    if data is None or len(data) != 1:
        return jsonify({"error": "Expected a JSON object with exactly one field"}), 400
    (field, value), = data.items()
    ctrl = _controller()
    if not ctrl.update_field(contact_id, field, value):
        return _error_response(ctrl.last_error)
    contact = get_contact_by_id(ctrl.s, contact_id)
    return jsonify(contact.to_dict() if contact else {"id": contact_id})


@bp.put("/api/contacts/<contact_id>/status")
def contacts_change_status(contact_id: str):
    data = _json_object() or {}
    ctrl = _controller()
    if not ctrl.change_status(contact_id, data.get("status")):
        return _error_response(ctrl.last_error)
    n = ctrl.last_success
    return jsonify({"success": True, "message": n.message if n else ""})


@bp.delete("/api/contacts/<contact_id>")
def contacts_delete(contact_id: str):
    """Permanent delete. Two steps: the first call returns a confirm_token to send back."""
    data = request.get_json(silent=True) or {}
    confirm_token = request.args.get("confirm_token") or (data.get("confirm_token") if isinstance(data, dict) else None)

    s = db_session()
    try:
        contact = get_contact_by_id(s, contact_id)
    except BackendError as e:
        return jsonify({"error": str(e)}), 500
    if contact is None:
        return jsonify({"error": "Contact not found"}), 404

    expected_token = delete_confirm_token(contact_id)
    if confirm_token != expected_token:
        return jsonify({
            "error": "Confirmation required",
            "confirm_token": expected_token,
            "message": f"This permanently deletes {contact.name}. To confirm, send confirm_token='{expected_token}'.",
        }), 400

    ctrl = DashboardController(s)
    if not ctrl.delete(contact_id):
        return _error_response(ctrl.last_error)
    current_app.logger.info("Contact deleted: id=%s", contact_id)
    return jsonify({"success": True, "deleted": contact_id})


@bp.get("/api/export")
def contacts_export():
    ctrl = _controller()
    export = ctrl.export()
    if export is None:
        return _error_response(ctrl.last_error)
    return send_file(
        io.BytesIO(export.content.encode("utf-8")),
        mimetype="application/json",
        as_attachment=True,
        download_name=export.filename,
        max_age=0,
    )


@bp.post("/api/import")
def contacts_import():
    ctrl = _controller()
    result = ctrl.import_text(request.get_data(as_text=True))
    if result is None:
        return _error_response(ctrl.last_error)
    return jsonify({
        "success": True,
        "imported": result.imported,
        "skipped": result.skipped,
        "contacts": result.contacts,
        "message": result.summary(),
    })


@bp.get("/api/import/template")
def contacts_import_template():
    return jsonify(IMPORT_TEMPLATE)


def _render_markdown_viewer(contact, field: str, value: str, *, editing: bool):
    return render_template(
        "contacts/markdown.html",
        contact=contact,
        field=field,
        title=field.capitalize(),
        value=value,
        html=render_markdown(value),
        editing=editing,
    )


@bp.get("/contacts/<contact_id>/<field>")
def contacts_markdown(contact_id: str, field: str):
    if field not in MARKDOWN_FIELDS:
        abort(404)
    contact = get_contact_by_id(db_session(), contact_id)
    if contact is None:
        abort(404)
    editing = request.args.get("edit") in ("1", "true")
    return _render_markdown_viewer(contact, field, getattr(contact, field) or "", editing=editing)


@bp.post("/contacts/<contact_id>/<field>")
def contacts_markdown_save(contact_id: str, field: str):
    """
    Save from the markdown viewer. Each submit is one editing session:
    the new text goes through the autosave and is flushed immediately
    (action=close also leaves the viewer).
    """
    if field not in MARKDOWN_FIELDS:
        abort(404)
    s = db_session()
    contact = get_contact_by_id(s, contact_id)
    if contact is None:
        abort(404)

    wants_json = request.is_json
    data = request.get_json(silent=True) if wants_json else request.form
    if not isinstance(data, dict):
        data = {}
    value = data.get("value")
    if not isinstance(value, str):
        if wants_json:
            return jsonify({"error": "Expected a JSON object with a string value"}), 400
        abort(400)
    closing = data.get("action") == "close"

    ctrl = DashboardController(s)
    editor = MarkdownAutosave(
        lambda text: ctrl.save_markdown(contact_id, field, text),
        getattr(contact, field),
    )
    editor.begin_edit()
    editor.change(value)
    ok = editor.close() if closing else editor.blur()

    if not ok:
        if wants_json:
            return _error_response(ctrl.last_error)
        err = ctrl.last_error
        flash(err.message if err else "Failed to save content.", "danger")
        # keep the unsaved draft in the editor
        return _render_markdown_viewer(contact, field, editor.value, editing=True)

    n = ctrl.last_success
    if wants_json:
        return jsonify({
            "success": True,
            "field": field,
            "value": editor.saved_value,
            "html": render_markdown(editor.saved_value),
            "message": n.message if n else "",
        })
    if n:
        flash(n.message, "success")
    if closing:
        return redirect(url_for("routes.index"))
    return redirect(url_for("contacts.contacts_markdown", contact_id=contact_id, field=field))
