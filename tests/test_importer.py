"""Tests for the contact import normalizer and pipeline (no database)."""
import pytest

from app.prospects.modules.contacts.importer import (
    ContactImportError,
    ImportResult,
    empty_to_none,
    import_contacts,
    import_contacts_data,
    normalize_contact,
    to_boolean,
    validate_enum,
)


def _collect():
    batches = []

    def insert_many(rows):
        batches.append(rows)
        return [dict(r, id=f"id-{i}") for i, r in enumerate(rows)]

    return batches, insert_many


def test_empty_to_none():
    assert empty_to_none(None) is None
    assert empty_to_none("") is None
    assert empty_to_none("   ") is None
    assert empty_to_none("  x ") == "x"
    assert empty_to_none(5551234) == "5551234"
    assert empty_to_none(True) == "true"


@pytest.mark.parametrize(
    "value,expected",
    [(True, True), ("true", True), ("1", True), (1, True), (1.0, True),
     (False, False), ("false", False), ("yes", False), (0, False), (None, False), ("TRUE", False)],
)
def test_to_boolean(value, expected):
    assert to_boolean(value) is expected


def test_validate_enum_is_case_sensitive():
    allowed = ("Hot", "Warm")
    assert validate_enum("Hot", allowed) == "Hot"
    assert validate_enum("hot", allowed) is None
    assert validate_enum("", allowed) is None
    assert validate_enum(None, allowed) is None


def test_normalize_contact_requires_name():
    assert normalize_contact({"email": "a@example.com"}) is None
    assert normalize_contact({"name": "   "}) is None
    assert normalize_contact("not a record") is None
    assert normalize_contact(None) is None


def test_normalize_contact_maps_fields():
    out = normalize_contact({
        "id": "keep-out",
        "created_at": "2020-01-01",
        "name": "  Jane Doe ",
        "status": "Signed On",
        "temperature": "Cold",
        "proposal_sent": "1",
        "phone": "555-1234",
        "email": "",
        "referral_type": "BNI",
        "good_fit": "Maybe",
        "favorite_color": "blue",
    })
    assert out["name"] == "Jane Doe"
    assert out["status"] == "Signed On"
    assert out["temperature"] == "Cold"
    assert out["proposal_sent"] is True
    assert out["phone"] == "555-1234"
    assert out["email"] is None
    assert out["referral_type"] == "BNI"
    assert out["good_fit"] == "Maybe"
    for dropped in ("id", "created_at", "favorite_color"):
        assert dropped not in out


def test_normalize_contact_invalid_enums():
    out = normalize_contact({"name": "A", "status": "Lead", "temperature": "Boiling", "good_fit": "yes"})
    assert "status" not in out
    assert out["temperature"] is None
    assert out["good_fit"] is None
    assert out["proposal_sent"] is False


def test_import_skips_records_without_name():
    batches, insert_many = _collect()
    result = import_contacts('[{"name": "A"}, {"status": "Archived"}]', insert_many)
    assert isinstance(result, ImportResult)
    assert result.imported == 1
    assert result.skipped == 1
    assert len(batches) == 1
    assert [r["name"] for r in batches[0]] == ["A"]
    assert result.summary() == "Successfully imported 1 contact. 1 contact was skipped (missing name)."


def test_import_summary_plural():
    assert ImportResult(imported=3, skipped=0).summary() == "Successfully imported 3 contacts."
    assert ImportResult(imported=2, skipped=2).summary() == (
        "Successfully imported 2 contacts. 2 contacts were skipped (missing name)."
    )


def test_import_rejects_non_array():
    _, insert_many = _collect()
    with pytest.raises(ContactImportError) as e:
        import_contacts('{"name": "A"}', insert_many)
    assert str(e.value) == "Expected an array of contacts. Got: dict"


def test_import_rejects_malformed_json():
    batches, insert_many = _collect()
    with pytest.raises(ContactImportError) as e:
        import_contacts('[{"name": "A",]', insert_many)
    assert str(e.value) == "Invalid JSON format. Please check your syntax."
    assert batches == []


def test_import_rejects_when_nothing_valid():
    batches, insert_many = _collect()
    with pytest.raises(ContactImportError, match="No valid contacts to import"):
        import_contacts_data([{"email": "x"}, "junk", {}], insert_many)
    with pytest.raises(ContactImportError, match="No valid contacts to import"):
        import_contacts_data([], insert_many)
    assert batches == []


def test_import_propagates_insert_failure():
    def insert_many(rows):
        raise RuntimeError("connection refused")

    with pytest.raises(RuntimeError, match="connection refused"):
        import_contacts('[{"name": "A"}]', insert_many)
