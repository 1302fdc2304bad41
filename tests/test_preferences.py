"""Tests for persisted UI preferences."""
import pytest

from app.prospects import auth, create_app
from app.prospects.models import Base


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("MASTER_PASSWORD", "pw")
    auth._login_attempts.clear()

    app = create_app()
    Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])

    c = app.test_client()
    c.post("/api/auth/login", json={"password": "pw"})
    return c


def test_defaults(client):
    r = client.get("/api/preferences")
    assert r.status_code == 200
    assert r.json == {"theme": "dark", "column_visibility": {}}


def test_update_persists(client):
    r = client.put("/api/preferences", json={"theme": "light"})
    assert r.status_code == 200
    assert r.json["theme"] == "light"

    r = client.put("/api/preferences", json={"column_visibility": {"email": False, "phone": True}})
    assert r.status_code == 200

    r = client.get("/api/preferences")
    assert r.json == {"theme": "light", "column_visibility": {"email": False, "phone": True}}

    r = client.get("/")
    assert r.status_code == 200
    assert b'class="light"' in r.data
    assert b"<th>Email</th>" not in r.data
    assert b"<th>Phone</th>" in r.data


def test_invalid_preferences_rejected(client):
    r = client.put("/api/preferences", json={"theme": "neon"})
    assert r.status_code == 400

    r = client.put("/api/preferences", json={"column_visibility": {"email": "no"}})
    assert r.status_code == 400

    r = client.put("/api/preferences", json={"font": "serif"})
    assert r.status_code == 400

    r = client.put("/api/preferences", json=["theme"])
    assert r.status_code == 400

    assert client.get("/api/preferences").json["theme"] == "dark"
