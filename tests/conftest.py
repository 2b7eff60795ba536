"""
Shared fixtures: every test runs against its own in-memory SQLite database.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

import db
from app import app


@pytest.fixture(autouse=True)
def fresh_db(monkeypatch):
    engine = db.make_engine("sqlite://")
    monkeypatch.setattr(db, "engine", engine)
    db.init_db()
    yield engine
    engine.dispose()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_contact(client):
    def _make(name="Ana", email="ana@x.com", phone="123456789"):
        resp = client.post("/contacts", json={"name": name, "email": email, "phone": phone})
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]
    return _make


@pytest.fixture
def post_message(client):
    def _post(chat_id, content="hola", **extra):
        resp = client.post("/messages", json={"chatId": chat_id, "content": content, **extra})
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]
    return _post
