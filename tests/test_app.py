"""
Operational endpoints and the generic error envelope.
"""

import logging
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app import app


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_ready(client):
    assert client.get("/ready").json() == {"status": "ready", "database": "connected"}


def test_ready_reports_unreachable_database(client):
    with patch("db.get_session", side_effect=OperationalError("SELECT 1", {}, Exception("down"))):
        resp = client.get("/ready")
    assert resp.status_code == 503
    assert "Service not ready" in resp.json()["error"]


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/nowhere")
    assert resp.status_code == 404
    assert "error" in resp.json()


def test_store_failure_is_500(make_contact):
    make_contact()
    with TestClient(app, raise_server_exceptions=False) as c:
        with patch("services.store.list_contacts", side_effect=RuntimeError("db gone")):
            resp = c.get("/contacts")
    assert resp.status_code == 500
    assert resp.json()["error"] == "Internal server error"


def test_unhandled_error_still_logs_request_line(make_contact, caplog):
    make_contact()
    with TestClient(app, raise_server_exceptions=False) as c:
        with patch("services.store.list_contacts", side_effect=RuntimeError("db gone")), \
             caplog.at_level(logging.ERROR, logger="app"):
            c.get("/contacts")
    lines = [r.getMessage() for r in caplog.records if r.name == "app"]
    assert any(line.startswith("Request error: GET /contacts 500 ") for line in lines)
