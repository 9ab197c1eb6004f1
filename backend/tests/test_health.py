from __future__ import annotations

import pytest

from ledgerly.core.settings import Settings
from ledgerly.main import validate_production_settings


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}


def test_readyz_without_migrations(client):
    response = client.get("/readyz")
    assert response.status_code == 503
    assert response.json()["detail"] == "Migrations not applied"


def test_request_id_is_echoed(client):
    response = client.get("/healthz", headers={"X-Request-Id": "req-123"})
    assert response.headers["x-request-id"] == "req-123"


def test_metrics_exposes_counters(client, customer, project):
    invoice = client.post(
        "/api/invoices",
        json={"customer_id": customer.id, "project_id": project.id, "issued_at": "2025-03-01", "items": []},
    ).json()
    client.post(f"/api/invoices/{invoice['id']}/payments", json={"amount": 5, "paid_at": "2025-03-02"})

    body = client.get("/metrics").text
    assert "http_server_requests_total" in body
    assert "ledgerly_payments_registered_total" in body
    assert 'ledgerly_invoice_status_changes_total{from_status="DRAFT",to_status="PAID"}' in body


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_production_rejects_default_secret():
    config = Settings(ENV="production", jwt_secret="change_me", allow_origins=["https://app.ledgerly.com"])
    with pytest.raises(RuntimeError):
        validate_production_settings(config)


def test_production_rejects_wildcard_origin():
    config = Settings(ENV="production", jwt_secret="s3cret", allow_origins=["*"])
    with pytest.raises(RuntimeError):
        validate_production_settings(config)
