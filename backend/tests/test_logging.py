from __future__ import annotations

import json
import logging

import pytest

from ledgerly.core.logging import (
    JsonFormatter,
    LedgerContextFilter,
    bind_log_context,
    current_log_context,
    ledger_log_context,
)
from ledgerly.core.observability import normalize_path


class _Capture(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []
        self.addFilter(LedgerContextFilter())

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def named(self, message: str) -> list[logging.LogRecord]:
        return [record for record in self.records if record.msg == message]


@pytest.fixture()
def captured():
    handler = _Capture()
    loggers = [logging.getLogger(name) for name in ("request", "security", "ledgerly.services.payments")]
    levels = [logger.level for logger in loggers]
    for logger in loggers:
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    yield handler
    for logger, level in zip(loggers, levels):
        logger.removeHandler(handler)
        logger.setLevel(level)


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord("ledgerly.services.payments", logging.INFO, __file__, 1, message, None, None)


def test_json_formatter_includes_context_fields():
    record = _record("payment_registered")
    record.invoice_id = 12
    record.payment_id = 34
    record.user_id = 5

    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "payment_registered"
    assert payload["level"] == "INFO"
    assert payload["invoice_id"] == 12
    assert payload["payment_id"] == 34
    assert payload["user_id"] == 5
    assert "request_id" not in payload


def test_bound_fields_reach_records_but_explicit_extra_wins():
    with ledger_log_context(request_id="req-1"):
        bind_log_context(invoice_id=7, payment_id=None)
        assert current_log_context() == {"request_id": "req-1", "invoice_id": 7}

        record = _record("invoice_status_changed")
        record.invoice_id = 99
        LedgerContextFilter().filter(record)

    payload = json.loads(JsonFormatter().format(record))
    assert payload["request_id"] == "req-1"
    assert payload["invoice_id"] == 99
    assert "payment_id" not in payload


def test_bind_outside_a_request_keeps_nothing():
    bind_log_context(invoice_id=1)
    assert current_log_context() == {}


def test_request_line_carries_ledger_context(client, captured, user, customer, project):
    invoice = client.post(
        "/api/invoices",
        json={
            "customer_id": customer.id,
            "project_id": project.id,
            "issued_at": "2025-03-10",
            "items": [{"description": "Build", "quantity": 1, "unit_price": 1000}],
        },
    ).json()
    paid = client.post(
        f"/api/invoices/{invoice['id']}/payments",
        json={"amount": 400, "paid_at": "2025-03-20"},
        headers={"X-Request-Id": "req-pay-1"},
    ).json()

    [service_line] = captured.named("payment_registered amount=%s")
    assert service_line.request_id == "req-pay-1"
    assert service_line.payment_id == paid["payment"]["id"]

    [access_line] = [record for record in captured.named("request") if record.request_id == "req-pay-1"]
    assert access_line.status_code == 201
    assert access_line.method == "POST"
    assert access_line.user_id == user.id
    assert access_line.invoice_id == invoice["id"]
    assert access_line.invoice_number == invoice["invoice_number"]
    assert access_line.payment_id == paid["payment"]["id"]


def test_unauthorized_request_goes_to_security_log(anon_client, captured):
    response = anon_client.get("/api/invoices", headers={"X-Request-Id": "req-anon"})
    assert response.status_code == 401

    [event] = captured.named("unauthorized")
    assert event.name == "security"
    assert event.request_id == "req-anon"
    assert event.path == "/api/invoices"
    assert event.status_code == 401


def test_normalize_path_hides_ids():
    assert normalize_path("/api/invoices/42/payments") == "/api/invoices/{id}/payments"
