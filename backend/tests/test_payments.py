from __future__ import annotations

from decimal import Decimal

import pytest

from ledgerly.core.errors import NotFoundError
from ledgerly.models.audit import ActivityLog
from ledgerly.models.enums import InvoiceStatus
from ledgerly.models.invoice import Invoice
from ledgerly.schemas.invoice import PaymentCreate
from ledgerly.services import payments as payment_service
from ledgerly.services.activity import PAYMENT_REGISTERED
from ledgerly.services.invoices import recompute_all_invoices


@pytest.fixture()
def invoice_id(client, customer, project):
    response = client.post(
        "/api/invoices",
        json={
            "customer_id": customer.id,
            "project_id": project.id,
            "issued_at": "2025-03-10",
            "items": [{"description": "Build", "quantity": 1, "unit_price": 100000}],
        },
    )
    assert response.status_code == 201
    return response.json()["id"]


def _pay(client, invoice_id, amount, paid_at="2025-03-20"):
    response = client.post(
        f"/api/invoices/{invoice_id}/payments",
        json={"amount": amount, "paid_at": paid_at, "payment_method": "BANK_TRANSFER"},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_partial_payments_then_paid(client, invoice_id):
    first = _pay(client, invoice_id, 30000)
    assert Decimal(first["paid_amount"]) == Decimal("30000")
    assert first["invoice_status"] == "SENT"

    second = _pay(client, invoice_id, 40000)
    assert Decimal(second["paid_amount"]) == Decimal("70000")
    assert second["invoice_status"] == "SENT"

    third = _pay(client, invoice_id, 30000)
    assert Decimal(third["paid_amount"]) == Decimal("100000")
    assert third["invoice_status"] == "PAID"

    detail = client.get(f"/api/invoices/{invoice_id}").json()
    assert detail["status"] == "PAID"
    assert Decimal(detail["balance_due"]) == Decimal("0")
    assert len(detail["payments"]) == 3


def test_overpayment_is_kept(client, invoice_id):
    body = _pay(client, invoice_id, 150000)
    assert body["invoice_status"] == "PAID"
    assert Decimal(body["paid_amount"]) == Decimal("150000")

    detail = client.get(f"/api/invoices/{invoice_id}").json()
    assert Decimal(detail["balance_due"]) == Decimal("-50000")


def test_deleting_only_payment_reverts_to_draft(client, invoice_id):
    payment = _pay(client, invoice_id, 100000)["payment"]

    response = client.delete(f"/api/payments/{payment['id']}")
    assert response.status_code == 204

    detail = client.get(f"/api/invoices/{invoice_id}").json()
    assert detail["status"] == "DRAFT"
    assert Decimal(detail["paid_amount"]) == Decimal("0")
    assert detail["payments"] == []


def test_deleting_one_of_several_payments_resums(client, invoice_id):
    _pay(client, invoice_id, 60000)
    second = _pay(client, invoice_id, 40000)
    assert second["invoice_status"] == "PAID"

    client.delete(f"/api/payments/{second['payment']['id']}")

    detail = client.get(f"/api/invoices/{invoice_id}").json()
    assert detail["status"] == "SENT"
    assert Decimal(detail["paid_amount"]) == Decimal("60000")

    listed = client.get(f"/api/invoices/{invoice_id}/payments").json()
    assert [Decimal(row["amount"]) for row in listed] == [Decimal("60000")]


def test_deleted_payment_is_gone(client, invoice_id):
    payment = _pay(client, invoice_id, 1000)["payment"]
    assert client.delete(f"/api/payments/{payment['id']}").status_code == 204
    assert client.delete(f"/api/payments/{payment['id']}").status_code == 404


def test_editing_items_does_not_reconcile_status(client, invoice_id):
    _pay(client, invoice_id, 50000)

    response = client.put(
        f"/api/invoices/{invoice_id}",
        json={"items": [{"description": "Build (reduced)", "quantity": 1, "unit_price": 40000}]},
    )
    body = response.json()
    assert Decimal(body["total_amount"]) == Decimal("40000")
    assert body["status"] == "SENT"


def test_payment_amount_must_be_positive(client, invoice_id):
    response = client.post(
        f"/api/invoices/{invoice_id}/payments",
        json={"amount": 0, "paid_at": "2025-03-20"},
    )
    assert response.status_code == 422
    assert response.json()["detail"].startswith("amount:")


@pytest.mark.parametrize("amount", ["0.004", "12.345", "100000000000"])
def test_payment_amount_must_fit_cents(client, invoice_id, amount):
    response = client.post(
        f"/api/invoices/{invoice_id}/payments",
        json={"amount": amount, "paid_at": "2025-03-20"},
    )
    assert response.status_code == 422
    assert response.json()["detail"].startswith("amount:")

    detail = client.get(f"/api/invoices/{invoice_id}").json()
    assert detail["payments"] == []
    assert detail["status"] == "DRAFT"


def test_delete_payment_from_paid_invoice_leaves_partial_balance(db, user, invoice_id):
    payment_service.register_payment(
        db, user=user, invoice_id=invoice_id, payload=PaymentCreate(amount=Decimal("60000"), paid_at="2025-03-20")
    )
    last, invoice = payment_service.register_payment(
        db, user=user, invoice_id=invoice_id, payload=PaymentCreate(amount=Decimal("40000"), paid_at="2025-03-25")
    )
    db.commit()
    assert invoice.status == InvoiceStatus.PAID

    invoice = payment_service.delete_payment(db, user=user, payment_id=last.id)
    db.commit()

    assert invoice.status == InvoiceStatus.SENT
    assert invoice.paid_amount == Decimal("60000.00")
    assert invoice.paid_amount < invoice.total_amount


def test_payment_on_missing_invoice(client):
    response = client.post("/api/invoices/9999/payments", json={"amount": 10, "paid_at": "2025-03-20"})
    assert response.status_code == 404


def test_register_payment_logs_activity(db, user, invoice_id):
    payload = PaymentCreate(amount=Decimal("25000"), paid_at="2025-03-21")
    payment, invoice = payment_service.register_payment(db, user=user, invoice_id=invoice_id, payload=payload)
    db.commit()

    assert invoice.status == InvoiceStatus.SENT
    log = db.query(ActivityLog).filter(ActivityLog.type == PAYMENT_REGISTERED).one()
    assert log.payload_json["payment_id"] == payment.id
    assert log.payload_json["to_status"] == "SENT"


def test_delete_payment_of_other_user_not_found(db, other_user, invoice_id, client):
    body = _pay(client, invoice_id, 1000)
    with pytest.raises(NotFoundError):
        payment_service.delete_payment(db, user=other_user, payment_id=body["payment"]["id"])


def test_recompute_all_invoices_repairs_drift(db, client, invoice_id):
    _pay(client, invoice_id, 100000)
    invoice = db.get(Invoice, invoice_id)
    invoice.status = InvoiceStatus.DRAFT
    invoice.paid_amount = Decimal("0")
    db.commit()

    assert recompute_all_invoices(db) == 1
    db.commit()

    invoice = db.get(Invoice, invoice_id)
    assert invoice.status == InvoiceStatus.PAID
    assert invoice.paid_amount == Decimal("100000.00")
