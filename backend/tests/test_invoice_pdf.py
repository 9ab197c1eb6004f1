from __future__ import annotations

from datetime import date
from decimal import Decimal

from ledgerly.models.invoice import Invoice, InvoiceItem
from ledgerly.models.user import UserSettings
from ledgerly.services.invoice_pdf import pdf_filename, render_invoice_pdf, safe_filename


def test_pdf_endpoint_returns_attachment(client, db, user, customer, project):
    db.add(UserSettings(user_id=user.id, business_name="Sam Studio", bank_name="First Bank", invoice_notes="Thanks!"))
    db.commit()
    invoice = client.post(
        "/api/invoices",
        json={
            "customer_id": customer.id,
            "project_id": project.id,
            "issued_at": "2025-03-10",
            "notes": "Net 30",
            "items": [
                {"description": "Consulting", "unit_price": 9000, "hours": 12.5},
                {"description": "License", "quantity": 2, "unit_price": 15000},
            ],
        },
    ).json()

    response = client.get(f"/api/invoices/{invoice['id']}/pdf")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == 'attachment; filename="invoice_INV-202503-0001.pdf"'
    assert response.content.startswith(b"%PDF")


def test_pdf_for_missing_invoice(client):
    assert client.get("/api/invoices/404/pdf").status_code == 404


def test_render_paginates_long_invoices(db, user, customer, project):
    invoice = Invoice(
        user_id=user.id,
        customer_id=customer.id,
        project_id=project.id,
        invoice_number="INV-LONG",
        issued_at=date(2025, 3, 1),
        due_at=date(2025, 3, 31),
        total_amount=Decimal("6000"),
        paid_amount=Decimal("1000"),
    )
    invoice.items = [
        InvoiceItem(description=f"Line {idx}", quantity=Decimal("1"), unit_price=Decimal("100"), amount=Decimal("100"), sort_order=idx)
        for idx in range(60)
    ]
    db.add(invoice)
    db.commit()

    content = render_invoice_pdf(invoice=invoice, profile=None)
    assert content.startswith(b"%PDF")
    assert content.count(b"/Type /Page") - content.count(b"/Type /Pages") >= 2


def test_safe_filename():
    assert safe_filename("INV/2025 03?.pdf") == "INV-2025-03-.pdf"
    assert safe_filename("///") == "invoice"


def test_pdf_filename_uses_invoice_number():
    assert pdf_filename(Invoice(invoice_number="ACME-202503-0007")) == "invoice_ACME-202503-0007.pdf"
