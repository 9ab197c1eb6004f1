from __future__ import annotations

from decimal import Decimal
from io import BytesIO
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from ledgerly.models.invoice import Invoice, InvoiceItem
from ledgerly.models.user import UserSettings


TWOPLACES = Decimal("0.01")
ROW_H = 8 * mm
BOTTOM_MARGIN = 30 * mm


def _q(value: Optional[Decimal]) -> Decimal:
    return Decimal(value or 0).quantize(TWOPLACES)


def _money(value: Optional[Decimal]) -> str:
    return f"{_q(value):,.2f}"


def safe_filename(name: str) -> str:
    cleaned = "".join(ch if ch.isalnum() or ch in {"-", "_", "."} else "-" for ch in name)
    return cleaned.strip("-") or "invoice"


def pdf_filename(invoice: Invoice) -> str:
    return safe_filename(f"invoice_{invoice.invoice_number}.pdf")


def _business_name(profile: Optional[UserSettings]) -> str:
    if profile and profile.business_name:
        return profile.business_name
    return "Ledgerly"


def _quantity_label(item: InvoiceItem) -> str:
    if item.hours is not None and item.hours > 0:
        return f"{_q(item.hours)} h"
    return f"{_q(item.quantity).normalize():f}"


def _draw_header(c: canvas.Canvas, profile: Optional[UserSettings], invoice: Invoice) -> float:
    width, height = A4
    left = 20 * mm
    top = height - 18 * mm

    c.setFont("Helvetica-Bold", 14)
    c.drawString(left, top, _business_name(profile))

    c.setFont("Helvetica", 9)
    lines = []
    if profile:
        lines = [
            profile.representative_name,
            " ".join(part for part in [profile.postal_code, profile.address] if part),
            profile.phone,
            profile.email,
        ]
    y = top - 6 * mm
    for line in (line for line in lines if line):
        c.drawString(left, y, line[:80])
        y -= 4.5 * mm

    right_x = width - 20 * mm
    labels = (
        ("Invoice No.", invoice.invoice_number),
        ("Issue Date", invoice.issued_at.strftime("%d %b %Y") if invoice.issued_at else "-"),
        ("Due Date", invoice.due_at.strftime("%d %b %Y") if invoice.due_at else "-"),
    )
    label_y = top
    for label, value in labels:
        c.setFont("Helvetica-Bold", 10)
        c.drawRightString(right_x, label_y, label)
        c.setFont("Helvetica", 10)
        c.drawRightString(right_x, label_y - 5 * mm, value)
        label_y -= 11 * mm

    return min(y, label_y) - 4 * mm


def _draw_party_block(c: canvas.Canvas, invoice: Invoice, y: float) -> float:
    left = 20 * mm

    c.setStrokeColor(colors.black)
    c.setLineWidth(0.8)

    c.setFont("Helvetica-Bold", 16)
    c.drawString(left, y, "INVOICE")
    y -= 8 * mm

    customer = invoice.customer
    c.setFont("Helvetica-Bold", 9)
    c.drawString(left, y, "Bill To:")
    c.setFont("Helvetica", 10)
    c.drawString(left + 25 * mm, y, customer.name if customer else "-")
    y -= 5 * mm

    if customer and customer.contact_name:
        c.setFont("Helvetica", 9)
        c.drawString(left + 25 * mm, y, f"Attn: {customer.contact_name}")
        y -= 5 * mm

    if invoice.project:
        c.setFont("Helvetica-Bold", 9)
        c.drawString(left, y, "Project:")
        c.setFont("Helvetica", 9)
        c.drawString(left + 25 * mm, y, invoice.project.name[:100])
        y -= 5 * mm

    return y - 4 * mm


def _draw_table_header(c: canvas.Canvas, y: float, cols: dict) -> float:
    left, right = cols["left"], cols["right"]
    c.setLineWidth(1)
    c.line(left, y, right, y)
    c.line(left, y - ROW_H, right, y - ROW_H)
    c.setFont("Helvetica-Bold", 9)
    c.drawCentredString((left + cols["desc"]) / 2, y - 5.5 * mm, "No.")
    c.drawString(cols["desc"] + 2 * mm, y - 5.5 * mm, "Description")
    c.drawRightString(cols["price"] - 2 * mm, y - 5.5 * mm, "Qty / Hours")
    c.drawRightString(cols["amount"] - 2 * mm, y - 5.5 * mm, "Unit Price")
    c.drawRightString(right - 2 * mm, y - 5.5 * mm, "Amount")
    return y - ROW_H


def _draw_items_table(c: canvas.Canvas, invoice: Invoice, start_y: float) -> float:
    width, height = A4
    cols = {
        "left": 20 * mm,
        "desc": 32 * mm,
        "price": width - 72 * mm,
        "amount": width - 47 * mm,
        "right": width - 20 * mm,
    }
    y = _draw_table_header(c, start_y, cols)

    c.setFont("Helvetica", 9)
    for idx, item in enumerate(invoice.items, start=1):
        if y - ROW_H < BOTTOM_MARGIN:
            c.showPage()
            y = _draw_table_header(c, height - 20 * mm, cols)
            c.setFont("Helvetica", 9)

        c.line(cols["left"], y - ROW_H, cols["right"], y - ROW_H)
        c.drawCentredString((cols["left"] + cols["desc"]) / 2, y - 5.5 * mm, str(idx))
        c.drawString(cols["desc"] + 2 * mm, y - 5.5 * mm, item.description[:60])
        c.drawRightString(cols["price"] - 2 * mm, y - 5.5 * mm, _quantity_label(item))
        c.drawRightString(cols["amount"] - 2 * mm, y - 5.5 * mm, _money(item.unit_price))
        c.drawRightString(cols["right"] - 2 * mm, y - 5.5 * mm, _money(item.amount))
        y -= ROW_H

    if y - 3 * ROW_H < BOTTOM_MARGIN:
        c.showPage()
        y = height - 20 * mm

    totals = (
        ("Total", invoice.total_amount),
        ("Paid", invoice.paid_amount),
        ("Balance Due", invoice.balance_due),
    )
    c.setFont("Helvetica-Bold", 9)
    for label, value in totals:
        c.drawRightString(cols["amount"] - 2 * mm, y - 5.5 * mm, label)
        c.drawRightString(cols["right"] - 2 * mm, y - 5.5 * mm, _money(value))
        y -= ROW_H
    c.line(cols["amount"], y, cols["right"], y)

    return y - 6 * mm


def _draw_footer(c: canvas.Canvas, invoice: Invoice, profile: Optional[UserSettings], y: float) -> None:
    width, height = A4
    left = 20 * mm

    if y < 60 * mm:
        c.showPage()
        y = height - 20 * mm

    c.setFont("Helvetica-Bold", 9)
    c.drawString(left, y, "Bank Details")
    y -= 5 * mm

    c.setFont("Helvetica", 9)
    details = [
        ("Bank", " / ".join(part for part in [profile.bank_name, profile.branch_name] if part) if profile else None),
        ("Account", " ".join(part for part in [profile.account_type, profile.account_number] if part) if profile else None),
        ("Holder", profile.account_holder if profile else None),
    ]
    for label, value in details:
        c.drawString(left, y, f"{label}:")
        c.drawString(left + 25 * mm, y, value or "-")
        y -= 5 * mm

    notes = [note for note in (invoice.notes, profile.invoice_notes if profile else None) if note]
    if notes:
        y -= 3 * mm
        c.setFont("Helvetica-Bold", 9)
        c.drawString(left, y, "Notes")
        y -= 5 * mm
        c.setFont("Helvetica", 9)
        for note in notes:
            for line in note.splitlines():
                if y < 20 * mm:
                    break
                c.drawString(left, y, line[:110])
                y -= 4.5 * mm

    c.setFont("Helvetica-Oblique", 8)
    c.drawCentredString(width / 2, 12 * mm, "This is a computer generated invoice")


def render_invoice_pdf(*, invoice: Invoice, profile: Optional[UserSettings]) -> bytes:
    """Render the invoice as an A4 PDF document and return its bytes."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(invoice.invoice_number)

    y = _draw_header(c, profile, invoice)
    y = _draw_party_block(c, invoice, y)
    y = _draw_items_table(c, invoice, y)
    _draw_footer(c, invoice, profile, y)

    c.showPage()
    c.save()
    return buffer.getvalue()
