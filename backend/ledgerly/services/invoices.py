from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ledgerly.core.errors import ConflictError, NotFoundError, ValidationError
from ledgerly.core.logging import bind_log_context
from ledgerly.core.observability import record_status_change
from ledgerly.core.settings import settings
from ledgerly.models.enums import InvoiceStatus
from ledgerly.models.invoice import Invoice, InvoiceItem
from ledgerly.models.user import User
from ledgerly.repositories import customers as customers_repo
from ledgerly.repositories import invoices as invoices_repo
from ledgerly.repositories import payments as payments_repo
from ledgerly.repositories import projects as projects_repo
from ledgerly.repositories import user_settings as user_settings_repo
from ledgerly.schemas.invoice import InvoiceCreate, InvoiceItemCreate, InvoiceUpdate
from ledgerly.services.activity import INVOICE_CREATED, INVOICE_DELETED, INVOICE_UPDATED, log_activity

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
MAX_AMOUNT = Decimal("9999999999.99")


def _q(value: Decimal) -> Decimal:
    return Decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def calc_item_amount(quantity: Decimal, unit_price: Decimal, hours: Optional[Decimal] = None) -> Decimal:
    """Hourly lines bill hours x unit price; everything else bills quantity x unit price."""
    if hours is not None and hours > 0:
        return _q(Decimal(hours) * Decimal(unit_price))
    return _q(Decimal(quantity) * Decimal(unit_price))


def calc_invoice_total(items: Iterable[InvoiceItemCreate]) -> Decimal:
    total = sum(
        (calc_item_amount(item.quantity, item.unit_price, item.hours) for item in items),
        start=ZERO,
    )
    total = _q(total)
    if total > MAX_AMOUNT:
        raise ValidationError("Invoice total exceeds the maximum amount")
    return total


def recompute_status(total_amount: Decimal, paid_amount: Decimal, current_status: InvoiceStatus) -> InvoiceStatus:
    if paid_amount >= total_amount:
        return InvoiceStatus.PAID
    if paid_amount <= 0:
        return InvoiceStatus.DRAFT
    # partially paid: an invoice that lost its full cover drops back to SENT
    if current_status in (InvoiceStatus.DRAFT, InvoiceStatus.PAID):
        return InvoiceStatus.SENT
    return current_status


def invoice_defaults(db: Session, *, user_id: int) -> Tuple[str, int]:
    """(prefix, payment days) from the user's settings row, falling back to app config."""
    row = user_settings_repo.get_settings(db, user_id=user_id)
    prefix = (row.invoice_prefix if row else None) or settings.default_invoice_prefix
    days = (row.default_payment_days if row else None) or settings.default_payment_days
    return prefix, days


def generate_invoice_number(db: Session, *, user_id: int, issued_at: date, invoice_prefix: str) -> str:
    prefix = f"{invoice_prefix}-{issued_at:%Y%m}-"
    highest = 0
    for number in invoices_repo.invoice_numbers_with_prefix(db, user_id=user_id, prefix=prefix):
        suffix = number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1:04d}"


def default_due_date(issued_at: date, payment_days: int) -> date:
    return issued_at + timedelta(days=payment_days)


def replace_invoice_items(db: Session, invoice: Invoice, items_payload: Iterable[InvoiceItemCreate]) -> List[InvoiceItem]:
    invoice.items.clear()
    db.flush()

    created: List[InvoiceItem] = []
    for idx, item in enumerate(items_payload):
        invoice_item = InvoiceItem(
            invoice_id=invoice.id,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            hours=item.hours,
            amount=calc_item_amount(item.quantity, item.unit_price, item.hours),
            sort_order=idx,
        )
        invoice.items.append(invoice_item)
        created.append(invoice_item)
    db.flush()
    return created


def _ensure_refs(db: Session, *, user_id: int, customer_id: int, project_id: int) -> None:
    if not customers_repo.get_customer(db, user_id=user_id, customer_id=customer_id):
        raise NotFoundError("Customer not found")
    project = projects_repo.get_project(db, user_id=user_id, project_id=project_id)
    if not project:
        raise NotFoundError("Project not found")
    if project.customer_id != customer_id:
        raise ValidationError("Project does not belong to the customer")


def get_invoice_or_404(db: Session, *, user_id: int, invoice_id: int) -> Invoice:
    invoice = invoices_repo.get_invoice(db, user_id=user_id, invoice_id=invoice_id)
    if not invoice:
        raise NotFoundError("Invoice not found")
    bind_log_context(invoice_id=invoice.id, invoice_number=invoice.invoice_number)
    return invoice


def list_invoices(db: Session, *, user_id: int, page: int, page_size: int, **filters) -> Tuple[List[Invoice], int]:
    return invoices_repo.list_invoices(db, user_id=user_id, page=page, page_size=page_size, **filters)


def create_invoice(db: Session, *, user: User, payload: InvoiceCreate) -> Invoice:
    _ensure_refs(db, user_id=user.id, customer_id=payload.customer_id, project_id=payload.project_id)
    invoice_prefix, payment_days = invoice_defaults(db, user_id=user.id)

    if payload.invoice_number:
        if invoices_repo.invoice_number_taken(db, user_id=user.id, invoice_number=payload.invoice_number):
            raise ConflictError("Invoice number already exists")
        invoice_number = payload.invoice_number
    else:
        invoice_number = generate_invoice_number(
            db, user_id=user.id, issued_at=payload.issued_at, invoice_prefix=invoice_prefix
        )

    due_at = payload.due_at or default_due_date(payload.issued_at, payment_days)
    if due_at < payload.issued_at:
        raise ValidationError("due_at must not be before issued_at")

    invoice = Invoice(
        user_id=user.id,
        customer_id=payload.customer_id,
        project_id=payload.project_id,
        invoice_number=invoice_number,
        status=payload.status,
        issued_at=payload.issued_at,
        due_at=due_at,
        total_amount=calc_invoice_total(payload.items),
        paid_amount=ZERO,
        notes=payload.notes,
    )
    invoices_repo.add_invoice(db, invoice)
    replace_invoice_items(db, invoice, payload.items)

    log_activity(
        db,
        actor_user_id=user.id,
        activity_type=INVOICE_CREATED,
        subject=f"invoice:{invoice.id}",
        message=f"Invoice {invoice.invoice_number} created",
        payload={"total_amount": str(invoice.total_amount)},
    )
    bind_log_context(user_id=user.id, invoice_id=invoice.id, invoice_number=invoice.invoice_number)
    logger.info("invoice_created total=%s", invoice.total_amount)
    return invoice


def update_invoice(db: Session, *, user: User, invoice_id: int, payload: InvoiceUpdate) -> Invoice:
    invoice = get_invoice_or_404(db, user_id=user.id, invoice_id=invoice_id)

    customer_id = payload.customer_id if payload.customer_id is not None else invoice.customer_id
    project_id = payload.project_id if payload.project_id is not None else invoice.project_id
    _ensure_refs(db, user_id=user.id, customer_id=customer_id, project_id=project_id)
    invoice.customer_id = customer_id
    invoice.project_id = project_id

    if payload.invoice_number and payload.invoice_number != invoice.invoice_number:
        if invoices_repo.invoice_number_taken(
            db,
            user_id=user.id,
            invoice_number=payload.invoice_number,
            exclude_id=invoice.id,
        ):
            raise ConflictError("Invoice number already exists")
        invoice.invoice_number = payload.invoice_number

    if payload.status is not None:
        invoice.status = payload.status
    if payload.issued_at is not None:
        invoice.issued_at = payload.issued_at
    if payload.due_at is not None:
        invoice.due_at = payload.due_at
    if invoice.due_at < invoice.issued_at:
        raise ValidationError("due_at must not be before issued_at")
    if payload.notes is not None:
        invoice.notes = payload.notes

    # Editing lines never reconciles status; only payment changes do.
    if payload.items is not None:
        total = calc_invoice_total(payload.items)
        replace_invoice_items(db, invoice, payload.items)
        invoice.total_amount = total

    db.add(invoice)
    db.flush()
    log_activity(
        db,
        actor_user_id=user.id,
        activity_type=INVOICE_UPDATED,
        subject=f"invoice:{invoice.id}",
        message=f"Invoice {invoice.invoice_number} updated",
    )
    return invoice


def delete_invoice(db: Session, *, user: User, invoice_id: int) -> None:
    invoice = get_invoice_or_404(db, user_id=user.id, invoice_id=invoice_id)
    invoice.soft_delete()
    db.add(invoice)
    db.flush()
    log_activity(
        db,
        actor_user_id=user.id,
        activity_type=INVOICE_DELETED,
        subject=f"invoice:{invoice.id}",
        message=f"Invoice {invoice.invoice_number} deleted",
    )


def recompute_invoice_payments(db: Session, invoice: Invoice) -> Tuple[InvoiceStatus, InvoiceStatus]:
    """Re-sum live payments onto the invoice and re-derive its status.

    Returns the (previous, new) status pair.
    """
    previous = invoice.status
    paid = _q(payments_repo.sum_active_payments(db, invoice_id=invoice.id))
    invoice.paid_amount = paid
    invoice.status = recompute_status(Decimal(invoice.total_amount), paid, previous)
    db.add(invoice)
    db.flush()
    if previous != invoice.status:
        record_status_change(str(previous), str(invoice.status))
        logger.info(
            "invoice_status_changed",
            extra={
                "invoice_id": invoice.id,
                "invoice_number": invoice.invoice_number,
                "from_status": str(previous),
                "to_status": str(invoice.status),
            },
        )
    return previous, invoice.status


def recompute_all_invoices(db: Session) -> int:
    """Reconcile every live invoice from its payments. Returns how many changed status."""
    changed = 0
    for invoice_id, user_id in invoices_repo.list_all_invoice_ids(db):
        invoice = invoices_repo.get_invoice(db, user_id=user_id, invoice_id=invoice_id, for_update=True)
        if invoice is None:
            continue
        previous, current = recompute_invoice_payments(db, invoice)
        if previous != current:
            changed += 1
    return changed
