from __future__ import annotations

import logging
from typing import List, Tuple

from sqlalchemy.orm import Session

from ledgerly.core.errors import NotFoundError
from ledgerly.core.logging import bind_log_context
from ledgerly.core.observability import ledgerly_payments_registered_total
from ledgerly.models.invoice import Invoice, Payment
from ledgerly.models.user import User
from ledgerly.repositories import invoices as invoices_repo
from ledgerly.repositories import payments as payments_repo
from ledgerly.schemas.invoice import PaymentCreate
from ledgerly.services.activity import PAYMENT_DELETED, PAYMENT_REGISTERED, log_activity
from ledgerly.services.invoices import get_invoice_or_404, recompute_invoice_payments

logger = logging.getLogger(__name__)


def _lock_invoice(db: Session, *, user_id: int, invoice_id: int) -> Invoice:
    invoice = invoices_repo.get_invoice(db, user_id=user_id, invoice_id=invoice_id, for_update=True)
    if not invoice:
        raise NotFoundError("Invoice not found")
    return invoice


def list_invoice_payments(db: Session, *, user_id: int, invoice_id: int) -> List[Payment]:
    get_invoice_or_404(db, user_id=user_id, invoice_id=invoice_id)
    return payments_repo.list_payments(db, invoice_id=invoice_id)


def register_payment(db: Session, *, user: User, invoice_id: int, payload: PaymentCreate) -> Tuple[Payment, Invoice]:
    invoice = _lock_invoice(db, user_id=user.id, invoice_id=invoice_id)
    bind_log_context(user_id=user.id, invoice_id=invoice.id, invoice_number=invoice.invoice_number)
    payment = payments_repo.add_payment(
        db,
        Payment(
            invoice_id=invoice.id,
            user_id=user.id,
            amount=payload.amount,
            paid_at=payload.paid_at,
            payment_method=payload.payment_method,
            notes=payload.notes,
        ),
    )
    bind_log_context(payment_id=payment.id)
    previous, current = recompute_invoice_payments(db, invoice)

    log_activity(
        db,
        actor_user_id=user.id,
        activity_type=PAYMENT_REGISTERED,
        subject=f"invoice:{invoice.id}",
        message=f"Payment of {payment.amount} registered on {invoice.invoice_number}",
        payload={"payment_id": payment.id, "from_status": str(previous), "to_status": str(current)},
    )
    ledgerly_payments_registered_total.inc()
    logger.info("payment_registered amount=%s", payment.amount)
    return payment, invoice


def delete_payment(db: Session, *, user: User, payment_id: int) -> Invoice:
    payment = payments_repo.get_payment(db, user_id=user.id, payment_id=payment_id)
    if not payment:
        raise NotFoundError("Payment not found")
    invoice = _lock_invoice(db, user_id=user.id, invoice_id=payment.invoice_id)
    bind_log_context(
        user_id=user.id, invoice_id=invoice.id, invoice_number=invoice.invoice_number, payment_id=payment.id
    )

    payment.soft_delete()
    db.add(payment)
    db.flush()
    previous, current = recompute_invoice_payments(db, invoice)

    log_activity(
        db,
        actor_user_id=user.id,
        activity_type=PAYMENT_DELETED,
        subject=f"invoice:{invoice.id}",
        message=f"Payment {payment.id} deleted from {invoice.invoice_number}",
        payload={"payment_id": payment.id, "from_status": str(previous), "to_status": str(current)},
    )
    logger.info("payment_deleted amount=%s", payment.amount)
    return invoice
