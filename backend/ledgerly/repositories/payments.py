from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ledgerly.models.invoice import Invoice, Payment


def get_payment(db: Session, *, user_id: int, payment_id: int) -> Optional[Payment]:
    return (
        db.query(Payment)
        .join(Invoice, Invoice.id == Payment.invoice_id)
        .filter(
            Payment.id == payment_id,
            Payment.user_id == user_id,
            Payment.deleted_at.is_(None),
            Invoice.deleted_at.is_(None),
        )
        .first()
    )


def list_payments(db: Session, *, invoice_id: int) -> List[Payment]:
    return (
        db.query(Payment)
        .filter(Payment.invoice_id == invoice_id, Payment.deleted_at.is_(None))
        .order_by(Payment.paid_at.desc(), Payment.id.desc())
        .all()
    )


def add_payment(db: Session, payment: Payment) -> Payment:
    db.add(payment)
    db.flush()
    return payment


def sum_active_payments(db: Session, *, invoice_id: int) -> Decimal:
    total = (
        db.query(func.coalesce(func.sum(Payment.amount), 0))
        .filter(Payment.invoice_id == invoice_id, Payment.deleted_at.is_(None))
        .scalar()
    )
    return Decimal(total or 0)
