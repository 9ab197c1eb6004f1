from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from ledgerly.models.enums import InvoiceStatus
from ledgerly.models.invoice import Invoice
from ledgerly.repositories.base import paginate


def _active(db: Session, user_id: int):
    return db.query(Invoice).filter(Invoice.user_id == user_id, Invoice.deleted_at.is_(None))


def get_invoice(
    db: Session,
    *,
    user_id: int,
    invoice_id: int,
    for_update: bool = False,
) -> Optional[Invoice]:
    query = _active(db, user_id).filter(Invoice.id == invoice_id)
    if for_update:
        query = query.with_for_update()
    else:
        query = query.options(
            selectinload(Invoice.customer),
            selectinload(Invoice.project),
            selectinload(Invoice.items),
            selectinload(Invoice.payments),
        )
    return query.first()


def list_invoices(
    db: Session,
    *,
    user_id: int,
    page: int,
    page_size: int,
    customer_id: Optional[int] = None,
    project_id: Optional[int] = None,
    status: Optional[InvoiceStatus] = None,
) -> Tuple[List[Invoice], int]:
    query = _active(db, user_id).options(selectinload(Invoice.customer), selectinload(Invoice.project))
    if customer_id:
        query = query.filter(Invoice.customer_id == customer_id)
    if project_id:
        query = query.filter(Invoice.project_id == project_id)
    if status:
        query = query.filter(Invoice.status == status)
    query = query.order_by(Invoice.issued_at.desc(), Invoice.id.desc())
    return paginate(query, page=page, page_size=page_size)


def list_all_invoice_ids(db: Session) -> List[Tuple[int, int]]:
    """(invoice id, owner id) for every live invoice, oldest first."""
    rows = db.query(Invoice.id, Invoice.user_id).filter(Invoice.deleted_at.is_(None)).order_by(Invoice.id.asc()).all()
    return [(row[0], row[1]) for row in rows]


def add_invoice(db: Session, invoice: Invoice) -> Invoice:
    db.add(invoice)
    db.flush()
    return invoice


def invoice_numbers_with_prefix(db: Session, *, user_id: int, prefix: str) -> List[str]:
    """Every number the user has issued under the prefix, soft-deleted invoices included."""
    rows = (
        db.query(Invoice.invoice_number)
        .filter(Invoice.user_id == user_id, Invoice.invoice_number.startswith(prefix, autoescape=True))
        .all()
    )
    return [row[0] for row in rows]


def invoice_number_taken(db: Session, *, user_id: int, invoice_number: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Invoice.id).filter(Invoice.user_id == user_id, Invoice.invoice_number == invoice_number)
    if exclude_id is not None:
        query = query.filter(Invoice.id != exclude_id)
    return query.first() is not None

