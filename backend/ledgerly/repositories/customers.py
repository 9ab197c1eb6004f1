from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from ledgerly.models.customer import Customer
from ledgerly.models.invoice import Invoice
from ledgerly.models.project import Project
from ledgerly.repositories.base import paginate


def _active(db: Session, user_id: int):
    return db.query(Customer).filter(Customer.user_id == user_id, Customer.deleted_at.is_(None))


def get_customer(db: Session, *, user_id: int, customer_id: int) -> Optional[Customer]:
    return _active(db, user_id).filter(Customer.id == customer_id).first()


def list_customers(db: Session, *, user_id: int, page: int, page_size: int) -> Tuple[List[Customer], int]:
    query = _active(db, user_id).order_by(Customer.created_at.desc(), Customer.id.desc())
    return paginate(query, page=page, page_size=page_size)


def add_customer(db: Session, customer: Customer) -> Customer:
    db.add(customer)
    db.flush()
    return customer


def count_projects(db: Session, *, user_id: int, customer_id: int) -> int:
    return (
        db.query(func.count(Project.id))
        .filter(
            Project.user_id == user_id,
            Project.customer_id == customer_id,
            Project.deleted_at.is_(None),
        )
        .scalar()
        or 0
    )


def sales_totals(db: Session, *, user_id: int, customer_id: int) -> Tuple[Decimal, Decimal]:
    """(total invoiced, total paid) across the customer's live invoices."""
    total, paid = (
        db.query(
            func.coalesce(func.sum(Invoice.total_amount), 0),
            func.coalesce(func.sum(Invoice.paid_amount), 0),
        )
        .filter(
            Invoice.user_id == user_id,
            Invoice.customer_id == customer_id,
            Invoice.deleted_at.is_(None),
        )
        .one()
    )
    return Decimal(total), Decimal(paid)
