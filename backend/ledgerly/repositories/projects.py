from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ledgerly.models.enums import ProjectStatus
from ledgerly.models.invoice import Invoice
from ledgerly.models.project import Project
from ledgerly.repositories.base import paginate


def _active(db: Session, user_id: int):
    return db.query(Project).filter(Project.user_id == user_id, Project.deleted_at.is_(None))


def get_project(db: Session, *, user_id: int, project_id: int) -> Optional[Project]:
    return _active(db, user_id).options(selectinload(Project.customer)).filter(Project.id == project_id).first()


def list_projects(
    db: Session,
    *,
    user_id: int,
    page: int,
    page_size: int,
    customer_id: Optional[int] = None,
    status: Optional[ProjectStatus] = None,
) -> Tuple[List[Project], int]:
    query = _active(db, user_id).options(selectinload(Project.customer))
    if customer_id:
        query = query.filter(Project.customer_id == customer_id)
    if status:
        query = query.filter(Project.status == status)
    # NULL start dates sort last on both sqlite and postgres.
    query = query.order_by(
        Project.start_date.is_(None),
        Project.start_date.desc(),
        Project.created_at.desc(),
        Project.id.desc(),
    )
    return paginate(query, page=page, page_size=page_size)


def add_project(db: Session, project: Project) -> Project:
    db.add(project)
    db.flush()
    return project


def count_invoices(db: Session, *, user_id: int, project_id: int) -> int:
    return (
        db.query(func.count(Invoice.id))
        .filter(
            Invoice.user_id == user_id,
            Invoice.project_id == project_id,
            Invoice.deleted_at.is_(None),
        )
        .scalar()
        or 0
    )


def invoice_totals(db: Session, *, user_id: int, project_id: int) -> Tuple[Decimal, Decimal]:
    total, paid = (
        db.query(
            func.coalesce(func.sum(Invoice.total_amount), 0),
            func.coalesce(func.sum(Invoice.paid_amount), 0),
        )
        .filter(
            Invoice.user_id == user_id,
            Invoice.project_id == project_id,
            Invoice.deleted_at.is_(None),
        )
        .one()
    )
    return Decimal(total), Decimal(paid)
