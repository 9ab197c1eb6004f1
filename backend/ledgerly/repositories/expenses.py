from __future__ import annotations

from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from ledgerly.models.expense import Expense
from ledgerly.repositories.base import paginate


def _active(db: Session, user_id: int):
    return db.query(Expense).filter(Expense.user_id == user_id, Expense.deleted_at.is_(None))


def get_expense(db: Session, *, user_id: int, expense_id: int) -> Optional[Expense]:
    return (
        _active(db, user_id)
        .options(selectinload(Expense.category), selectinload(Expense.project))
        .filter(Expense.id == expense_id)
        .first()
    )


def list_expenses(
    db: Session,
    *,
    user_id: int,
    page: int,
    page_size: int,
    project_id: Optional[int] = None,
    category_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> Tuple[List[Expense], int]:
    query = _active(db, user_id).options(selectinload(Expense.category), selectinload(Expense.project))
    if project_id:
        query = query.filter(Expense.project_id == project_id)
    if category_id:
        query = query.filter(Expense.category_id == category_id)
    if date_from:
        query = query.filter(Expense.date >= date_from)
    if date_to:
        query = query.filter(Expense.date <= date_to)
    query = query.order_by(Expense.date.desc(), Expense.id.desc())
    return paginate(query, page=page, page_size=page_size)


def add_expense(db: Session, expense: Expense) -> Expense:
    db.add(expense)
    db.flush()
    return expense


def category_in_use(db: Session, *, user_id: int, category_id: int) -> bool:
    return _active(db, user_id).filter(Expense.category_id == category_id).first() is not None
