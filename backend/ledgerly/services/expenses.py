from __future__ import annotations

from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ledgerly.core.errors import NotFoundError, ValidationError
from ledgerly.models.expense import Expense
from ledgerly.models.user import User
from ledgerly.repositories import expense_categories as categories_repo
from ledgerly.repositories import expenses as expenses_repo
from ledgerly.repositories import projects as projects_repo
from ledgerly.schemas.expense import ExpenseCreate, ExpenseUpdate


def get_expense_or_404(db: Session, *, user_id: int, expense_id: int) -> Expense:
    expense = expenses_repo.get_expense(db, user_id=user_id, expense_id=expense_id)
    if not expense:
        raise NotFoundError("Expense not found")
    return expense


def _ensure_refs(db: Session, *, user_id: int, category_id: int, project_id: Optional[int]) -> None:
    if not categories_repo.get_category(db, user_id=user_id, category_id=category_id):
        raise NotFoundError("Expense category not found")
    if project_id is not None and not projects_repo.get_project(db, user_id=user_id, project_id=project_id):
        raise NotFoundError("Project not found")


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
    if date_from and date_to and date_from > date_to:
        raise ValidationError("date_from must not be after date_to")
    return expenses_repo.list_expenses(
        db,
        user_id=user_id,
        page=page,
        page_size=page_size,
        project_id=project_id,
        category_id=category_id,
        date_from=date_from,
        date_to=date_to,
    )


def create_expense(db: Session, *, user: User, payload: ExpenseCreate) -> Expense:
    _ensure_refs(db, user_id=user.id, category_id=payload.category_id, project_id=payload.project_id)
    expense = expenses_repo.add_expense(db, Expense(user_id=user.id, **payload.model_dump()))
    db.refresh(expense, ["category", "project"])
    return expense


def update_expense(db: Session, *, user: User, expense_id: int, payload: ExpenseUpdate) -> Expense:
    expense = get_expense_or_404(db, user_id=user.id, expense_id=expense_id)
    _ensure_refs(db, user_id=user.id, category_id=payload.category_id, project_id=payload.project_id)
    for field, value in payload.model_dump().items():
        setattr(expense, field, value)
    db.add(expense)
    db.flush()
    db.refresh(expense, ["category", "project"])
    return expense


def delete_expense(db: Session, *, user: User, expense_id: int) -> None:
    expense = get_expense_or_404(db, user_id=user.id, expense_id=expense_id)
    expense.soft_delete()
    db.add(expense)
    db.flush()
