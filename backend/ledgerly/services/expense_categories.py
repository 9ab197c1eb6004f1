from __future__ import annotations

from typing import List

from sqlalchemy.orm import Session

from ledgerly.core.errors import ConflictError, NotFoundError
from ledgerly.models.expense import ExpenseCategory
from ledgerly.models.user import User
from ledgerly.repositories import expense_categories as categories_repo
from ledgerly.repositories import expenses as expenses_repo
from ledgerly.schemas.expense import ExpenseCategoryCreate, ExpenseCategoryUpdate

# (name, colour) in display order; created for every new account.
DEFAULT_CATEGORIES = (
    ("Travel", "#3B82F6"),
    ("Communication", "#8B5CF6"),
    ("Entertainment", "#EC4899"),
    ("Supplies", "#F59E0B"),
    ("Utilities", "#10B981"),
    ("Rent", "#6366F1"),
    ("Outsourcing", "#14B8A6"),
    ("Advertising", "#F97316"),
    ("Training", "#06B6D4"),
    ("Other", "#6B7280"),
)


def create_default_categories(db: Session, *, user_id: int) -> List[ExpenseCategory]:
    return categories_repo.add_categories(
        db,
        (
            ExpenseCategory(user_id=user_id, name=name, color=color, sort_order=idx)
            for idx, (name, color) in enumerate(DEFAULT_CATEGORIES, start=1)
        ),
    )


def get_category_or_404(db: Session, *, user_id: int, category_id: int) -> ExpenseCategory:
    category = categories_repo.get_category(db, user_id=user_id, category_id=category_id)
    if not category:
        raise NotFoundError("Expense category not found")
    return category


def list_categories(db: Session, *, user_id: int) -> List[ExpenseCategory]:
    return categories_repo.list_categories(db, user_id=user_id)


def create_category(db: Session, *, user: User, payload: ExpenseCategoryCreate) -> ExpenseCategory:
    (category,) = categories_repo.add_categories(db, [ExpenseCategory(user_id=user.id, **payload.model_dump())])
    return category


def update_category(db: Session, *, user: User, category_id: int, payload: ExpenseCategoryUpdate) -> ExpenseCategory:
    category = get_category_or_404(db, user_id=user.id, category_id=category_id)
    for field, value in payload.model_dump().items():
        setattr(category, field, value)
    db.add(category)
    db.flush()
    return category


def delete_category(db: Session, *, user: User, category_id: int) -> None:
    category = get_category_or_404(db, user_id=user.id, category_id=category_id)
    if expenses_repo.category_in_use(db, user_id=user.id, category_id=category.id):
        raise ConflictError("Expense category is used by expenses and cannot be deleted")
    category.soft_delete()
    db.add(category)
    db.flush()
