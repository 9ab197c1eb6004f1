from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from ledgerly.models.expense import ExpenseCategory


def _active(db: Session, user_id: int):
    return db.query(ExpenseCategory).filter(
        ExpenseCategory.user_id == user_id,
        ExpenseCategory.deleted_at.is_(None),
    )


def get_category(db: Session, *, user_id: int, category_id: int) -> Optional[ExpenseCategory]:
    return _active(db, user_id).filter(ExpenseCategory.id == category_id).first()


def list_categories(db: Session, *, user_id: int) -> List[ExpenseCategory]:
    return _active(db, user_id).order_by(ExpenseCategory.sort_order.asc(), ExpenseCategory.name.asc()).all()


def add_categories(db: Session, categories: Iterable[ExpenseCategory]) -> List[ExpenseCategory]:
    rows = list(categories)
    db.add_all(rows)
    db.flush()
    return rows
