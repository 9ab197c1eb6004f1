from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ledgerly.core.deps import get_current_user
from ledgerly.db.session import get_db
from ledgerly.models.user import User
from ledgerly.schemas.expense import ExpenseCategoryCreate, ExpenseCategoryRead, ExpenseCategoryUpdate
from ledgerly.services import expense_categories as category_service

router = APIRouter(prefix="/api/expense-categories", tags=["expenses"])


@router.get("", response_model=List[ExpenseCategoryRead])
def list_categories(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[ExpenseCategoryRead]:
    rows = category_service.list_categories(db, user_id=current_user.id)
    return [ExpenseCategoryRead.model_validate(row) for row in rows]


@router.post("", response_model=ExpenseCategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(
    category_in: ExpenseCategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ExpenseCategoryRead:
    category = category_service.create_category(db, user=current_user, payload=category_in)
    db.commit()
    return ExpenseCategoryRead.model_validate(category)


@router.put("/{category_id}", response_model=ExpenseCategoryRead)
def update_category(
    category_id: int,
    category_in: ExpenseCategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ExpenseCategoryRead:
    category = category_service.update_category(db, user=current_user, category_id=category_id, payload=category_in)
    db.commit()
    return ExpenseCategoryRead.model_validate(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Response:
    category_service.delete_category(db, user=current_user, category_id=category_id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
