from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ledgerly.core.deps import get_current_user
from ledgerly.db.session import get_db
from ledgerly.models.user import User
from ledgerly.schemas.common import page_meta
from ledgerly.schemas.expense import ExpenseCreate, ExpenseListResponse, ExpenseRead, ExpenseUpdate
from ledgerly.services import expenses as expense_service

router = APIRouter(prefix="/api/expenses", tags=["expenses"])


@router.get("", response_model=ExpenseListResponse)
def list_expenses(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    project_id: Optional[int] = Query(None),
    category_id: Optional[int] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ExpenseListResponse:
    rows, total = expense_service.list_expenses(
        db,
        user_id=current_user.id,
        page=page,
        page_size=page_size,
        project_id=project_id,
        category_id=category_id,
        date_from=date_from,
        date_to=date_to,
    )
    return ExpenseListResponse(
        items=[ExpenseRead.model_validate(row) for row in rows],
        **page_meta(total=total, page=page, page_size=page_size),
    )


@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
def create_expense(
    expense_in: ExpenseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ExpenseRead:
    expense = expense_service.create_expense(db, user=current_user, payload=expense_in)
    db.commit()
    return ExpenseRead.model_validate(expense)


@router.get("/{expense_id}", response_model=ExpenseRead)
def get_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ExpenseRead:
    return ExpenseRead.model_validate(
        expense_service.get_expense_or_404(db, user_id=current_user.id, expense_id=expense_id)
    )


@router.put("/{expense_id}", response_model=ExpenseRead)
def update_expense(
    expense_id: int,
    expense_in: ExpenseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ExpenseRead:
    expense = expense_service.update_expense(db, user=current_user, expense_id=expense_id, payload=expense_in)
    db.commit()
    return ExpenseRead.model_validate(expense)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Response:
    expense_service.delete_expense(db, user=current_user, expense_id=expense_id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
