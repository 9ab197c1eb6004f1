from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ledgerly.core.deps import get_current_user
from ledgerly.db.session import get_db
from ledgerly.models.user import User
from ledgerly.schemas.common import page_meta
from ledgerly.schemas.customer import (
    CustomerCreate,
    CustomerDetail,
    CustomerListResponse,
    CustomerRead,
    CustomerUpdate,
)
from ledgerly.services import customers as customer_service

router = APIRouter(prefix="/api/customers", tags=["customers"])


@router.get("", response_model=CustomerListResponse)
def list_customers(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CustomerListResponse:
    rows, total = customer_service.list_customers(db, user_id=current_user.id, page=page, page_size=page_size)
    return CustomerListResponse(
        items=[CustomerRead.model_validate(row) for row in rows],
        **page_meta(total=total, page=page, page_size=page_size),
    )


@router.post("", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
def create_customer(
    customer_in: CustomerCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CustomerRead:
    customer = customer_service.create_customer(db, user=current_user, payload=customer_in)
    db.commit()
    db.refresh(customer)
    return CustomerRead.model_validate(customer)


@router.get("/{customer_id}", response_model=CustomerDetail)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CustomerDetail:
    return customer_service.get_customer_detail(db, user_id=current_user.id, customer_id=customer_id)


@router.put("/{customer_id}", response_model=CustomerRead)
def update_customer(
    customer_id: int,
    customer_in: CustomerUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CustomerRead:
    customer = customer_service.update_customer(db, user=current_user, customer_id=customer_id, payload=customer_in)
    db.commit()
    db.refresh(customer)
    return CustomerRead.model_validate(customer)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Response:
    customer_service.delete_customer(db, user=current_user, customer_id=customer_id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
