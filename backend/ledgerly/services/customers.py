from __future__ import annotations

from typing import List, Tuple

from sqlalchemy.orm import Session

from ledgerly.core.errors import ConflictError, NotFoundError
from ledgerly.models.customer import Customer
from ledgerly.models.user import User
from ledgerly.repositories import customers as customers_repo
from ledgerly.schemas.customer import CustomerCreate, CustomerDetail, CustomerRead, CustomerSalesSummary, CustomerUpdate


def get_customer_or_404(db: Session, *, user_id: int, customer_id: int) -> Customer:
    customer = customers_repo.get_customer(db, user_id=user_id, customer_id=customer_id)
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def list_customers(db: Session, *, user_id: int, page: int, page_size: int) -> Tuple[List[Customer], int]:
    return customers_repo.list_customers(db, user_id=user_id, page=page, page_size=page_size)


def get_customer_detail(db: Session, *, user_id: int, customer_id: int) -> CustomerDetail:
    customer = get_customer_or_404(db, user_id=user_id, customer_id=customer_id)
    invoiced, paid = customers_repo.sales_totals(db, user_id=user_id, customer_id=customer.id)
    return CustomerDetail(
        **CustomerRead.model_validate(customer).model_dump(),
        project_count=customers_repo.count_projects(db, user_id=user_id, customer_id=customer.id),
        sales=CustomerSalesSummary(total_invoiced=invoiced, total_paid=paid, unpaid=invoiced - paid),
    )


def create_customer(db: Session, *, user: User, payload: CustomerCreate) -> Customer:
    customer = Customer(user_id=user.id, **payload.model_dump())
    return customers_repo.add_customer(db, customer)


def update_customer(db: Session, *, user: User, customer_id: int, payload: CustomerUpdate) -> Customer:
    customer = get_customer_or_404(db, user_id=user.id, customer_id=customer_id)
    for field, value in payload.model_dump().items():
        setattr(customer, field, value)
    db.add(customer)
    db.flush()
    return customer


def delete_customer(db: Session, *, user: User, customer_id: int) -> None:
    customer = get_customer_or_404(db, user_id=user.id, customer_id=customer_id)
    if customers_repo.count_projects(db, user_id=user.id, customer_id=customer.id):
        raise ConflictError("Customer has projects and cannot be deleted")
    customer.soft_delete()
    db.add(customer)
    db.flush()
