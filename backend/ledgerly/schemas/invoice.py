from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from ledgerly.models.enums import InvoiceStatus, PaymentMethod
from ledgerly.schemas.base import ORMModel
from ledgerly.schemas.common import PageMeta, blank_to_none


class InvoiceItemBase(ORMModel):
    description: str = Field(..., min_length=1, max_length=500)
    quantity: Decimal = Field(default=Decimal("1"), ge=Decimal("1"), max_digits=10, decimal_places=2)
    unit_price: Decimal = Field(default=Decimal("0"), ge=Decimal("0"), max_digits=12, decimal_places=2)
    hours: Optional[Decimal] = Field(default=None, ge=Decimal("0"), max_digits=8, decimal_places=2)


class InvoiceItemCreate(InvoiceItemBase):
    pass


class InvoiceItemRead(InvoiceItemBase):
    id: int
    amount: Decimal
    sort_order: int


class PaymentCreate(ORMModel):
    amount: Decimal = Field(..., gt=Decimal("0"), max_digits=12, decimal_places=2)
    paid_at: date
    payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    notes: Optional[str] = Field(default=None, max_length=1000)


class PaymentRead(ORMModel):
    id: int
    invoice_id: int
    amount: Decimal
    paid_at: date
    payment_method: PaymentMethod
    notes: Optional[str] = None
    created_at: datetime


class PaymentRegistered(ORMModel):
    payment: PaymentRead
    invoice_status: InvoiceStatus
    paid_amount: Decimal
    total_amount: Decimal


class InvoiceCreate(ORMModel):
    customer_id: int
    project_id: int
    invoice_number: Optional[str] = Field(default=None, max_length=50)
    status: InvoiceStatus = InvoiceStatus.DRAFT
    issued_at: date
    due_at: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=2000)
    items: List[InvoiceItemCreate] = Field(default_factory=list)

    @field_validator("invoice_number", mode="before")
    @classmethod
    def empty_number(cls, value):
        return blank_to_none(value)


class InvoiceUpdate(ORMModel):
    """Fields left as None keep their stored value; `items` replaces every line when given."""

    customer_id: Optional[int] = None
    project_id: Optional[int] = None
    invoice_number: Optional[str] = Field(default=None, max_length=50)
    status: Optional[InvoiceStatus] = None
    issued_at: Optional[date] = None
    due_at: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=2000)
    items: Optional[List[InvoiceItemCreate]] = None

    @field_validator("invoice_number", mode="before")
    @classmethod
    def empty_number(cls, value):
        return blank_to_none(value)


class InvoiceRead(ORMModel):
    id: int
    invoice_number: str
    customer_id: int
    customer_name: Optional[str] = None
    project_id: int
    project_name: Optional[str] = None
    status: InvoiceStatus
    issued_at: date
    due_at: date
    total_amount: Decimal
    paid_amount: Decimal
    balance_due: Decimal
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class InvoiceDetail(InvoiceRead):
    items: List[InvoiceItemRead] = Field(default_factory=list)
    payments: List[PaymentRead] = Field(default_factory=list)


class InvoiceListResponse(PageMeta):
    items: List[InvoiceRead]
