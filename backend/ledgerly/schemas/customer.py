from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from ledgerly.schemas.base import ORMModel
from ledgerly.schemas.common import PageMeta, blank_to_none


class CustomerBase(ORMModel):
    name: str = Field(..., min_length=1, max_length=100)
    contact_name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("email", mode="before")
    @classmethod
    def empty_email(cls, value):
        return blank_to_none(value)


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(CustomerBase):
    pass


class CustomerRead(CustomerBase):
    id: int
    created_at: datetime
    updated_at: datetime


class CustomerSalesSummary(ORMModel):
    total_invoiced: Decimal
    total_paid: Decimal
    unpaid: Decimal


class CustomerDetail(CustomerRead):
    project_count: int = 0
    sales: CustomerSalesSummary


class CustomerListResponse(PageMeta):
    items: List[CustomerRead]
