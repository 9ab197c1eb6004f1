from __future__ import annotations

import datetime as dt
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from ledgerly.models.enums import PaymentMethod
from ledgerly.schemas.base import ORMModel
from ledgerly.schemas.common import PageMeta


class ExpenseBase(ORMModel):
    category_id: int
    project_id: Optional[int] = None
    amount: Decimal = Field(..., ge=Decimal("1"), max_digits=12, decimal_places=2)
    date: dt.date
    payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    description: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=1000)


class ExpenseCreate(ExpenseBase):
    pass


class ExpenseUpdate(ExpenseBase):
    pass


class ExpenseRead(ExpenseBase):
    id: int
    category_name: Optional[str] = None
    project_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ExpenseListResponse(PageMeta):
    items: List[ExpenseRead]


class ExpenseCategoryBase(ORMModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(default="#6B7280", pattern=r"^#[0-9A-Fa-f]{6}$")
    sort_order: int = Field(default=0, ge=0)


class ExpenseCategoryCreate(ExpenseCategoryBase):
    pass


class ExpenseCategoryUpdate(ExpenseCategoryBase):
    pass


class ExpenseCategoryRead(ExpenseCategoryBase):
    id: int
    created_at: datetime
