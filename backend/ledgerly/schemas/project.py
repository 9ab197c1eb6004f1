from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, model_validator

from ledgerly.models.enums import ContractType, ProjectStatus
from ledgerly.schemas.base import ORMModel
from ledgerly.schemas.common import PageMeta


class ProjectBase(ORMModel):
    customer_id: int
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    contract_type: ContractType = ContractType.FIXED
    contract_amount: Optional[Decimal] = Field(default=None, ge=Decimal("0"), max_digits=12, decimal_places=2)
    hourly_rate: Optional[Decimal] = Field(default=None, ge=Decimal("0"), max_digits=12, decimal_places=2)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: ProjectStatus = ProjectStatus.PROSPECT

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(ProjectBase):
    pass


class ProjectRead(ProjectBase):
    id: int
    customer_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProjectInvoiceSummary(ORMModel):
    total_billed: Decimal
    total_paid: Decimal
    unpaid: Decimal


class ProjectDetail(ProjectRead):
    invoice_count: int = 0
    invoices: ProjectInvoiceSummary


class ProjectListResponse(PageMeta):
    items: List[ProjectRead]
