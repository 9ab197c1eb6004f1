from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import List, Optional

from ledgerly.models.enums import InvoiceStatus
from ledgerly.schemas.base import ORMModel


class MonthlySummary(ORMModel):
    month: str
    revenue: Decimal
    billed_amount: Decimal
    expenses: Decimal
    profit: Decimal
    unpaid_amount: Decimal


class TrendPoint(ORMModel):
    month: str
    revenue: Decimal
    expenses: Decimal
    profit: Decimal


class ExpenseBreakdownRow(ORMModel):
    category_id: int
    category_name: str
    color: str
    amount: Decimal
    count: int


class ProjectSalesRow(ORMModel):
    project_id: int
    project_name: str
    customer_name: Optional[str] = None
    total_billed: Decimal
    total_paid: Decimal
    unpaid_amount: Decimal


class RecentInvoice(ORMModel):
    id: int
    invoice_number: str
    customer_name: Optional[str] = None
    status: InvoiceStatus
    issued_at: dt.date
    total_amount: Decimal
    paid_amount: Decimal


class RecentExpense(ORMModel):
    id: int
    date: dt.date
    amount: Decimal
    category_name: Optional[str] = None
    description: Optional[str] = None


class Dashboard(ORMModel):
    summary: MonthlySummary
    trend: List[TrendPoint]
    expense_breakdown: List[ExpenseBreakdownRow]
    recent_invoices: List[RecentInvoice]
    recent_expenses: List[RecentExpense]
