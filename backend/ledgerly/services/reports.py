"""Read-side aggregation for the dashboard and the reports endpoints.

Every figure is scoped to one user and ignores soft-deleted rows. Nothing is
cached: each call re-scans the rows for the requested window.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ledgerly.core.errors import ValidationError
from ledgerly.models.customer import Customer
from ledgerly.models.enums import InvoiceStatus
from ledgerly.models.expense import DEFAULT_CATEGORY_COLOR, Expense, ExpenseCategory
from ledgerly.models.invoice import Invoice, Payment
from ledgerly.models.project import Project
from ledgerly.schemas.report import (
    Dashboard,
    ExpenseBreakdownRow,
    MonthlySummary,
    ProjectSalesRow,
    RecentExpense,
    RecentInvoice,
    TrendPoint,
)

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")
MAX_TREND_MONTHS = 24
RECENT_LIMIT = 5
TWOPLACES = Decimal("0.01")


def _q(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _shift_month_start(value: date, delta_months: int) -> date:
    month_index = (value.year * 12 + (value.month - 1)) + delta_months
    year = month_index // 12
    month = (month_index % 12) + 1
    return date(year, month, 1)


def _month_key(value: date) -> str:
    return value.strftime("%Y-%m")


def month_bounds(month: str) -> Tuple[date, date]:
    """Parse YYYY-MM into [first day, first day of next month)."""
    match = _MONTH_RE.match(month or "")
    if not match or not 1 <= int(match.group(2)) <= 12:
        raise ValidationError("month must be in YYYY-MM format")
    start = date(int(match.group(1)), int(match.group(2)), 1)
    return start, _shift_month_start(start, 1)


def _sum(value) -> Decimal:
    return _q(Decimal(value or 0))


def _revenue(db: Session, *, user_id: int, start: date, end: date) -> Decimal:
    total = (
        db.query(func.sum(Payment.amount))
        .join(Invoice, Invoice.id == Payment.invoice_id)
        .filter(
            Invoice.user_id == user_id,
            Invoice.deleted_at.is_(None),
            Payment.deleted_at.is_(None),
            Payment.paid_at >= start,
            Payment.paid_at < end,
        )
        .scalar()
    )
    return _sum(total)


def _billed(db: Session, *, user_id: int, start: date, end: date) -> Decimal:
    total = (
        db.query(func.sum(Invoice.total_amount))
        .filter(
            Invoice.user_id == user_id,
            Invoice.deleted_at.is_(None),
            Invoice.due_at >= start,
            Invoice.due_at < end,
        )
        .scalar()
    )
    return _sum(total)


def _expenses(db: Session, *, user_id: int, start: date, end: date) -> Decimal:
    total = (
        db.query(func.sum(Expense.amount))
        .filter(
            Expense.user_id == user_id,
            Expense.deleted_at.is_(None),
            Expense.date >= start,
            Expense.date < end,
        )
        .scalar()
    )
    return _sum(total)


def _unpaid(db: Session, *, user_id: int) -> Decimal:
    total = (
        db.query(func.sum(Invoice.total_amount - Invoice.paid_amount))
        .filter(
            Invoice.user_id == user_id,
            Invoice.deleted_at.is_(None),
            Invoice.status.in_([InvoiceStatus.SENT, InvoiceStatus.PAID]),
        )
        .scalar()
    )
    return _sum(total)


def monthly_summary(db: Session, *, user_id: int, month: Optional[str] = None, today: Optional[date] = None) -> MonthlySummary:
    month = month or _month_key(today or date.today())
    start, end = month_bounds(month)
    revenue = _revenue(db, user_id=user_id, start=start, end=end)
    expenses = _expenses(db, user_id=user_id, start=start, end=end)
    return MonthlySummary(
        month=month,
        revenue=revenue,
        billed_amount=_billed(db, user_id=user_id, start=start, end=end),
        expenses=expenses,
        profit=revenue - expenses,
        unpaid_amount=_unpaid(db, user_id=user_id),
    )


def monthly_trend(db: Session, *, user_id: int, months: int = 6, today: Optional[date] = None) -> List[TrendPoint]:
    if not 1 <= months <= MAX_TREND_MONTHS:
        raise ValidationError(f"months must be between 1 and {MAX_TREND_MONTHS}")
    current = (today or date.today()).replace(day=1)
    points: List[TrendPoint] = []
    for offset in range(months - 1, -1, -1):
        start = _shift_month_start(current, -offset)
        end = _shift_month_start(start, 1)
        revenue = _revenue(db, user_id=user_id, start=start, end=end)
        expenses = _expenses(db, user_id=user_id, start=start, end=end)
        points.append(TrendPoint(month=_month_key(start), revenue=revenue, expenses=expenses, profit=revenue - expenses))
    return points


def expense_breakdown(db: Session, *, user_id: int, month: Optional[str] = None) -> List[ExpenseBreakdownRow]:
    amount = func.sum(Expense.amount)
    query = (
        db.query(
            ExpenseCategory.id,
            ExpenseCategory.name,
            ExpenseCategory.color,
            amount,
            func.count(Expense.id),
        )
        .join(ExpenseCategory, ExpenseCategory.id == Expense.category_id)
        .filter(Expense.user_id == user_id, Expense.deleted_at.is_(None))
    )
    if month:
        start, end = month_bounds(month)
        query = query.filter(Expense.date >= start, Expense.date < end)
    rows = query.group_by(ExpenseCategory.id, ExpenseCategory.name, ExpenseCategory.color).all()

    result = [
        ExpenseBreakdownRow(
            category_id=category_id,
            category_name=name,
            color=color or DEFAULT_CATEGORY_COLOR,
            amount=_sum(total),
            count=count,
        )
        for category_id, name, color, total, count in rows
    ]
    result.sort(key=lambda row: (-row.amount, row.category_name))
    return result


def project_sales(db: Session, *, user_id: int, month: Optional[str] = None) -> List[ProjectSalesRow]:
    query = (
        db.query(
            Project.id,
            Project.name,
            Customer.name,
            func.sum(Invoice.total_amount),
            func.sum(Invoice.paid_amount),
        )
        .join(Invoice, Invoice.project_id == Project.id)
        .outerjoin(Customer, Customer.id == Project.customer_id)
        .filter(Invoice.user_id == user_id, Invoice.deleted_at.is_(None))
    )
    if month:
        start, end = month_bounds(month)
        query = query.filter(Invoice.due_at >= start, Invoice.due_at < end)
    rows = query.group_by(Project.id, Project.name, Customer.name).all()

    result = []
    for project_id, project_name, customer_name, billed, paid in rows:
        billed, paid = _sum(billed), _sum(paid)
        result.append(
            ProjectSalesRow(
                project_id=project_id,
                project_name=project_name,
                customer_name=customer_name,
                total_billed=billed,
                total_paid=paid,
                unpaid_amount=billed - paid,
            )
        )
    result.sort(key=lambda row: (-row.total_billed, row.project_name))
    return result


def recent_invoices(db: Session, *, user_id: int, limit: int = RECENT_LIMIT) -> List[RecentInvoice]:
    invoices = (
        db.query(Invoice)
        .options(selectinload(Invoice.customer))
        .filter(Invoice.user_id == user_id, Invoice.deleted_at.is_(None))
        .order_by(Invoice.issued_at.desc(), Invoice.id.desc())
        .limit(limit)
        .all()
    )
    return [RecentInvoice.model_validate(invoice) for invoice in invoices]


def recent_expenses(db: Session, *, user_id: int, limit: int = RECENT_LIMIT) -> List[RecentExpense]:
    expenses = (
        db.query(Expense)
        .options(selectinload(Expense.category))
        .filter(Expense.user_id == user_id, Expense.deleted_at.is_(None))
        .order_by(Expense.created_at.desc(), Expense.id.desc())
        .limit(limit)
        .all()
    )
    return [RecentExpense.model_validate(expense) for expense in expenses]


def dashboard(db: Session, *, user_id: int, today: Optional[date] = None) -> Dashboard:
    today = today or date.today()
    month = _month_key(today)
    return Dashboard(
        summary=monthly_summary(db, user_id=user_id, month=month),
        trend=monthly_trend(db, user_id=user_id, today=today),
        expense_breakdown=expense_breakdown(db, user_id=user_id, month=month),
        recent_invoices=recent_invoices(db, user_id=user_id),
        recent_expenses=recent_expenses(db, user_id=user_id),
    )
