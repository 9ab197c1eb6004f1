from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ledgerly.core.deps import get_current_user
from ledgerly.db.session import get_db
from ledgerly.models.user import User
from ledgerly.schemas.report import Dashboard, ExpenseBreakdownRow, MonthlySummary, ProjectSalesRow, TrendPoint
from ledgerly.services import reports as report_service

router = APIRouter(prefix="/api/reports", tags=["reports"])
dashboard_router = APIRouter(prefix="/api/dashboard", tags=["reports"])

_MONTH = Query(None, description="Month in YYYY-MM format")


@router.get("/summary", response_model=MonthlySummary)
def monthly_summary(
    month: Optional[str] = _MONTH,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MonthlySummary:
    return report_service.monthly_summary(db, user_id=current_user.id, month=month)


@router.get("/trend", response_model=List[TrendPoint])
def monthly_trend(
    months: int = Query(6, ge=1, le=report_service.MAX_TREND_MONTHS),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[TrendPoint]:
    return report_service.monthly_trend(db, user_id=current_user.id, months=months)


@router.get("/expense-breakdown", response_model=List[ExpenseBreakdownRow])
def expense_breakdown(
    month: Optional[str] = _MONTH,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[ExpenseBreakdownRow]:
    return report_service.expense_breakdown(db, user_id=current_user.id, month=month)


@router.get("/project-sales", response_model=List[ProjectSalesRow])
def project_sales(
    month: Optional[str] = _MONTH,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[ProjectSalesRow]:
    return report_service.project_sales(db, user_id=current_user.id, month=month)


@dashboard_router.get("", response_model=Dashboard)
def dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Dashboard:
    return report_service.dashboard(db, user_id=current_user.id)
