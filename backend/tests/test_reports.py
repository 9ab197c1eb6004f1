from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledgerly.core.errors import ValidationError
from ledgerly.models.enums import InvoiceStatus
from ledgerly.models.expense import Expense, ExpenseCategory
from ledgerly.models.invoice import Invoice, Payment
from ledgerly.models.project import Project
from ledgerly.services import reports as report_service


def _invoice(db, user, project, number, *, total, due_at, paid="0", status=InvoiceStatus.SENT):
    invoice = Invoice(
        user_id=user.id,
        customer_id=project.customer_id,
        project_id=project.id,
        invoice_number=number,
        issued_at=due_at.replace(day=1),
        due_at=due_at,
        status=status,
        total_amount=Decimal(total),
        paid_amount=Decimal(paid),
    )
    db.add(invoice)
    db.flush()
    return invoice


def _payment(db, user, invoice, amount, paid_at):
    db.add(Payment(invoice_id=invoice.id, user_id=user.id, amount=Decimal(amount), paid_at=paid_at))
    db.flush()


def _expense(db, user, category, amount, spent_on, description=None):
    db.add(Expense(user_id=user.id, category_id=category.id, amount=Decimal(amount), date=spent_on, description=description))
    db.flush()


def _category(db, user, name):
    return db.query(ExpenseCategory).filter(ExpenseCategory.user_id == user.id, ExpenseCategory.name == name).one()


@pytest.fixture()
def march_books(db, user, project):
    first = _invoice(db, user, project, "INV-1", total="300000", due_at=date(2025, 3, 15), paid="100000")
    second = _invoice(db, user, project, "INV-2", total="200000", due_at=date(2025, 3, 31), paid="150000")
    _payment(db, user, first, "100000", date(2025, 3, 5))
    _payment(db, user, second, "150000", date(2025, 3, 28))

    travel = _category(db, user, "Travel")
    rent = _category(db, user, "Rent")
    _expense(db, user, travel, "50000", date(2025, 3, 12), "Train")
    _expense(db, user, rent, "30000", date(2025, 3, 1), "Office")
    db.commit()
    return first, second


def test_monthly_summary(db, user, march_books):
    summary = report_service.monthly_summary(db, user_id=user.id, month="2025-03")

    assert summary.revenue == Decimal("250000")
    assert summary.billed_amount == Decimal("500000")
    assert summary.expenses == Decimal("80000")
    assert summary.profit == Decimal("170000")
    assert summary.unpaid_amount == Decimal("250000")


def test_summary_ignores_other_months_and_deleted_rows(db, user, project, march_books):
    later = _invoice(db, user, project, "INV-3", total="90000", due_at=date(2025, 4, 10))
    _payment(db, user, later, "10000", date(2025, 4, 2))
    march_books[0].payments[0].soft_delete()
    db.commit()

    summary = report_service.monthly_summary(db, user_id=user.id, month="2025-03")
    assert summary.revenue == Decimal("150000")

    april = report_service.monthly_summary(db, user_id=user.id, month="2025-04")
    assert april.revenue == Decimal("10000")
    assert april.billed_amount == Decimal("90000")
    assert april.expenses == Decimal("0")


def test_unpaid_skips_drafts(db, user, project):
    _invoice(db, user, project, "INV-D", total="40000", due_at=date(2025, 3, 1), status=InvoiceStatus.DRAFT)
    db.commit()
    summary = report_service.monthly_summary(db, user_id=user.id, month="2025-03")
    assert summary.unpaid_amount == Decimal("0")
    assert summary.billed_amount == Decimal("40000")


def test_monthly_trend_oldest_first(db, user, march_books):
    points = report_service.monthly_trend(db, user_id=user.id, months=3, today=date(2025, 4, 18))

    assert [point.month for point in points] == ["2025-02", "2025-03", "2025-04"]
    assert points[1].revenue == Decimal("250000")
    assert points[1].profit == Decimal("170000")
    assert points[0].revenue == Decimal("0")
    assert points[2].expenses == Decimal("0")


def test_trend_crosses_year_boundary(db, user):
    points = report_service.monthly_trend(db, user_id=user.id, months=4, today=date(2025, 2, 3))
    assert [point.month for point in points] == ["2024-11", "2024-12", "2025-01", "2025-02"]


def test_trend_rejects_bad_window(db, user):
    with pytest.raises(ValidationError):
        report_service.monthly_trend(db, user_id=user.id, months=0)


def test_expense_breakdown_sorted_by_amount(db, user, march_books):
    rows = report_service.expense_breakdown(db, user_id=user.id, month="2025-03")

    assert [row.category_name for row in rows] == ["Travel", "Rent"]
    assert rows[0].amount == Decimal("50000")
    assert rows[0].count == 1
    assert rows[0].color == "#3B82F6"


def test_project_sales_groups_by_project(db, user, customer, project, march_books):
    side = Project(user_id=user.id, customer_id=customer.id, name="Maintenance")
    db.add(side)
    db.flush()
    _invoice(db, user, side, "INV-9", total="20000", due_at=date(2025, 3, 20), paid="20000", status=InvoiceStatus.PAID)
    db.commit()

    rows = report_service.project_sales(db, user_id=user.id, month="2025-03")

    assert [row.project_name for row in rows] == ["Website Redesign", "Maintenance"]
    assert rows[0].total_billed == Decimal("500000")
    assert rows[0].total_paid == Decimal("250000")
    assert rows[0].unpaid_amount == Decimal("250000")
    assert rows[0].customer_name == "Acme Corp"
    assert rows[1].unpaid_amount == Decimal("0")


def test_reports_are_scoped_to_user(db, other_user, march_books):
    summary = report_service.monthly_summary(db, user_id=other_user.id, month="2025-03")
    assert summary.revenue == Decimal("0")
    assert report_service.project_sales(db, user_id=other_user.id) == []


@pytest.mark.parametrize("month", ["2025-13", "2025-3", "march", ""])
def test_month_bounds_rejects_bad_input(month):
    with pytest.raises(ValidationError):
        report_service.month_bounds(month)


def test_month_bounds_december():
    assert report_service.month_bounds("2024-12") == (date(2024, 12, 1), date(2025, 1, 1))


def test_summary_endpoint(client, march_books):
    response = client.get("/api/reports/summary", params={"month": "2025-03"})
    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["revenue"]) == Decimal("250000")
    assert Decimal(body["profit"]) == Decimal("170000")

    bad = client.get("/api/reports/summary", params={"month": "2025/03"})
    assert bad.status_code == 422
    assert bad.json()["code"] == "VALIDATION"


def test_dashboard_endpoint(client, march_books):
    response = client.get("/api/dashboard")
    assert response.status_code == 200
    body = response.json()
    assert len(body["trend"]) == 6
    assert [row["invoice_number"] for row in body["recent_invoices"]] == ["INV-2", "INV-1"]
    assert len(body["recent_expenses"]) == 2


def test_report_endpoints_list(client, march_books):
    breakdown = client.get("/api/reports/expense-breakdown", params={"month": "2025-03"}).json()
    assert [row["category_name"] for row in breakdown] == ["Travel", "Rent"]

    sales = client.get("/api/reports/project-sales").json()
    assert len(sales) == 1

    trend = client.get("/api/reports/trend", params={"months": 25})
    assert trend.status_code == 422
