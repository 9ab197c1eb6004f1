from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledgerly.core.errors import NotFoundError
from ledgerly.models.customer import Customer
from ledgerly.models.expense import ExpenseCategory
from ledgerly.models.project import Project
from ledgerly.schemas.expense import ExpenseCreate
from ledgerly.services import expenses as expense_service
from ledgerly.services.expense_categories import DEFAULT_CATEGORIES


@pytest.fixture()
def travel(db, user):
    return db.query(ExpenseCategory).filter(ExpenseCategory.user_id == user.id, ExpenseCategory.name == "Travel").one()


@pytest.fixture()
def foreign_project(db, other_user):
    foreign_customer = Customer(user_id=other_user.id, name="Not Mine")
    db.add(foreign_customer)
    db.flush()
    row = Project(user_id=other_user.id, customer_id=foreign_customer.id, name="Their Project")
    db.add(row)
    db.commit()
    return row


def _expense_payload(category_id, **overrides):
    payload = {
        "category_id": category_id,
        "amount": 12000,
        "date": "2025-03-12",
        "payment_method": "CREDIT_CARD",
        "description": "Client visit",
    }
    payload.update(overrides)
    return payload


def test_create_and_get_expense(client, travel, project):
    response = client.post("/api/expenses", json=_expense_payload(travel.id, project_id=project.id))
    assert response.status_code == 201
    body = response.json()
    assert body["category_name"] == "Travel"
    assert body["project_name"] == "Website Redesign"
    assert Decimal(body["amount"]) == Decimal("12000")

    fetched = client.get(f"/api/expenses/{body['id']}").json()
    assert fetched["description"] == "Client visit"
    assert fetched["payment_method"] == "CREDIT_CARD"


def test_nonexistent_category_is_not_found(db, user):
    payload = ExpenseCreate(category_id=9999, amount=Decimal("100"), date=date(2025, 3, 1))
    with pytest.raises(NotFoundError):
        expense_service.create_expense(db, user=user, payload=payload)


def test_other_users_project_is_not_found(client, travel, foreign_project):
    response = client.post("/api/expenses", json=_expense_payload(travel.id, project_id=foreign_project.id))
    assert response.status_code == 404
    assert response.json() == {"detail": "Project not found", "code": "NOT_FOUND"}


def test_other_users_category_is_not_found(client, db, other_user):
    their_category = db.query(ExpenseCategory).filter(ExpenseCategory.user_id == other_user.id).first()
    response = client.post("/api/expenses", json=_expense_payload(their_category.id))
    assert response.status_code == 404


def test_amount_below_one_is_rejected(client, travel):
    response = client.post("/api/expenses", json=_expense_payload(travel.id, amount=0))
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION"


def test_amount_is_limited_to_cents(client, travel):
    response = client.post("/api/expenses", json=_expense_payload(travel.id, amount="120.005"))
    assert response.status_code == 422
    assert response.json()["detail"].startswith("amount:")

    oversized = client.post("/api/expenses", json=_expense_payload(travel.id, amount="100000000000"))
    assert oversized.status_code == 422


def test_update_and_delete_expense(client, travel):
    created = client.post("/api/expenses", json=_expense_payload(travel.id)).json()

    updated = client.put(f"/api/expenses/{created['id']}", json=_expense_payload(travel.id, amount=15000))
    assert updated.status_code == 200
    assert Decimal(updated.json()["amount"]) == Decimal("15000")

    assert client.delete(f"/api/expenses/{created['id']}").status_code == 204
    assert client.get(f"/api/expenses/{created['id']}").status_code == 404


def test_list_expenses_filters_by_date(client, travel):
    client.post("/api/expenses", json=_expense_payload(travel.id, date="2025-02-10"))
    client.post("/api/expenses", json=_expense_payload(travel.id, date="2025-03-10"))

    body = client.get("/api/expenses", params={"date_from": "2025-03-01", "date_to": "2025-03-31"}).json()
    assert body["total"] == 1
    assert body["items"][0]["date"] == "2025-03-10"

    bad = client.get("/api/expenses", params={"date_from": "2025-04-01", "date_to": "2025-03-01"})
    assert bad.status_code == 422


def test_default_categories_listed_in_order(client):
    rows = client.get("/api/expense-categories").json()
    assert [row["name"] for row in rows] == [name for name, _ in DEFAULT_CATEGORIES]


def test_category_crud(client):
    created = client.post("/api/expense-categories", json={"name": "Software", "color": "#112233", "sort_order": 11})
    assert created.status_code == 201
    category_id = created.json()["id"]

    renamed = client.put(
        f"/api/expense-categories/{category_id}",
        json={"name": "Subscriptions", "color": "#112233", "sort_order": 11},
    )
    assert renamed.json()["name"] == "Subscriptions"

    assert client.delete(f"/api/expense-categories/{category_id}").status_code == 204
    names = [row["name"] for row in client.get("/api/expense-categories").json()]
    assert "Subscriptions" not in names


def test_category_color_must_be_hex(client):
    response = client.post("/api/expense-categories", json={"name": "Bad", "color": "red"})
    assert response.status_code == 422


def test_category_in_use_cannot_be_deleted(client, travel):
    client.post("/api/expenses", json=_expense_payload(travel.id))
    response = client.delete(f"/api/expense-categories/{travel.id}")
    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"
