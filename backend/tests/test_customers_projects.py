from __future__ import annotations

from decimal import Decimal

from ledgerly.models.customer import Customer


def _create_customer(client, **overrides):
    payload = {"name": "Globex", "contact_name": "Hank", "email": "hank@globex.io", "phone": "555-0100"}
    payload.update(overrides)
    return client.post("/api/customers", json=payload)


def _create_project(client, customer_id, **overrides):
    payload = {
        "customer_id": customer_id,
        "name": "Data Migration",
        "contract_type": "HOURLY",
        "hourly_rate": 9000,
        "start_date": "2025-01-06",
        "status": "IN_PROGRESS",
    }
    payload.update(overrides)
    return client.post("/api/projects", json=payload)


def test_customer_crud(client):
    created = _create_customer(client)
    assert created.status_code == 201
    customer_id = created.json()["id"]

    updated = client.put(f"/api/customers/{customer_id}", json={"name": "Globex Inc", "email": ""})
    assert updated.status_code == 200
    assert updated.json()["name"] == "Globex Inc"
    assert updated.json()["email"] is None

    listing = client.get("/api/customers").json()
    assert [row["name"] for row in listing["items"]] == ["Globex Inc"]

    assert client.delete(f"/api/customers/{customer_id}").status_code == 204
    assert client.get(f"/api/customers/{customer_id}").status_code == 404


def test_customer_email_is_validated(client):
    response = _create_customer(client, email="not-an-email")
    assert response.status_code == 422
    assert response.json()["detail"].startswith("email:")


def test_customer_with_projects_cannot_be_deleted(client, customer, project):
    response = client.delete(f"/api/customers/{customer.id}")
    assert response.status_code == 409
    assert response.json() == {"detail": "Customer has projects and cannot be deleted", "code": "CONFLICT"}


def test_customer_detail_sales_summary(client, customer, project):
    invoice = client.post(
        "/api/invoices",
        json={
            "customer_id": customer.id,
            "project_id": project.id,
            "issued_at": "2025-03-01",
            "items": [{"description": "Phase 1", "quantity": 1, "unit_price": 70000}],
        },
    ).json()
    client.post(f"/api/invoices/{invoice['id']}/payments", json={"amount": 20000, "paid_at": "2025-03-15"})

    detail = client.get(f"/api/customers/{customer.id}").json()
    assert detail["project_count"] == 1
    assert Decimal(detail["sales"]["total_invoiced"]) == Decimal("70000")
    assert Decimal(detail["sales"]["total_paid"]) == Decimal("20000")
    assert Decimal(detail["sales"]["unpaid"]) == Decimal("50000")


def test_project_crud(client, customer):
    created = _create_project(client, customer.id)
    assert created.status_code == 201
    body = created.json()
    assert body["customer_name"] == "Acme Corp"
    assert body["contract_type"] == "HOURLY"

    updated = client.put(
        f"/api/projects/{body['id']}",
        json={"customer_id": customer.id, "name": "Data Migration v2", "status": "COMPLETED"},
    )
    assert updated.status_code == 200
    assert updated.json()["status"] == "COMPLETED"

    detail = client.get(f"/api/projects/{body['id']}").json()
    assert detail["invoice_count"] == 0
    assert Decimal(detail["invoices"]["total_billed"]) == Decimal("0")

    assert client.delete(f"/api/projects/{body['id']}").status_code == 204
    assert client.get(f"/api/projects/{body['id']}").status_code == 404


def test_project_dates_must_be_ordered(client, customer):
    response = _create_project(client, customer.id, end_date="2024-12-31")
    assert response.status_code == 422


def test_project_requires_own_customer(client, db, other_user):
    foreign = Customer(user_id=other_user.id, name="Foreign")
    db.add(foreign)
    db.commit()

    response = _create_project(client, foreign.id)
    assert response.status_code == 404
    assert response.json()["detail"] == "Customer not found"


def test_project_with_invoices_cannot_be_deleted(client, customer, project):
    client.post(
        "/api/invoices",
        json={"customer_id": customer.id, "project_id": project.id, "issued_at": "2025-03-01", "items": []},
    )
    response = client.delete(f"/api/projects/{project.id}")
    assert response.status_code == 409


def test_project_list_filters_by_customer(client, customer, project):
    other = _create_customer(client).json()
    _create_project(client, other["id"])

    body = client.get("/api/projects", params={"customer_id": customer.id}).json()
    assert body["total"] == 1
    assert body["items"][0]["name"] == "Website Redesign"
