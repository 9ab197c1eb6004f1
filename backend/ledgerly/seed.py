from __future__ import annotations

import argparse
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from ledgerly.core.security import get_password_hash
from ledgerly.core.settings import settings
from ledgerly.db.base import Base
from ledgerly.db.session import SessionLocal, engine
from ledgerly.models.enums import ContractType, InvoiceStatus, PaymentMethod, ProjectStatus
from ledgerly.models.user import User
from ledgerly.repositories import expense_categories as categories_repo
from ledgerly.repositories import users as users_repo
from ledgerly.schemas.customer import CustomerCreate
from ledgerly.schemas.expense import ExpenseCreate
from ledgerly.schemas.invoice import InvoiceCreate, InvoiceItemCreate, PaymentCreate
from ledgerly.schemas.project import ProjectCreate
from ledgerly.schemas.settings import UserSettingsUpdate
from ledgerly.services.customers import create_customer
from ledgerly.services.expense_categories import create_default_categories
from ledgerly.services.expenses import create_expense
from ledgerly.services.invoices import create_invoice
from ledgerly.services.payments import register_payment
from ledgerly.services.projects import create_project
from ledgerly.services.user_settings import update_user_settings

DEMO_EMAIL = "demo@ledgerly.com"
DEMO_PASSWORD = "Password123"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the Ledgerly database with demo data")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables before seeding")
    return parser.parse_args()


def reset_db() -> None:
    if settings.is_production:
        raise RuntimeError("Refusing to reset the database in production.")
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def get_or_create_demo_user(db: Session) -> User:
    user = users_repo.get_user_by_email(db, DEMO_EMAIL)
    if user:
        return user
    user = users_repo.create_user(
        db,
        email=DEMO_EMAIL,
        name="Demo User",
        hashed_password=get_password_hash(DEMO_PASSWORD),
    )
    create_default_categories(db, user_id=user.id)
    return user


def seed_demo_data(db: Session, user: User) -> None:
    update_user_settings(
        db,
        user=user,
        payload=UserSettingsUpdate(
            business_name="Demo Studio",
            representative_name="Demo User",
            postal_code="100-0001",
            address="1-1 Example Street, Tokyo",
            email=DEMO_EMAIL,
            bank_name="Example Bank",
            branch_name="Main Branch",
            account_type="Checking",
            account_number="1234567",
            account_holder="Demo Studio",
            invoice_prefix="INV",
            tax_rate=Decimal("0.10"),
            default_payment_days=30,
            invoice_notes="Thank you for your business.",
        ),
    )

    acme = create_customer(db, user=user, payload=CustomerCreate(name="Acme Corp", contact_name="Alice Tanaka", email="alice@acme.io"))
    globex = create_customer(db, user=user, payload=CustomerCreate(name="Globex Inc", contact_name="Bob Sato"))
    initech = create_customer(db, user=user, payload=CustomerCreate(name="Initech"))

    website = create_project(
        db,
        user=user,
        payload=ProjectCreate(
            customer_id=acme.id,
            name="Corporate website renewal",
            contract_type=ContractType.FIXED,
            contract_amount=Decimal("500000"),
            start_date=date(2025, 10, 1),
            status=ProjectStatus.IN_PROGRESS,
        ),
    )
    support = create_project(
        db,
        user=user,
        payload=ProjectCreate(
            customer_id=globex.id,
            name="Monthly support",
            contract_type=ContractType.HOURLY,
            hourly_rate=Decimal("8000"),
            start_date=date(2025, 11, 1),
            status=ProjectStatus.IN_PROGRESS,
        ),
    )
    create_project(
        db,
        user=user,
        payload=ProjectCreate(customer_id=initech.id, name="Data migration", contract_type=ContractType.COMMISSION),
    )

    first = create_invoice(
        db,
        user=user,
        payload=InvoiceCreate(
            customer_id=acme.id,
            project_id=website.id,
            status=InvoiceStatus.SENT,
            issued_at=date(2025, 11, 30),
            items=[
                InvoiceItemCreate(description="Design", quantity=Decimal("1"), unit_price=Decimal("200000")),
                InvoiceItemCreate(description="Implementation", quantity=Decimal("1"), unit_price=Decimal("300000")),
            ],
        ),
    )
    register_payment(
        db,
        user=user,
        invoice_id=first.id,
        payload=PaymentCreate(amount=Decimal("500000"), paid_at=date(2025, 12, 25)),
    )

    second = create_invoice(
        db,
        user=user,
        payload=InvoiceCreate(
            customer_id=globex.id,
            project_id=support.id,
            issued_at=date(2025, 12, 31),
            items=[
                InvoiceItemCreate(
                    description="Support hours (December)",
                    quantity=Decimal("1"),
                    hours=Decimal("12.5"),
                    unit_price=Decimal("8000"),
                ),
            ],
        ),
    )
    register_payment(
        db,
        user=user,
        invoice_id=second.id,
        payload=PaymentCreate(amount=Decimal("50000"), paid_at=date(2026, 1, 20), payment_method=PaymentMethod.CASH),
    )

    create_invoice(
        db,
        user=user,
        payload=InvoiceCreate(
            customer_id=globex.id,
            project_id=support.id,
            issued_at=date(2026, 1, 31),
            items=[
                InvoiceItemCreate(
                    description="Support hours (January)",
                    quantity=Decimal("1"),
                    hours=Decimal("10"),
                    unit_price=Decimal("8000"),
                ),
            ],
        ),
    )

    categories = {row.name: row for row in categories_repo.list_categories(db, user_id=user.id)}
    expenses = [
        ("Travel", Decimal("12000"), date(2025, 12, 5), "Client visit"),
        ("Communication", Decimal("8000"), date(2025, 12, 10), "Internet and phone"),
        ("Supplies", Decimal("30000"), date(2026, 1, 8), "Monitor"),
        ("Rent", Decimal("50000"), date(2026, 1, 25), "Office rent"),
    ]
    for category_name, amount, spent_on, description in expenses:
        create_expense(
            db,
            user=user,
            payload=ExpenseCreate(
                category_id=categories[category_name].id,
                project_id=website.id if category_name == "Travel" else None,
                amount=amount,
                date=spent_on,
                payment_method=PaymentMethod.CREDIT_CARD,
                description=description,
            ),
        )


def main() -> None:
    args = parse_args()
    if args.reset:
        reset_db()

    with SessionLocal() as db:
        exists = users_repo.get_user_by_email(db, DEMO_EMAIL)
        if exists and not args.reset:
            print("Seed appears to have already run. Use --reset to reseed.")
            return

        user = get_or_create_demo_user(db)
        seed_demo_data(db, user)
        db.commit()
        print("Seed complete.")
        print(f"Demo login: {DEMO_EMAIL} / {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
