from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ENV", "test")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ledgerly.core.deps import get_current_user
from ledgerly.db.base import Base
from ledgerly.db.session import get_db
from ledgerly.main import app
from ledgerly.models.customer import Customer
from ledgerly.models.project import Project
from ledgerly.models.user import User
from ledgerly.services.expense_categories import create_default_categories


@pytest.fixture()
def db():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def user(db):
    owner = User(email="owner@ledgerly.com", hashed_password="not-used", name="Owner", is_active=True)
    db.add(owner)
    db.flush()
    create_default_categories(db, user_id=owner.id)
    db.commit()
    return owner


@pytest.fixture()
def other_user(db):
    other = User(email="other@ledgerly.com", hashed_password="not-used", name="Other", is_active=True)
    db.add(other)
    db.flush()
    create_default_categories(db, user_id=other.id)
    db.commit()
    return other


@pytest.fixture()
def customer(db, user):
    row = Customer(user_id=user.id, name="Acme Corp", contact_name="Jane Roe", email="billing@acme.io")
    db.add(row)
    db.commit()
    return row


@pytest.fixture()
def project(db, user, customer):
    row = Project(user_id=user.id, customer_id=customer.id, name="Website Redesign", contract_amount=Decimal("500000"))
    db.add(row)
    db.commit()
    return row


def _override_db(db):
    def override_get_db():
        try:
            yield db
        finally:
            pass

    return override_get_db


@pytest.fixture()
def client(db, user):
    app.dependency_overrides[get_db] = _override_db(db)
    app.dependency_overrides[get_current_user] = lambda: user

    client_instance = TestClient(app)
    try:
        yield client_instance
    finally:
        client_instance.close()
        app.dependency_overrides.clear()


@pytest.fixture()
def anon_client(db):
    """Client that goes through real token authentication."""
    app.dependency_overrides[get_db] = _override_db(db)

    client_instance = TestClient(app)
    try:
        yield client_instance
    finally:
        client_instance.close()
        app.dependency_overrides.clear()
