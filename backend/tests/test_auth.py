from __future__ import annotations

from ledgerly.core.settings import settings
from ledgerly.models.audit import ActivityLog
from ledgerly.models.expense import ExpenseCategory
from ledgerly.models.user import User
from ledgerly.services.activity import SIGNUP_ATTEMPT, USER_LOGIN_FAILED, log_activity

PASSWORD = "Password123"


def _signup(client, email="freelancer@ledgerly.com", password=PASSWORD):
    return client.post("/api/auth/signup", json={"name": "Sam Freelancer", "email": email, "password": password})


def _login(client, email="freelancer@ledgerly.com", password=PASSWORD):
    return client.post("/api/auth/login", data={"username": email, "password": password})


def test_signup_creates_user_with_default_categories(anon_client, db):
    response = _signup(anon_client, email="Freelancer@Ledgerly.com")
    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "freelancer@ledgerly.com"
    assert settings.session_cookie_name in response.cookies

    user = db.query(User).filter(User.email == "freelancer@ledgerly.com").one()
    assert db.query(ExpenseCategory).filter(ExpenseCategory.user_id == user.id).count() == 10


def test_signup_rejects_weak_password(anon_client):
    response = _signup(anon_client, password="short")
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION"
    assert response.json()["detail"].startswith("password:")


def test_signup_rejects_duplicate_email(anon_client):
    assert _signup(anon_client).status_code == 201
    response = _signup(anon_client)
    assert response.status_code == 422
    assert response.json()["detail"] == "Email is already registered"


def test_signup_is_rate_limited_per_client(anon_client, db):
    for _ in range(settings.signup_max_attempts):
        log_activity(db, actor_user_id=None, activity_type=SIGNUP_ATTEMPT, subject="ip:testclient")
    db.commit()

    response = _signup(anon_client)
    assert response.status_code == 429
    assert response.json()["code"] == "TOO_MANY_REQUESTS"


def test_login_me_logout_flow(anon_client):
    _signup(anon_client)
    anon_client.cookies.clear()

    response = _login(anon_client)
    assert response.status_code == 200
    token = response.json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    me = anon_client.get("/api/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["email"] == "freelancer@ledgerly.com"
    assert me.json()["last_login_at"] is not None

    assert anon_client.post("/api/auth/logout", headers=headers).status_code == 200

    revoked = anon_client.get("/api/auth/me", headers=headers)
    assert revoked.status_code == 401
    assert revoked.json()["code"] == "UNAUTHORIZED"


def test_session_cookie_authenticates(anon_client):
    _signup(anon_client)
    assert anon_client.get("/api/auth/me").status_code == 200
    assert anon_client.get("/api/customers").status_code == 200


def test_wrong_password_is_unauthorized_and_logged(anon_client, db):
    _signup(anon_client)
    response = _login(anon_client, password="Wrong-pass1")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"

    failures = db.query(ActivityLog).filter(ActivityLog.type == USER_LOGIN_FAILED).all()
    assert len(failures) == 1
    assert failures[0].payload_json["email"] == "freelancer@ledgerly.com"


def test_login_locked_after_repeated_failures(anon_client):
    _signup(anon_client)
    for _ in range(settings.login_max_attempts):
        assert _login(anon_client, password="Wrong-pass1").status_code == 401

    assert _login(anon_client).status_code == 429


def test_protected_route_requires_token(anon_client):
    response = anon_client.get("/api/invoices")
    assert response.status_code == 401
    assert response.json() == {"detail": "Not authenticated", "code": "UNAUTHORIZED"}


def test_garbage_token_is_rejected(anon_client):
    response = anon_client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
