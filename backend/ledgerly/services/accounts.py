"""Signup, login and logout flows.

Attempt counters are activity-log rows, so limits hold across every worker
sharing the database.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from ledgerly.core.errors import TooManyRequestsError, UnauthorizedError, ValidationError
from ledgerly.core.security import create_access_token, get_password_hash, verify_password
from ledgerly.core.settings import settings
from ledgerly.core.sessions import revoke_session
from ledgerly.models.audit import ActivityLog
from ledgerly.models.user import User
from ledgerly.repositories import users as users_repo
from ledgerly.schemas.auth import SignupRequest
from ledgerly.services.activity import (
    SIGNUP_ATTEMPT,
    USER_LOGIN,
    USER_LOGIN_FAILED,
    USER_LOGOUT,
    USER_SIGNUP,
    count_recent_activity,
    log_activity,
)
from ledgerly.services.expense_categories import create_default_categories

logger = logging.getLogger("security")


def _log_auth_event(event: str, **extra) -> None:
    logger.info(json.dumps({"event": event, **extra}, default=str))


def login_rate_limited(db: Session, *, email: str, client_ip: str) -> bool:
    window_start = datetime.now(timezone.utc) - timedelta(minutes=settings.login_window_minutes)
    recent = (
        db.query(ActivityLog)
        .filter(
            ActivityLog.type == USER_LOGIN_FAILED,
            ActivityLog.created_at >= window_start,
        )
        .order_by(ActivityLog.created_at.desc())
        .limit(200)
        .all()
    )
    hits = 0
    for log in recent:
        payload = log.payload_json or {}
        if payload.get("email") == email or payload.get("ip") == client_ip:
            hits += 1
    return hits >= settings.login_max_attempts


def signup(db: Session, *, payload: SignupRequest, client_ip: str) -> User:
    attempts = count_recent_activity(
        db,
        activity_type=SIGNUP_ATTEMPT,
        subject=f"ip:{client_ip}",
        window=timedelta(minutes=settings.signup_window_minutes),
    )
    if attempts >= settings.signup_max_attempts:
        _log_auth_event("signup_rate_limited", ip=client_ip)
        raise TooManyRequestsError("Too many signup attempts, try again later")

    log_activity(db, actor_user_id=None, activity_type=SIGNUP_ATTEMPT, subject=f"ip:{client_ip}")
    if users_repo.get_user_by_email(db, payload.email):
        db.commit()
        raise ValidationError("Email is already registered")

    user = users_repo.create_user(
        db,
        email=payload.email,
        name=payload.name,
        hashed_password=get_password_hash(payload.password),
    )
    create_default_categories(db, user_id=user.id)
    log_activity(db, actor_user_id=user.id, activity_type=USER_SIGNUP, message="User signed up")
    _log_auth_event("signup", user_id=user.id)
    return user


def authenticate(db: Session, *, email: str, password: str, client_ip: str) -> User:
    """Check credentials, recording failures; raises on failure or when rate limited."""
    email = email.strip().lower()
    user = users_repo.get_user_by_email(db, email)
    password_valid = bool(user and verify_password(password, user.hashed_password))
    rate_limited = login_rate_limited(db, email=email, client_ip=client_ip)

    if rate_limited:
        _log_auth_event("login_rate_limited", email=email, ip=client_ip)
        raise TooManyRequestsError("Too many login attempts")
    if not password_valid:
        log_activity(
            db,
            actor_user_id=None,
            activity_type=USER_LOGIN_FAILED,
            subject=f"email:{email}",
            message="Login failed",
            payload={"email": email, "ip": client_ip},
        )
        db.commit()
        _log_auth_event("login_failed", email=email, ip=client_ip)
        raise UnauthorizedError("Incorrect email or password")
    if not user.is_active:
        _log_auth_event("login_inactive", user_id=user.id)
        raise UnauthorizedError("User is inactive")

    now = datetime.now(timezone.utc)
    user.last_login_at = now
    db.add(user)
    log_activity(
        db,
        actor_user_id=user.id,
        activity_type=USER_LOGIN,
        message="User logged in",
        payload={"at": now.isoformat()},
    )
    return user


def issue_token(user: User) -> str:
    return create_access_token({"sub": str(user.id)})


def logout(db: Session, *, user: User, token: Optional[str]) -> None:
    """Revoke the presented token until it would have expired anyway."""
    if token:
        revoke_session(db, user_id=user.id, token=token)
    log_activity(db, actor_user_id=user.id, activity_type=USER_LOGOUT, message="User logged out")
    _log_auth_event("logout", user_id=user.id)
