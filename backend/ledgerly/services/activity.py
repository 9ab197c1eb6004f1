from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ledgerly.models.audit import ActivityLog

USER_SIGNUP = "USER_SIGNUP"
SIGNUP_ATTEMPT = "SIGNUP_ATTEMPT"
USER_LOGIN = "USER_LOGIN"
USER_LOGIN_FAILED = "USER_LOGIN_FAILED"
USER_LOGOUT = "USER_LOGOUT"
INVOICE_CREATED = "INVOICE_CREATED"
INVOICE_UPDATED = "INVOICE_UPDATED"
INVOICE_DELETED = "INVOICE_DELETED"
PAYMENT_REGISTERED = "PAYMENT_REGISTERED"
PAYMENT_DELETED = "PAYMENT_DELETED"


def log_activity(
    db: Session,
    *,
    actor_user_id: Optional[int],
    activity_type: str,
    subject: Optional[str] = None,
    message: Optional[str] = None,
    payload: Optional[dict] = None,
) -> ActivityLog:
    activity = ActivityLog(
        actor_user_id=actor_user_id,
        type=activity_type,
        subject=subject,
        message=message,
        payload_json=payload,
    )
    db.add(activity)
    db.flush()
    return activity


def count_recent_activity(
    db: Session,
    *,
    activity_type: str,
    subject: str,
    window: timedelta,
    now: Optional[datetime] = None,
) -> int:
    """Count activity rows of one type for a subject inside the trailing window."""
    since = (now or datetime.now(timezone.utc)) - window
    return (
        db.query(func.count(ActivityLog.id))
        .filter(
            ActivityLog.type == activity_type,
            ActivityLog.subject == subject,
            ActivityLog.created_at >= since,
        )
        .scalar()
        or 0
    )
