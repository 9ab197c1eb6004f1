"""Logout-driven session revocation.

A session is the signed JWT a user holds, sent as a bearer token or in the
session cookie. Logging out stores a SHA-256 digest of it, tagged with the
owning user, until the token would have expired on its own. Every worker
reads the same table, so a logout holds across the whole deployment.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone
from typing import Optional

from jose.exceptions import ExpiredSignatureError
from sqlalchemy.orm import Session

from ledgerly.core.security import decode_token, token_expiry
from ledgerly.models.revoked_token import RevokedToken

logger = logging.getLogger("security")


def session_digest(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _find(db: Session, token: str) -> Optional[RevokedToken]:
    return db.query(RevokedToken).filter(RevokedToken.token_hash == session_digest(token)).first()


def revoke_session(db: Session, *, user_id: int, token: str) -> bool:
    """End `user_id`'s session for `token`.

    Returns False when nothing was stored: the token already expired, or it
    was revoked earlier.
    """
    try:
        expires_at = token_expiry(decode_token(token))
    except ExpiredSignatureError:
        return False
    if _find(db, token) is not None:
        return False

    db.add(
        RevokedToken(
            user_id=user_id,
            token_hash=session_digest(token),
            expires_at=expires_at,
            revoked_at=datetime.now(timezone.utc),
        )
    )
    db.flush()
    logger.info("session_revoked", extra={"user_id": user_id})
    return True


def is_session_revoked(db: Session, token: str) -> bool:
    entry = _find(db, token)
    if entry is None:
        return False
    # Past expiry the JWT is rejected on its own; the row only waits for a purge.
    return _utc(entry.expires_at) > datetime.now(timezone.utc)


def purge_expired_sessions(db: Session, *, now: Optional[datetime] = None) -> int:
    """Delete revocations whose tokens have expired. Returns the number removed."""
    cutoff = now or datetime.now(timezone.utc)
    count = db.query(RevokedToken).filter(RevokedToken.expires_at <= cutoff).delete(synchronize_session=False)
    db.flush()
    if count:
        logger.info("revoked_sessions_purged count=%s", count)
    return count
