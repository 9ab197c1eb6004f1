from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from ledgerly.core.errors import UnauthorizedError
from ledgerly.core.logging import bind_log_context
from ledgerly.core.security import decode_token
from ledgerly.core.settings import settings
from ledgerly.core.sessions import is_session_revoked
from ledgerly.db.session import get_db
from ledgerly.models.user import User
from ledgerly.repositories import users as users_repo

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)
logger = logging.getLogger("security")


def _log_auth_event(event: str, *, request: Request, extra: Optional[dict] = None) -> None:
    payload = {
        "event": event,
        "request_id": request.headers.get("x-request-id"),
        "path": request.url.path,
        "method": request.method,
        "client": request.client.host if request.client else None,
    }
    if extra:
        payload.update(extra)
    logger.info(json.dumps(payload, default=str))


def get_request_token(request: Request, bearer: Optional[str] = Security(oauth2_scheme)) -> Optional[str]:
    """Bearer header first, then the HTTP-only session cookie."""
    if bearer:
        return bearer
    return request.cookies.get(settings.session_cookie_name) or None


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(get_request_token),
    db: Session = Depends(get_db),
) -> User:
    if not token:
        _log_auth_event("token_missing", request=request)
        raise UnauthorizedError("Not authenticated")

    if is_session_revoked(db, token):
        _log_auth_event("token_revoked", request=request)
        raise UnauthorizedError()

    try:
        payload = decode_token(token)
        raw_user_id: Optional[int | str] = payload.get("sub")
        if raw_user_id is None:
            _log_auth_event("token_missing_sub", request=request)
            raise UnauthorizedError()
        user_id = int(raw_user_id)
    except (JWTError, ValueError, TypeError):
        _log_auth_event("token_invalid", request=request)
        raise UnauthorizedError()

    user = users_repo.get_user(db, user_id)
    if not user or not user.is_active:
        _log_auth_event("user_inactive_or_missing", request=request, extra={"user_id": user_id})
        raise UnauthorizedError()
    bind_log_context(user_id=user.id)
    return user
