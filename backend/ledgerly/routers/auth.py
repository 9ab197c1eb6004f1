from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from ledgerly.core.deps import get_current_user, get_request_token
from ledgerly.core.settings import settings
from ledgerly.db.session import get_db
from ledgerly.models.user import User
from ledgerly.schemas.auth import LoginResponse, SignupRequest, UserRead
from ledgerly.services import accounts

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )


@router.post("/signup", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
) -> LoginResponse:
    user = accounts.signup(db, payload=payload, client_ip=_client_ip(request))
    db.commit()
    db.refresh(user)
    token = accounts.issue_token(user)
    _set_session_cookie(response, token)
    return LoginResponse(access_token=token, user=UserRead.model_validate(user))


@router.post("/login", response_model=LoginResponse)
def login(
    request: Request,
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
) -> LoginResponse:
    user = accounts.authenticate(
        db,
        email=form_data.username,
        password=form_data.password,
        client_ip=_client_ip(request),
    )
    db.commit()
    db.refresh(user)
    token = accounts.issue_token(user)
    _set_session_cookie(response, token)
    return LoginResponse(access_token=token, user=UserRead.model_validate(user))


@router.post("/logout", response_model=dict)
def logout(
    response: Response,
    token: Optional[str] = Depends(get_request_token),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Revoke the current access token, ending the session."""
    accounts.logout(db, user=current_user, token=token)
    db.commit()
    response.delete_cookie(settings.session_cookie_name, path="/")
    return {"status": "ok", "message": "Logged out successfully"}


@router.get("/me", response_model=UserRead)
def get_me(current_user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(current_user)
