from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ledgerly.core.deps import get_current_user
from ledgerly.db.session import get_db
from ledgerly.models.user import User
from ledgerly.schemas.settings import UserSettingsRead, UserSettingsUpdate
from ledgerly.services import user_settings as settings_service

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", response_model=UserSettingsRead)
def get_settings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserSettingsRead:
    row = settings_service.get_user_settings(db, user=current_user)
    db.commit()
    return UserSettingsRead.model_validate(row)


@router.put("", response_model=UserSettingsRead)
def update_settings(
    settings_in: UserSettingsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserSettingsRead:
    row = settings_service.update_user_settings(db, user=current_user, payload=settings_in)
    db.commit()
    return UserSettingsRead.model_validate(row)
