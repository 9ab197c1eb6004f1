from __future__ import annotations

from sqlalchemy.orm import Session

from ledgerly.models.user import User, UserSettings
from ledgerly.repositories import user_settings as user_settings_repo
from ledgerly.schemas.settings import UserSettingsUpdate


def get_user_settings(db: Session, *, user: User) -> UserSettings:
    return user_settings_repo.get_or_create_settings(db, user_id=user.id)


def update_user_settings(db: Session, *, user: User, payload: UserSettingsUpdate) -> UserSettings:
    row = user_settings_repo.get_or_create_settings(db, user_id=user.id)
    for field, value in payload.model_dump().items():
        setattr(row, field, value)
    db.add(row)
    db.flush()
    return row
