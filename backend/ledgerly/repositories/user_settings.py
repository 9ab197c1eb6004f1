from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from ledgerly.models.user import UserSettings


def get_settings(db: Session, *, user_id: int) -> Optional[UserSettings]:
    return db.query(UserSettings).filter(UserSettings.user_id == user_id).first()


def get_or_create_settings(db: Session, *, user_id: int) -> UserSettings:
    row = get_settings(db, user_id=user_id)
    if row is None:
        row = UserSettings(user_id=user_id)
        db.add(row)
        db.flush()
    return row
