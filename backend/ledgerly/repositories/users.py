from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ledgerly.models.user import User


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def create_user(db: Session, *, email: str, name: str, hashed_password: str) -> User:
    user = User(email=email.strip().lower(), name=name, hashed_password=hashed_password, is_active=True)
    db.add(user)
    db.flush()
    return user
