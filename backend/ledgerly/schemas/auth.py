from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from ledgerly.core.security import password_problems
from ledgerly.schemas.base import ORMModel


class UserRead(ORMModel):
    id: int
    email: EmailStr
    name: Optional[str] = None
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime


class SignupRequest(ORMModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., max_length=128)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        problems = password_problems(value)
        if problems:
            raise ValueError(problems[0])
        return value


class Token(ORMModel):
    access_token: str
    token_type: str = "bearer"


class LoginResponse(Token):
    user: UserRead
