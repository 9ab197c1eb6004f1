from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from ledgerly.schemas.base import ORMModel
from ledgerly.schemas.common import blank_to_none


class UserSettingsBase(ORMModel):
    business_name: Optional[str] = Field(default=None, max_length=255)
    representative_name: Optional[str] = Field(default=None, max_length=255)
    postal_code: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=1000)
    phone: Optional[str] = Field(default=None, max_length=50)
    email: Optional[EmailStr] = None
    bank_name: Optional[str] = Field(default=None, max_length=255)
    branch_name: Optional[str] = Field(default=None, max_length=255)
    account_type: Optional[str] = Field(default=None, max_length=50)
    account_number: Optional[str] = Field(default=None, max_length=50)
    account_holder: Optional[str] = Field(default=None, max_length=255)
    invoice_prefix: Optional[str] = Field(default=None, max_length=20, pattern=r"^[A-Za-z0-9_]+$")
    tax_rate: Optional[Decimal] = Field(default=None, ge=Decimal("0"), le=Decimal("1"), decimal_places=4)
    default_payment_days: Optional[int] = Field(default=None, gt=0)
    invoice_notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("email", "invoice_prefix", mode="before")
    @classmethod
    def empty_strings(cls, value):
        return blank_to_none(value)


class UserSettingsUpdate(UserSettingsBase):
    pass


class UserSettingsRead(UserSettingsBase):
    id: int
    user_id: int
