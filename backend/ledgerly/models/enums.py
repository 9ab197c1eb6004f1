from __future__ import annotations

from enum import StrEnum


class InvoiceStatus(StrEnum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    PAID = "PAID"


class PaymentMethod(StrEnum):
    BANK_TRANSFER = "BANK_TRANSFER"
    CREDIT_CARD = "CREDIT_CARD"
    CASH = "CASH"
    OTHER = "OTHER"


class ProjectStatus(StrEnum):
    PROSPECT = "PROSPECT"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    LOST = "LOST"


class ContractType(StrEnum):
    FIXED = "FIXED"
    HOURLY = "HOURLY"
    COMMISSION = "COMMISSION"
