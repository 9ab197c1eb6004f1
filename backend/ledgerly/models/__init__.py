"""Import all models so SQLAlchemy metadata is fully registered."""

from ledgerly.models.audit import ActivityLog
from ledgerly.models.customer import Customer
from ledgerly.models.enums import ContractType, InvoiceStatus, PaymentMethod, ProjectStatus
from ledgerly.models.expense import Expense, ExpenseCategory
from ledgerly.models.invoice import Invoice, InvoiceItem, Payment
from ledgerly.models.project import Project
from ledgerly.models.revoked_token import RevokedToken
from ledgerly.models.user import User, UserSettings

__all__ = [
    "ActivityLog",
    "ContractType",
    "Customer",
    "Expense",
    "ExpenseCategory",
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
    "Payment",
    "PaymentMethod",
    "Project",
    "ProjectStatus",
    "RevokedToken",
    "User",
    "UserSettings",
]
