from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Date, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledgerly.db.base import Base, IDMixin, SoftDeleteMixin, TimestampMixin
from ledgerly.models.enums import PaymentMethod


DEFAULT_CATEGORY_COLOR = "#6B7280"


class ExpenseCategory(IDMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "expense_categories"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(20), default=DEFAULT_CATEGORY_COLOR, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    user: Mapped["User"] = relationship(back_populates="expense_categories")
    expenses: Mapped[List["Expense"]] = relationship(back_populates="category")


class Expense(IDMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "expenses"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("expense_categories.id"), nullable=False, index=True)
    project_id: Mapped[Optional[int]] = mapped_column(ForeignKey("projects.id"), nullable=True, index=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod, name="payment_method"),
        default=PaymentMethod.BANK_TRANSFER,
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    category: Mapped[ExpenseCategory] = relationship(back_populates="expenses")
    project: Mapped[Optional["Project"]] = relationship(back_populates="expenses")

    @property
    def category_name(self) -> Optional[str]:
        if self.category:
            return self.category.name
        return None

    @property
    def project_name(self) -> Optional[str]:
        if self.project:
            return self.project.name
        return None
