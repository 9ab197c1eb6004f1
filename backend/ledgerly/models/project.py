from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Date, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledgerly.db.base import Base, IDMixin, SoftDeleteMixin, TimestampMixin
from ledgerly.models.enums import ContractType, ProjectStatus


class Project(IDMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "projects"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    contract_type: Mapped[ContractType] = mapped_column(
        Enum(ContractType, name="contract_type"),
        default=ContractType.FIXED,
        nullable=False,
    )
    contract_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    hourly_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    status: Mapped[ProjectStatus] = mapped_column(
        Enum(ProjectStatus, name="project_status"),
        default=ProjectStatus.PROSPECT,
        nullable=False,
        index=True,
    )

    customer: Mapped["Customer"] = relationship(back_populates="projects")
    invoices: Mapped[List["Invoice"]] = relationship(back_populates="project")
    expenses: Mapped[List["Expense"]] = relationship(back_populates="project")

    @property
    def customer_name(self) -> Optional[str]:
        if self.customer:
            return self.customer.name
        return None
