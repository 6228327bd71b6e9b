from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.enums import AllocationStatus, FundCategory


class BudgetAllocation(Base):
    __tablename__ = "budget_allocations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    project_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    total_budget: Mapped[Decimal] = mapped_column(Numeric(24, 2), nullable=False)
    # category value -> amount as a decimal string
    allocations: Mapped[dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[AllocationStatus] = mapped_column(
        Enum(AllocationStatus, name="allocation_status"),
        nullable=False,
        default=AllocationStatus.pending,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    funds: Mapped[list["FundAccount"]] = relationship("FundAccount", back_populates="allocation")


class FundAccount(Base):
    __tablename__ = "fund_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    project_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    allocation_id: Mapped[int | None] = mapped_column(
        ForeignKey("budget_allocations.id", ondelete="SET NULL"),
        nullable=True,
    )
    name: Mapped[FundCategory] = mapped_column(Enum(FundCategory, name="fund_category"), nullable=False)
    # exact split of the budget; see services.allocation.distribute
    balance: Mapped[Decimal] = mapped_column(Numeric(30, 10), nullable=False)
    allocated: Mapped[Decimal] = mapped_column(Numeric(30, 10), nullable=False, default=Decimal("0"))
    percentage: Mapped[Decimal] = mapped_column(Numeric(9, 6), nullable=False)
    purpose: Mapped[str] = mapped_column(Text, nullable=False, default="")
    allocation_category: Mapped[FundCategory] = mapped_column(
        Enum(FundCategory, name="fund_category"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    allocation: Mapped["BudgetAllocation | None"] = relationship("BudgetAllocation", back_populates="funds")
