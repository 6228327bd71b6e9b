from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, Enum, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.enums import CostType, RecordType


class FinancialRecord(Base):
    __tablename__ = "financial_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    project_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    record_date: Mapped[date] = mapped_column(Date, nullable=False)
    record_type: Mapped[RecordType] = mapped_column(
        Enum(RecordType, name="record_type"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(24, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    cost_type: Mapped[CostType | None] = mapped_column(Enum(CostType, name="cost_type"), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
