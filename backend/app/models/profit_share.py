from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class ProfitShare(Base):
    __tablename__ = "profit_shares"
    __table_args__ = (UniqueConstraint("project_id", "member_id", name="uq_profit_share_member"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    project_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    member_id: Mapped[str] = mapped_column(String(100), nullable=False)
    member_name: Mapped[str] = mapped_column(String(255), nullable=False)
    percentage: Mapped[Decimal] = mapped_column(Numeric(9, 6), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(24, 2), nullable=False)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
