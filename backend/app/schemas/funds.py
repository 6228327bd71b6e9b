from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.models.enums import AllocationStatus, DepletionStatus, FundCategory, NoticeKind
from app.schemas.common import ORMModel


class DistributeRequest(BaseModel):
    total_budget: Decimal = Field(ge=0)
    # keyed by fund category name or value, case-insensitive
    percentages: dict[str, Decimal]


class CategoryUpdateRequest(BaseModel):
    allocation_category: str


class FundOut(ORMModel):
    id: int | None
    name: FundCategory
    balance: Decimal
    allocated: Decimal
    percentage: Decimal
    purpose: str
    allocation_category: FundCategory
    remaining_percentage: Decimal
    status: DepletionStatus


class ThresholdNoticeOut(ORMModel):
    fund: FundCategory
    kind: NoticeKind
    percentage: Decimal
    message: str


class AllocationOut(BaseModel):
    id: int | None
    project_id: str | None
    user_id: str
    total_budget: Decimal
    allocations: dict[str, Decimal]
    status: AllocationStatus
    created_at: datetime
    notifications: list[ThresholdNoticeOut]


class DistributionResponse(BaseModel):
    allocation: AllocationOut
    funds: list[FundOut]
