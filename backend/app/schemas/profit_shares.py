from decimal import Decimal

from pydantic import BaseModel

from app.schemas.common import ORMModel


class ProfitShareIn(BaseModel):
    member_id: str
    member_name: str
    # range checks happen in the service so the error names the member
    percentage: Decimal
    amount: Decimal


class ProfitShareOut(ORMModel):
    member_id: str
    member_name: str
    percentage: Decimal
    amount: Decimal
    project_id: str | None
    user_id: str


class ProfitSharesUpdateRequest(BaseModel):
    shares: list[ProfitShareIn]
    total_revenue: Decimal | None = None


class FromAvailabilityRequest(BaseModel):
    total_revenue: Decimal
    equal_split: bool = False


class ProfitSharesResponse(BaseModel):
    project_id: str
    total_percentage: Decimal
    shares: list[ProfitShareOut]
