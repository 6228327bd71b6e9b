import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

from app.models.enums import CostType, RecordType
from app.schemas.common import ORMModel


class RecordCreateRequest(BaseModel):
    date: dt.date
    type: RecordType
    amount: Decimal = Field(ge=0)
    category: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    cost_type: CostType | None = None


class RecordUpdateRequest(BaseModel):
    date: dt.date | None = None
    type: RecordType | None = None
    amount: Decimal | None = Field(default=None, ge=0)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=1000)
    cost_type: CostType | None = None


class RecordOut(ORMModel):
    id: int
    project_id: str
    user_id: str
    date: dt.date
    type: RecordType
    amount: Decimal
    category: str
    cost_type: CostType | None
    description: str
    deleted_at: dt.datetime | None
