from app.models.enums import (
    AllocationStatus,
    CostType,
    FundCategory,
    PeriodGranularity,
    RecordType,
)
from app.models.fund import BudgetAllocation, FundAccount
from app.models.profit_share import ProfitShare
from app.models.record import FinancialRecord
from app.models.team import TeamMember

__all__ = [
    "AllocationStatus",
    "CostType",
    "FundCategory",
    "PeriodGranularity",
    "RecordType",
    "BudgetAllocation",
    "FundAccount",
    "ProfitShare",
    "FinancialRecord",
    "TeamMember",
]
