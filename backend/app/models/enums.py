import enum


class RecordType(str, enum.Enum):
    income = "income"
    expense = "expense"


class CostType(str, enum.Enum):
    fixed = "fixed"
    variable = "variable"


class PeriodGranularity(str, enum.Enum):
    monthly = "monthly"
    quarterly = "quarterly"
    annual = "annual"


class AllocationStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    distributed = "distributed"


class FundCategory(str, enum.Enum):
    # declaration order is the display order
    technology = "Technology"
    growth = "Growth"
    team = "Team"
    marketing = "Marketing"
    emergency = "Emergency"
    investments = "Investments"

    @classmethod
    def parse(cls, value: "str | FundCategory") -> "FundCategory":
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for member in cls:
            if text.lower() in {member.name, member.value.lower()}:
                return member
        raise ValueError(f"Unknown fund category: {value!r}")


class DepletionStatus(str, enum.Enum):
    healthy = "healthy"
    warning = "warning"
    critical = "critical"


class AnomalyMetric(str, enum.Enum):
    income = "income"
    expense = "expense"
    profit = "profit"


class AnomalyDirection(str, enum.Enum):
    spike = "spike"
    dip = "dip"


class NoticeKind(str, enum.Enum):
    low_threshold = "low_threshold"
    depleted = "depleted"
