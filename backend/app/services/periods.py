from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from app.core.errors import ValidationError
from app.models.enums import PeriodGranularity, RecordType
from app.services.records import FinancialRecordData, active_records
from app.utils.decimal_math import money


MONTHS_PER_UNIT = {
    PeriodGranularity.monthly: 1,
    PeriodGranularity.quarterly: 3,
    PeriodGranularity.annual: 12,
}


@dataclass(frozen=True)
class FinancialPeriod:
    granularity: PeriodGranularity
    start_date: date
    end_date: date
    income: Decimal
    expense: Decimal

    @property
    def profit(self) -> Decimal:
        return money(self.income - self.expense)

    @property
    def label(self) -> str:
        return period_label(self.start_date, self.granularity)


def _quarter_of(value: date) -> int:
    return (value.month - 1) // 3 + 1


def period_start(value: date, granularity: PeriodGranularity) -> date:
    if granularity == PeriodGranularity.monthly:
        return date(value.year, value.month, 1)
    if granularity == PeriodGranularity.quarterly:
        return date(value.year, (_quarter_of(value) - 1) * 3 + 1, 1)
    return date(value.year, 1, 1)


def advance_period_start(start: date, granularity: PeriodGranularity, steps: int = 1) -> date:
    month_index = start.year * 12 + (start.month - 1) + MONTHS_PER_UNIT[granularity] * steps
    return date(month_index // 12, month_index % 12 + 1, 1)


def period_end(start: date, granularity: PeriodGranularity) -> date:
    last_month_start = advance_period_start(start, PeriodGranularity.monthly, MONTHS_PER_UNIT[granularity] - 1)
    last_day = calendar.monthrange(last_month_start.year, last_month_start.month)[1]
    return date(last_month_start.year, last_month_start.month, last_day)


def period_label(start: date, granularity: PeriodGranularity) -> str:
    if granularity == PeriodGranularity.monthly:
        return start.strftime("%b %y")
    if granularity == PeriodGranularity.quarterly:
        return f"Q{_quarter_of(start)} {start.year}"
    return str(start.year)


def filter_records(
    records: Iterable[FinancialRecordData],
    *,
    year: int | None = None,
    quarter: int | None = None,
) -> list[FinancialRecordData]:
    if quarter is not None and quarter not in (1, 2, 3, 4):
        raise ValidationError(f"quarter must be between 1 and 4 (got {quarter}).", field="quarter")
    rows = active_records(list(records))
    if year is not None:
        rows = [row for row in rows if row.date.year == year]
        if quarter is not None:
            rows = [row for row in rows if _quarter_of(row.date) == quarter]
    return rows


def aggregate_records(
    records: Iterable[FinancialRecordData],
    granularity: PeriodGranularity | str = PeriodGranularity.monthly,
    *,
    year: int | None = None,
    quarter: int | None = None,
) -> list[FinancialPeriod]:
    try:
        granularity = PeriodGranularity(granularity)
    except ValueError as exc:
        raise ValidationError(
            "granularity must be one of monthly, quarterly, annual.", field="granularity"
        ) from exc

    totals: dict[date, dict[str, Decimal]] = {}
    for record in filter_records(records, year=year, quarter=quarter):
        bucket = totals.setdefault(
            period_start(record.date, granularity),
            {"income": money(0), "expense": money(0)},
        )
        key = "income" if record.type == RecordType.income else "expense"
        bucket[key] = money(bucket[key] + money(record.amount))

    return [
        FinancialPeriod(
            granularity=granularity,
            start_date=start,
            end_date=period_end(start, granularity),
            income=values["income"],
            expense=values["expense"],
        )
        for start, values in sorted(totals.items())
    ]


def available_years(records: Iterable[FinancialRecordData]) -> list[int]:
    return sorted({row.date.year for row in active_records(list(records))}, reverse=True)


def validate_period_consistency(
    monthly_periods: list[FinancialPeriod],
    quarterly_periods: list[FinancialPeriod],
    *,
    tolerance: Decimal = Decimal("0.01"),
) -> bool:
    """Check that every quarter equals the sum of the months it spans."""
    for quarter in quarterly_periods:
        months = [
            row
            for row in monthly_periods
            if quarter.start_date <= row.start_date <= quarter.end_date
        ]
        income = sum((row.income for row in months), Decimal("0"))
        expense = sum((row.expense for row in months), Decimal("0"))
        if abs(quarter.income - income) > tolerance or abs(quarter.expense - expense) > tolerance:
            return False
    return True
