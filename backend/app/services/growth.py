from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from app.services.periods import FinancialPeriod
from app.utils.decimal_math import HUNDRED, pct


@dataclass(frozen=True)
class PeriodGrowth:
    income: Decimal
    expense: Decimal
    profit: Decimal


ZERO_GROWTH = PeriodGrowth(income=pct(0), expense=pct(0), profit=pct(0))


def growth_rate(current: Decimal, previous: Decimal) -> Decimal:
    """Percentage change from ``previous`` to ``current``.

    A zero baseline cannot be divided by: growth out of nothing reads as +100%
    and nothing-to-nothing reads as 0%.
    """
    current = Decimal(str(current))
    previous = Decimal(str(previous))
    if previous == 0:
        return pct(100) if current > 0 else pct(0)
    return pct((current - previous) / abs(previous) * HUNDRED)


def _between(current: FinancialPeriod, previous: FinancialPeriod) -> PeriodGrowth:
    return PeriodGrowth(
        income=growth_rate(current.income, previous.income),
        expense=growth_rate(current.expense, previous.expense),
        profit=growth_rate(current.profit, previous.profit),
    )


def period_over_period_growth(periods: list[FinancialPeriod]) -> list[PeriodGrowth]:
    ordered = sorted(periods, key=lambda row: row.start_date)
    rows: list[PeriodGrowth] = []
    for index, period in enumerate(ordered):
        rows.append(ZERO_GROWTH if index == 0 else _between(period, ordered[index - 1]))
    return rows


def year_over_year_growth(
    current_periods: list[FinancialPeriod],
    previous_year_periods: list[FinancialPeriod],
) -> list[PeriodGrowth]:
    return [
        _between(current, previous)
        for current, previous in zip(current_periods, previous_year_periods)
    ]
