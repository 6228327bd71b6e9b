from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from app.models.enums import AnomalyDirection, AnomalyMetric, PeriodGranularity
from app.services.anomalies import DEFAULT_Z_THRESHOLD, classify_period_anomalies
from app.services.forecasting import DEFAULT_FORECAST_PERIODS, forecast_linear_trend
from app.services.growth import period_over_period_growth
from app.services.periods import FinancialPeriod, advance_period_start, period_label
from app.utils.decimal_math import money, pct


@dataclass(frozen=True)
class TrendPoint:
    period: str
    income: Decimal
    expense: Decimal
    profit: Decimal
    income_growth: Decimal
    expense_growth: Decimal
    profit_growth: Decimal
    is_anomaly: bool = False
    anomaly_type: AnomalyMetric | None = None
    anomaly_direction: AnomalyDirection | None = None
    is_forecast: bool = False
    forecasted_income: Decimal | None = None
    forecasted_expense: Decimal | None = None
    forecasted_profit: Decimal | None = None


@dataclass(frozen=True)
class TrendSummary:
    average_income: Decimal
    average_expense: Decimal
    average_profit: Decimal
    anomaly_count: int
    historical_count: int
    forecast_count: int


@dataclass(frozen=True)
class TrendAnalysis:
    points: list[TrendPoint]
    summary: TrendSummary

    @property
    def historical(self) -> list[TrendPoint]:
        return [row for row in self.points if not row.is_forecast]

    @property
    def forecast(self) -> list[TrendPoint]:
        return [row for row in self.points if row.is_forecast]


EMPTY_SUMMARY = TrendSummary(
    average_income=money(0),
    average_expense=money(0),
    average_profit=money(0),
    anomaly_count=0,
    historical_count=0,
    forecast_count=0,
)


def _average(values: list[Decimal]) -> Decimal:
    if not values:
        return money(0)
    return money(sum(values, Decimal("0")) / Decimal(len(values)))


def _forecast_point(
    label: str,
    income: Decimal,
    expense: Decimal,
    profit: Decimal,
) -> TrendPoint:
    return TrendPoint(
        period=label,
        income=money(0),
        expense=money(0),
        profit=money(0),
        income_growth=pct(0),
        expense_growth=pct(0),
        profit_growth=pct(0),
        is_forecast=True,
        forecasted_income=income,
        forecasted_expense=expense,
        forecasted_profit=profit,
    )


def analyze_trends(
    periods: list[FinancialPeriod],
    *,
    forecast_periods: int = DEFAULT_FORECAST_PERIODS,
    anomaly_threshold: Decimal | float | str = DEFAULT_Z_THRESHOLD,
) -> TrendAnalysis:
    if not periods:
        return TrendAnalysis(points=[], summary=EMPTY_SUMMARY)

    ordered = sorted(periods, key=lambda row: row.start_date)
    incomes = [row.income for row in ordered]
    expenses = [row.expense for row in ordered]
    profits = [row.profit for row in ordered]

    growth = period_over_period_growth(ordered)
    flagged = classify_period_anomalies(incomes, expenses, profits, anomaly_threshold)

    points: list[TrendPoint] = []
    for index, period in enumerate(ordered):
        anomaly = flagged.get(index)
        points.append(
            TrendPoint(
                period=period.label,
                income=money(period.income),
                expense=money(period.expense),
                profit=money(period.profit),
                income_growth=growth[index].income,
                expense_growth=growth[index].expense,
                profit_growth=growth[index].profit,
                is_anomaly=anomaly is not None,
                anomaly_type=anomaly.metric if anomaly else None,
                anomaly_direction=anomaly.direction if anomaly else None,
            )
        )

    income_forecast = forecast_linear_trend(incomes, forecast_periods)
    expense_forecast = forecast_linear_trend(expenses, forecast_periods)
    profit_forecast = forecast_linear_trend(profits, forecast_periods)

    last = ordered[-1]
    granularity = PeriodGranularity(last.granularity)
    for step in range(forecast_periods):
        start = advance_period_start(last.start_date, granularity, step + 1)
        points.append(
            _forecast_point(
                period_label(start, granularity),
                income_forecast[step],
                expense_forecast[step],
                profit_forecast[step],
            )
        )

    summary = TrendSummary(
        average_income=_average(incomes),
        average_expense=_average(expenses),
        average_profit=_average(profits),
        anomaly_count=len(flagged),
        historical_count=len(ordered),
        forecast_count=forecast_periods,
    )
    return TrendAnalysis(points=points, summary=summary)
