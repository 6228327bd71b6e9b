from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, Field

from app.models.enums import AnomalyDirection, AnomalyMetric, PeriodGranularity
from app.schemas.common import ORMModel


class PeriodOut(ORMModel):
    granularity: PeriodGranularity
    label: str
    start_date: date
    end_date: date
    income: Decimal
    expense: Decimal
    profit: Decimal


class PeriodsResponse(BaseModel):
    project_id: str
    granularity: PeriodGranularity
    available_years: list[int]
    periods: list[PeriodOut]


class TrendPointOut(ORMModel):
    period: str
    income: Decimal
    expense: Decimal
    profit: Decimal
    income_growth: Decimal
    expense_growth: Decimal
    profit_growth: Decimal
    is_anomaly: bool
    anomaly_type: AnomalyMetric | None
    anomaly_direction: AnomalyDirection | None
    is_forecast: bool
    forecasted_income: Decimal | None
    forecasted_expense: Decimal | None
    forecasted_profit: Decimal | None


class TrendSummaryOut(ORMModel):
    average_income: Decimal
    average_expense: Decimal
    average_profit: Decimal
    anomaly_count: int
    historical_count: int
    forecast_count: int


class TrendsResponse(BaseModel):
    project_id: str
    granularity: PeriodGranularity
    source: str
    points: list[TrendPointOut]
    summary: TrendSummaryOut


class CashFlowOut(BaseModel):
    month: str
    income: Decimal
    expenses: Decimal
    net: Decimal


class FinancialSummaryResponse(BaseModel):
    project_id: str
    source: str
    budget: Decimal
    spent: Decimal
    remaining: Decimal
    percentage_used: Decimal
    total_income: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    profit_margin: Decimal
    expenses_by_category: dict[str, Decimal]
    income_by_category: dict[str, Decimal]
    cash_flow: list[CashFlowOut]
    transaction_count: int


# calculators return Decimal("Infinity") for undefined ratios
MetricValue = Annotated[Decimal, Field(allow_inf_nan=True)]


class MetricsResponse(BaseModel):
    cac: MetricValue
    ltv: MetricValue
    ltv_cac_ratio: MetricValue
    cash_runway: MetricValue
    burn_rate: MetricValue
    churn_rate: MetricValue
    roi: MetricValue | None = None
    break_even_units: MetricValue | None = None
    valuation: MetricValue | None = None
