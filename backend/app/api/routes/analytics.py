from decimal import Decimal

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_allocation_repository, get_record_repository, get_record_source
from app.core.config import Settings, get_settings
from app.db.repository import AllocationRepository, FinancialRecordRepository
from app.models.enums import PeriodGranularity
from app.schemas.analytics import (
    FinancialSummaryResponse,
    MetricsResponse,
    PeriodOut,
    PeriodsResponse,
    TrendPointOut,
    TrendsResponse,
    TrendSummaryOut,
)
from app.services import metrics as calculators
from app.services.periods import aggregate_records, available_years
from app.services.reports import build_financial_summary, summary_payload
from app.services.sources import TieredRecordSource
from app.services.trends import analyze_trends


router = APIRouter(tags=["analytics"])


def project_budget(allocations: AllocationRepository, project_id: str, budget: Decimal | None) -> Decimal:
    if budget is not None:
        return budget
    latest = allocations.latest(project_id)
    return latest.total_budget if latest is not None else Decimal("0")


@router.get("/projects/{project_id}/analytics/periods", response_model=PeriodsResponse)
def get_periods(
    project_id: str,
    granularity: PeriodGranularity = PeriodGranularity.monthly,
    year: int | None = None,
    quarter: int | None = None,
    records: FinancialRecordRepository = Depends(get_record_repository),
) -> PeriodsResponse:
    rows = records.load(project_id)
    periods = aggregate_records(rows, granularity, year=year, quarter=quarter)
    return PeriodsResponse(
        project_id=project_id,
        granularity=granularity,
        available_years=available_years(rows),
        periods=[PeriodOut.model_validate(row) for row in periods],
    )


@router.get("/projects/{project_id}/analytics/trends", response_model=TrendsResponse)
def get_trends(
    project_id: str,
    granularity: PeriodGranularity = PeriodGranularity.monthly,
    year: int | None = None,
    quarter: int | None = None,
    forecast_periods: int | None = Query(default=None, ge=0, le=24),
    threshold: Decimal | None = Query(default=None, gt=0),
    source: TieredRecordSource = Depends(get_record_source),
    settings: Settings = Depends(get_settings),
) -> TrendsResponse:
    loaded = source.load(project_id)
    periods = aggregate_records(loaded.records, granularity, year=year, quarter=quarter)
    analysis = analyze_trends(
        periods,
        forecast_periods=settings.forecast_periods if forecast_periods is None else forecast_periods,
        anomaly_threshold=threshold or settings.anomaly_z_threshold,
    )
    return TrendsResponse(
        project_id=project_id,
        granularity=granularity,
        source=loaded.source,
        points=[TrendPointOut.model_validate(row) for row in analysis.points],
        summary=TrendSummaryOut.model_validate(analysis.summary),
    )


@router.get("/projects/{project_id}/analytics/summary", response_model=FinancialSummaryResponse)
def get_summary(
    project_id: str,
    budget: Decimal | None = Query(default=None, ge=0),
    source: TieredRecordSource = Depends(get_record_source),
    allocations: AllocationRepository = Depends(get_allocation_repository),
) -> FinancialSummaryResponse:
    loaded = source.load(project_id)
    summary = build_financial_summary(
        project_id,
        loaded.records,
        budget=project_budget(allocations, project_id, budget),
    )
    return FinancialSummaryResponse(source=loaded.source, **summary_payload(summary))


@router.get("/analytics/metrics", response_model=MetricsResponse)
def get_metrics(
    marketing_spend: Decimal = Decimal("0"),
    new_customers: Decimal = Decimal("0"),
    average_revenue_per_customer: Decimal = Decimal("0"),
    retention_rate: Decimal = Decimal("0"),
    cash_balance: Decimal = Decimal("0"),
    total_expenses: Decimal = Decimal("0"),
    month_count: Decimal = Decimal("0"),
    lost_customers: Decimal = Decimal("0"),
    starting_customers: Decimal = Decimal("0"),
    investment: Decimal | None = None,
    returns: Decimal | None = None,
    fixed_costs: Decimal | None = None,
    price_per_unit: Decimal | None = None,
    variable_cost_per_unit: Decimal | None = None,
    revenue: Decimal | None = None,
    multiple: Decimal | None = None,
) -> MetricsResponse:
    result = calculators.build_metrics(
        marketing_spend=marketing_spend,
        new_customers=new_customers,
        average_revenue_per_customer=average_revenue_per_customer,
        retention_rate=retention_rate,
        cash_balance=cash_balance,
        total_expenses=total_expenses,
        month_count=month_count,
        lost_customers=lost_customers,
        starting_customers=starting_customers,
    )
    roi = None
    if investment is not None and returns is not None:
        roi = calculators.calculate_roi(investment, returns)
    break_even = None
    if fixed_costs is not None and price_per_unit is not None and variable_cost_per_unit is not None:
        break_even = calculators.calculate_break_even_units(fixed_costs, price_per_unit, variable_cost_per_unit)
    valuation = None
    if revenue is not None and multiple is not None:
        valuation = calculators.calculate_valuation(revenue, multiple)
    return MetricsResponse(
        cac=result.cac,
        ltv=result.ltv,
        ltv_cac_ratio=result.ltv_cac_ratio,
        cash_runway=result.cash_runway,
        burn_rate=result.burn_rate,
        churn_rate=result.churn_rate,
        roi=roi,
        break_even_units=break_even,
        valuation=valuation,
    )
