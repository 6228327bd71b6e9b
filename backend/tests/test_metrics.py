from decimal import Decimal

import pytest

from app.core.errors import ValidationError
from app.services.metrics import (
    build_metrics,
    calculate_break_even_units,
    calculate_burn_rate,
    calculate_cac,
    calculate_cash_runway,
    calculate_churn_rate,
    calculate_ltv,
    calculate_roi,
    calculate_valuation,
    ltv_cac_ratio,
)
from app.utils.decimal_math import INFINITY


def test_cac() -> None:
    assert calculate_cac(5000, 50) == Decimal("100")
    assert calculate_cac(5000, 0) == INFINITY


@pytest.mark.parametrize(
    ("retention", "expected"),
    [
        ("0.8", Decimal("500")),
        ("0", Decimal("0")),
        ("-0.2", Decimal("0")),
        ("1.5", Decimal("0")),
        ("1", INFINITY),
    ],
)
def test_ltv(retention: str, expected: Decimal) -> None:
    assert calculate_ltv(100, retention) == expected


def test_burn_runway_and_churn() -> None:
    assert calculate_burn_rate(12000, 6) == Decimal("2000")
    assert calculate_burn_rate(12000, 0) == Decimal("0")
    assert calculate_cash_runway(10000, 2000) == Decimal("5")
    assert calculate_cash_runway(10000, 0) == INFINITY
    assert calculate_churn_rate(5, 100) == Decimal("5")
    assert calculate_churn_rate(5, 0) == Decimal("0")


def test_roi_break_even_and_valuation() -> None:
    assert calculate_roi(1000, 1500) == Decimal("50")
    assert calculate_roi(0, 1500) == Decimal("0")
    assert calculate_break_even_units(1000, 30, 10) == Decimal("50")
    assert calculate_break_even_units(1001, 30, 10) == Decimal("51")
    assert calculate_break_even_units(1000, 10, 10) == INFINITY
    assert calculate_valuation(250000, "4.5") == Decimal("1125000")


def test_non_finite_inputs_rejected() -> None:
    with pytest.raises(ValidationError):
        calculate_cac("nan", 1)
    with pytest.raises(ValidationError):
        calculate_roi("abc", 1)


def test_build_metrics_uses_computed_burn() -> None:
    metrics = build_metrics(
        marketing_spend=1000,
        new_customers=10,
        average_revenue_per_customer=50,
        retention_rate="0.5",
        cash_balance=6000,
        total_expenses=6000,
        month_count=3,
        lost_customers=2,
        starting_customers=40,
    )
    assert metrics.cac == Decimal("100")
    assert metrics.ltv == Decimal("100")
    assert metrics.ltv_cac_ratio == Decimal("1")
    assert metrics.burn_rate == Decimal("2000")
    assert metrics.cash_runway == Decimal("3")
    assert metrics.churn_rate == Decimal("5")
    assert ltv_cac_ratio(Decimal("100"), INFINITY) == Decimal("0")
