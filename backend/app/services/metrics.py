"""Business health calculators.

Division-by-zero cases return documented sentinels (``0`` or
``Decimal("Infinity")``) instead of raising; callers display them as-is.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from app.core.errors import ValidationError
from app.utils.decimal_math import HUNDRED, INFINITY, to_decimal


@dataclass(frozen=True)
class FinancialMetrics:
    cac: Decimal
    ltv: Decimal
    ltv_cac_ratio: Decimal
    cash_runway: Decimal
    burn_rate: Decimal
    churn_rate: Decimal


def _number(name: str, value: Any) -> Decimal:
    converted = to_decimal(value)
    if converted is None:
        raise ValidationError(f"{name} must be a finite number.", field=name)
    return converted


def calculate_cac(marketing_spend: Any, new_customers: Any) -> Decimal:
    spend = _number("marketing_spend", marketing_spend)
    customers = _number("new_customers", new_customers)
    if customers == 0:
        return INFINITY
    return spend / customers


def calculate_ltv(average_revenue_per_customer: Any, retention_rate: Any) -> Decimal:
    revenue = _number("average_revenue_per_customer", average_revenue_per_customer)
    retention = _number("retention_rate", retention_rate)
    if retention <= 0 or retention > 1:
        return Decimal("0")
    if retention == 1:
        return INFINITY
    return revenue / (1 - retention)


def calculate_cash_runway(cash_balance: Any, monthly_burn_rate: Any) -> Decimal:
    cash = _number("cash_balance", cash_balance)
    burn = _number("monthly_burn_rate", monthly_burn_rate)
    if burn <= 0:
        return INFINITY
    return cash / burn


def calculate_burn_rate(total_expenses: Any, month_count: Any) -> Decimal:
    expenses = _number("total_expenses", total_expenses)
    months = _number("month_count", month_count)
    if months <= 0:
        return Decimal("0")
    return expenses / months


def calculate_churn_rate(lost_customers: Any, starting_customers: Any) -> Decimal:
    lost = _number("lost_customers", lost_customers)
    starting = _number("starting_customers", starting_customers)
    if starting == 0:
        return Decimal("0")
    return lost / starting * HUNDRED


def calculate_roi(investment: Any, returns: Any) -> Decimal:
    invested = _number("investment", investment)
    returned = _number("returns", returns)
    if invested == 0:
        return Decimal("0")
    return (returned - invested) / invested * HUNDRED


def calculate_break_even_units(fixed_costs: Any, price_per_unit: Any, variable_cost_per_unit: Any) -> Decimal:
    fixed = _number("fixed_costs", fixed_costs)
    margin = _number("price_per_unit", price_per_unit) - _number("variable_cost_per_unit", variable_cost_per_unit)
    if margin <= 0:
        return INFINITY
    return Decimal(math.ceil(fixed / margin))


def calculate_valuation(revenue: Any, multiple: Any) -> Decimal:
    return _number("revenue", revenue) * _number("multiple", multiple)


def ltv_cac_ratio(ltv: Decimal, cac: Decimal) -> Decimal:
    if not cac.is_finite() or cac <= 0:
        return Decimal("0")
    return ltv / cac


def build_metrics(
    *,
    marketing_spend: Any,
    new_customers: Any,
    average_revenue_per_customer: Any,
    retention_rate: Any,
    cash_balance: Any,
    total_expenses: Any,
    month_count: Any,
    lost_customers: Any,
    starting_customers: Any,
) -> FinancialMetrics:
    cac = calculate_cac(marketing_spend, new_customers)
    ltv = calculate_ltv(average_revenue_per_customer, retention_rate)
    burn = calculate_burn_rate(total_expenses, month_count)
    return FinancialMetrics(
        cac=cac,
        ltv=ltv,
        ltv_cac_ratio=ltv_cac_ratio(ltv, cac),
        cash_runway=calculate_cash_runway(cash_balance, burn),
        burn_rate=burn,
        churn_rate=calculate_churn_rate(lost_customers, starting_customers),
    )
