from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Mapping

from app.core.errors import AllocationError, InvariantError, ValidationError
from app.models.enums import AllocationStatus, DepletionStatus, FundCategory, NoticeKind
from app.utils.decimal_math import HUNDRED, pct, to_decimal, within_tolerance


logger = logging.getLogger(__name__)

PERCENTAGE_TOLERANCE = Decimal("0.01")
LOW_THRESHOLD_PCT = Decimal("10")
WARNING_REMAINING_PCT = Decimal("20")


@dataclass(frozen=True)
class FundAccountData:
    name: FundCategory
    balance: Decimal
    allocated: Decimal
    percentage: Decimal
    purpose: str
    allocation_category: FundCategory
    id: int | None = None


@dataclass(frozen=True)
class BudgetAllocationData:
    total_budget: Decimal
    allocations: dict[FundCategory, Decimal]
    status: AllocationStatus
    user_id: str = ""
    project_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: int | None = None


@dataclass(frozen=True)
class Distribution:
    allocation: BudgetAllocationData
    funds: list[FundAccountData]


@dataclass(frozen=True)
class ThresholdNotice:
    fund: FundCategory
    kind: NoticeKind
    percentage: Decimal
    message: str


def _non_negative(name: str, value: Any) -> Decimal:
    amount = to_decimal(value)
    if amount is None or amount < 0:
        raise ValidationError(f"{name} must be a non-negative number.", field=name)
    return amount


def _percentage(name: str, value: Any) -> Decimal:
    amount = to_decimal(value)
    if amount is None or amount < 0 or amount > HUNDRED:
        raise ValidationError(f"Fund {name} percentage must be between 0 and 100.", field=name)
    return amount


def normalize_percentages(percentages: Mapping[FundCategory | str, Any]) -> dict[FundCategory, Decimal]:
    """Key an incoming percentage map by FundCategory; all six categories are required."""
    resolved: dict[FundCategory, Decimal] = {}
    for key, value in percentages.items():
        try:
            category = FundCategory.parse(key)
        except ValueError as exc:
            raise ValidationError(f"Unknown fund category: {key}.", field=str(key)) from exc
        if category in resolved:
            raise ValidationError(f"Fund category {category.value} given more than once.", field=str(key))
        resolved[category] = _percentage(category.value, value)

    missing = [category.value for category in FundCategory if category not in resolved]
    if missing:
        raise ValidationError(f"Missing fund percentage(s): {', '.join(missing)}.", field="percentages")
    return {category: resolved[category] for category in FundCategory}


def distribute(
    total_budget: Any,
    percentages: Mapping[FundCategory | str, Any],
    *,
    user_id: str = "",
    project_id: str | None = None,
    tolerance: Decimal = PERCENTAGE_TOLERANCE,
) -> Distribution:
    budget = _non_negative("total_budget", total_budget)
    shares = normalize_percentages(percentages)

    total_pct = sum(shares.values(), Decimal("0"))
    if not within_tolerance(total_pct, HUNDRED, tolerance):
        raise AllocationError(
            f"Fund percentages must sum to 100% (currently {total_pct.normalize():f}%).",
            actual_sum=total_pct,
        )

    # Amounts stay unrounded so the six balances add back up to the budget exactly.
    amounts = {category: share / HUNDRED * budget for category, share in shares.items()}
    funds = [
        FundAccountData(
            name=category,
            balance=amounts[category],
            allocated=Decimal("0"),
            percentage=shares[category],
            purpose=f"{category.value} fund for business operations",
            allocation_category=category,
        )
        for category in FundCategory
    ]
    allocation = BudgetAllocationData(
        total_budget=budget,
        allocations=amounts,
        status=AllocationStatus.distributed,
        user_id=user_id,
        project_id=project_id,
    )
    logger.info(
        "Distributed budget %s across %d funds for project %s",
        budget,
        len(funds),
        project_id or "-",
    )
    return Distribution(allocation=allocation, funds=funds)


def remaining_percentage(fund: FundAccountData) -> Decimal:
    balance = Decimal(str(fund.balance))
    if balance == 0:
        return pct(0)
    return pct((balance - Decimal(str(fund.allocated))) / balance * HUNDRED)


def depletion_status(
    fund: FundAccountData,
    *,
    warning_pct: Decimal = WARNING_REMAINING_PCT,
) -> DepletionStatus:
    remaining = remaining_percentage(fund)
    if remaining <= 0:
        return DepletionStatus.critical
    if remaining <= warning_pct:
        return DepletionStatus.warning
    return DepletionStatus.healthy


def threshold_notifications(
    allocation: BudgetAllocationData,
    *,
    low_threshold_pct: Decimal = LOW_THRESHOLD_PCT,
) -> list[ThresholdNotice]:
    total = Decimal(str(allocation.total_budget))
    notices: list[ThresholdNotice] = []
    for category in FundCategory:
        amount = Decimal(str(allocation.allocations.get(category, Decimal("0"))))
        ratio = amount / total * HUNDRED if total > 0 else Decimal("0")
        share = pct(ratio)
        if 0 < ratio < low_threshold_pct:
            notices.append(
                ThresholdNotice(
                    fund=category,
                    kind=NoticeKind.low_threshold,
                    percentage=share,
                    message=(
                        f"{category.value} fund is below {low_threshold_pct.normalize():f}% threshold "
                        f"({share:.1f}%)"
                    ),
                )
            )
        if ratio == 0:
            notices.append(
                ThresholdNotice(
                    fund=category,
                    kind=NoticeKind.depleted,
                    percentage=share,
                    message=f"{category.value} fund has no allocation",
                )
            )
    return notices


def reassign_category(fund: FundAccountData, category: FundCategory | str) -> FundAccountData:
    """Swap the fund's allocation category. Balances and percentages are left untouched."""
    try:
        target = FundCategory.parse(category)
    except ValueError as exc:
        raise ValidationError(f"Unknown fund category: {category}.", field="allocation_category") from exc
    if target == fund.allocation_category:
        raise ValidationError(
            "Please select a different allocation category.",
            field="allocation_category",
        )
    return replace(fund, allocation_category=target)


def adjust_balance(fund: FundAccountData, delta: Any) -> FundAccountData:
    change = to_decimal(delta)
    if change is None:
        raise ValidationError("Balance adjustment must be a finite number.", field="delta")
    new_balance = Decimal(str(fund.balance)) + change
    if new_balance < 0:
        raise ValidationError("Fund balance cannot be negative.", field="balance", fund=fund.name.value)
    return replace(fund, balance=new_balance)


def record_spend(fund: FundAccountData, amount: Any) -> FundAccountData:
    spend = _non_negative("amount", amount)
    return replace(fund, allocated=Decimal(str(fund.allocated)) + spend)


def validate_allocation(
    allocation: BudgetAllocationData,
    *,
    tolerance: Decimal = PERCENTAGE_TOLERANCE,
) -> None:
    total = _non_negative("total_budget", allocation.total_budget)
    missing = [category.value for category in FundCategory if category not in allocation.allocations]
    if missing:
        raise ValidationError(f"Allocation is missing fund(s): {', '.join(missing)}.", field="allocations")
    amounts = [_non_negative(category.value, allocation.allocations[category]) for category in FundCategory]
    allocated_sum = sum(amounts, Decimal("0"))
    if not within_tolerance(allocated_sum, total, tolerance):
        raise InvariantError(
            f"Fund allocations sum to {allocated_sum:f} but total budget is {total:f}.",
            actual_sum=allocated_sum,
        )


def approve(allocation: BudgetAllocationData) -> BudgetAllocationData:
    if allocation.status != AllocationStatus.pending:
        raise ValidationError(
            f"Only pending allocations can be approved (status is {allocation.status.value}).",
            field="status",
        )
    return replace(allocation, status=AllocationStatus.approved)
