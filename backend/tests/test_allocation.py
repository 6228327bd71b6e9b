from decimal import Decimal

import pytest

from app.core.errors import AllocationError, InvariantError, ValidationError
from app.models.enums import AllocationStatus, DepletionStatus, FundCategory, NoticeKind
from app.services.allocation import (
    BudgetAllocationData,
    FundAccountData,
    adjust_balance,
    approve,
    depletion_status,
    distribute,
    reassign_category,
    record_spend,
    remaining_percentage,
    threshold_notifications,
    validate_allocation,
)


STANDARD_SPLIT = {
    "Technology": 25,
    "Growth": 20,
    "Team": 30,
    "Marketing": 15,
    "Emergency": 5,
    "Investments": 5,
}


def _fund(balance: str, allocated: str) -> FundAccountData:
    return FundAccountData(
        name=FundCategory.technology,
        balance=Decimal(balance),
        allocated=Decimal(allocated),
        percentage=Decimal("25"),
        purpose="Technology fund for business operations",
        allocation_category=FundCategory.technology,
        id=1,
    )


def test_distribute_standard_split() -> None:
    result = distribute(100000, STANDARD_SPLIT, user_id="u1", project_id="p1")
    balances = {fund.name: fund.balance for fund in result.funds}

    assert balances[FundCategory.technology] == Decimal("25000")
    assert balances[FundCategory.team] == Decimal("30000")
    assert result.allocation.status == AllocationStatus.distributed
    assert [fund.name for fund in result.funds] == list(FundCategory)
    assert sum(balances.values()) == Decimal("100000")
    assert all(fund.allocated == 0 for fund in result.funds)


def test_distribute_uneven_split_keeps_exact_total() -> None:
    split = {
        "technology": "33.333333",
        "growth": "33.333333",
        "team": "33.333334",
        "marketing": 0,
        "emergency": 0,
        "investments": 0,
    }
    result = distribute("1000.01", split)
    total = sum((fund.balance for fund in result.funds), Decimal("0"))
    assert abs(total - Decimal("1000.01")) <= Decimal("0.01")


def test_distribute_rejects_bad_total() -> None:
    split = dict(STANDARD_SPLIT, Investments=6)
    with pytest.raises(AllocationError) as excinfo:
        distribute(100000, split)
    assert "currently 101%" in excinfo.value.message
    assert excinfo.value.code == "allocation_invalid"


def test_distribute_rejects_sum_just_outside_tolerance() -> None:
    with pytest.raises(AllocationError) as excinfo:
        distribute(1000, dict(STANDARD_SPLIT, Investments="5.02"))
    assert "currently 100.02%" in excinfo.value.message


def test_distribute_tolerates_rounding_noise() -> None:
    split = dict(STANDARD_SPLIT, Investments="5.005")
    result = distribute(1000, split)
    assert len(result.funds) == 6


@pytest.mark.parametrize(
    "split",
    [
        {key: value for key, value in STANDARD_SPLIT.items() if key != "Team"},
        dict(STANDARD_SPLIT, Payroll=0),
        dict(STANDARD_SPLIT, Team=-5),
        dict(STANDARD_SPLIT, Team=101),
        dict(STANDARD_SPLIT, Team="abc"),
    ],
)
def test_distribute_rejects_malformed_maps(split: dict) -> None:
    with pytest.raises(ValidationError):
        distribute(1000, split)


def test_negative_budget_rejected() -> None:
    with pytest.raises(ValidationError):
        distribute(-1, STANDARD_SPLIT)


def test_remaining_and_depletion_status() -> None:
    warning = _fund("10000", "8500")
    assert remaining_percentage(warning) == Decimal("15")
    assert depletion_status(warning) == DepletionStatus.warning
    assert depletion_status(_fund("10000", "1000")) == DepletionStatus.healthy
    assert depletion_status(_fund("10000", "10000")) == DepletionStatus.critical
    assert depletion_status(_fund("0", "0")) == DepletionStatus.critical


def test_threshold_notifications() -> None:
    split = dict(STANDARD_SPLIT, Emergency=0, Investments=10, Marketing="15")
    allocation = distribute(100000, split).allocation
    notices = threshold_notifications(allocation)
    kinds = {(row.fund, row.kind) for row in notices}
    assert (FundCategory.emergency, NoticeKind.depleted) in kinds
    assert (FundCategory.investments, NoticeKind.low_threshold) not in kinds

    low = distribute(100000, STANDARD_SPLIT).allocation
    messages = [row.message for row in threshold_notifications(low)]
    assert "Emergency fund is below 10% threshold (5.0%)" in messages
    assert "Investments fund is below 10% threshold (5.0%)" in messages


def test_tiny_allocation_is_low_not_depleted() -> None:
    split = dict(STANDARD_SPLIT, Technology="29.9999999", Investments="0.0000001")
    allocation = distribute(100000, split).allocation
    kinds = {(row.fund, row.kind) for row in threshold_notifications(allocation)}
    assert (FundCategory.investments, NoticeKind.low_threshold) in kinds
    assert (FundCategory.investments, NoticeKind.depleted) not in kinds


def test_reassign_category() -> None:
    fund = _fund("100", "0")
    moved = reassign_category(fund, "growth")
    assert moved.allocation_category == FundCategory.growth
    assert moved.balance == fund.balance
    with pytest.raises(ValidationError, match="different allocation category"):
        reassign_category(fund, FundCategory.technology)
    with pytest.raises(ValidationError):
        reassign_category(fund, "Payroll")


def test_balance_adjustments_and_spend() -> None:
    fund = _fund("100", "0")
    assert adjust_balance(fund, "-40").balance == Decimal("60")
    with pytest.raises(ValidationError):
        adjust_balance(fund, -101)
    spent = record_spend(fund, 30)
    assert spent.allocated == Decimal("30")
    assert fund.allocated == Decimal("0")


def test_validate_allocation_and_approve() -> None:
    allocation = BudgetAllocationData(
        total_budget=Decimal("100"),
        allocations={category: Decimal("10") for category in FundCategory},
        status=AllocationStatus.pending,
    )
    with pytest.raises(InvariantError):
        validate_allocation(allocation)

    approved = approve(allocation)
    assert approved.status == AllocationStatus.approved
    with pytest.raises(ValidationError):
        approve(approved)

    valid = distribute(100, STANDARD_SPLIT).allocation
    validate_allocation(valid)
