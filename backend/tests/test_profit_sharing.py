from decimal import Decimal

import pytest

from app.core.errors import InvariantError, ValidationError
from app.services.profit_sharing import (
    MemberWeight,
    ProfitShareData,
    calculate_from_availability,
    ensure_finalizable,
    equal_shares,
    update_shares,
)


def _members(*weights: str) -> list[MemberWeight]:
    return [
        MemberWeight(member_id=str(index), member_name=f"Member {index}", availability=Decimal(weight))
        for index, weight in enumerate(weights, start=1)
    ]


def _share(name: str, percentage: str, amount: str) -> ProfitShareData:
    return ProfitShareData(member_id=name, member_name=name, percentage=Decimal(percentage), amount=Decimal(amount))


def test_equal_availability_splits_evenly() -> None:
    rows = calculate_from_availability(100000, _members("50", "50"), project_id="p1")
    assert [row.percentage for row in rows] == [Decimal("50"), Decimal("50")]
    assert [row.amount for row in rows] == [Decimal("50000"), Decimal("50000")]
    assert rows[0].project_id == "p1"


def test_weighted_availability() -> None:
    rows = calculate_from_availability("9000", _members("100", "50"))
    assert rows[0].percentage == Decimal("66.666667")
    assert rows[1].amount == Decimal("3000.00")


def test_no_members_or_zero_availability() -> None:
    assert calculate_from_availability(1000, []) == []
    assert calculate_from_availability(1000, _members("0", "0")) == []


def test_invalid_revenue_or_availability() -> None:
    with pytest.raises(ValidationError):
        calculate_from_availability(-1, _members("10"))
    with pytest.raises(ValidationError):
        calculate_from_availability(100, _members("-10"))


def test_equal_shares() -> None:
    rows = equal_shares(1000, _members("10", "90", "40", "0"))
    assert all(row.percentage == Decimal("25") for row in rows)
    assert rows[0].amount == Decimal("250.00")
    assert equal_shares(1000, []) == []


def test_update_shares_recomputes_amounts() -> None:
    rows = update_shares([_share("A", "60", "0"), _share("B", "40", "0")], total_revenue=5000)
    assert [row.amount for row in rows] == [Decimal("3000.00"), Decimal("2000.00")]


def test_update_shares_keeps_manual_amounts_without_revenue() -> None:
    rows = update_shares([_share("A", "60", "123.45")])
    assert rows[0].amount == Decimal("123.45")


def test_update_shares_rejects_out_of_range_values() -> None:
    with pytest.raises(ValidationError, match="Percentage for A must be between 0 and 100."):
        update_shares([_share("A", "101", "0")])
    with pytest.raises(ValidationError, match="Amount for B must be a non-negative numeric value."):
        update_shares([_share("A", "50", "0"), _share("B", "50", "-1")])


def test_finalize_requires_full_hundred() -> None:
    ensure_finalizable([_share("A", "33.333", "0"), _share("B", "66.667", "0")])
    with pytest.raises(InvariantError) as excinfo:
        ensure_finalizable([_share("A", "60", "0"), _share("B", "30", "0")])
    assert "currently 90%" in excinfo.value.message


def test_very_large_revenue_splits_without_overflow() -> None:
    rows = calculate_from_availability("1e27", _members("50", "50"))
    assert [row.amount for row in rows] == [Decimal("5e26"), Decimal("5e26")]
    shares = update_shares([_share("a", "50", "0"), _share("b", "50", "0")], total_revenue="1e27")
    assert [row.amount for row in shares] == [Decimal("5e26"), Decimal("5e26")]
