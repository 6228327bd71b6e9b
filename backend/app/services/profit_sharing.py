from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Sequence

from app.core.errors import InvariantError, ValidationError
from app.utils.decimal_math import HUNDRED, money, pct, to_decimal, within_tolerance


logger = logging.getLogger(__name__)

FINALIZE_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class MemberWeight:
    member_id: str
    member_name: str
    availability: Decimal


@dataclass(frozen=True)
class ProfitShareData:
    member_id: str
    member_name: str
    percentage: Decimal
    amount: Decimal
    project_id: str | None = None
    user_id: str = ""


def _revenue(value: Any) -> Decimal:
    revenue = to_decimal(value)
    if revenue is None or revenue < 0:
        raise ValidationError("Total revenue must be a non-negative numeric value.", field="total_revenue")
    return revenue


def calculate_from_availability(
    total_revenue: Any,
    members: Sequence[MemberWeight],
    *,
    project_id: str | None = None,
) -> list[ProfitShareData]:
    revenue = _revenue(total_revenue)
    weights: list[Decimal] = []
    for member in members:
        weight = to_decimal(member.availability)
        if weight is None or weight < 0:
            raise ValidationError(
                f"Availability for {member.member_name} must be a non-negative number.",
                field="availability",
                member=member.member_name,
            )
        weights.append(weight)

    total_weight = sum(weights, Decimal("0"))
    if not members or total_weight == 0:
        return []

    rows: list[ProfitShareData] = []
    for member, weight in zip(members, weights):
        percentage = pct(weight / total_weight * HUNDRED)
        rows.append(
            ProfitShareData(
                member_id=member.member_id,
                member_name=member.member_name,
                percentage=percentage,
                amount=money(revenue * percentage / HUNDRED),
                project_id=project_id,
            )
        )
    return rows


def equal_shares(
    total_revenue: Any,
    members: Sequence[MemberWeight],
    *,
    project_id: str | None = None,
) -> list[ProfitShareData]:
    revenue = _revenue(total_revenue)
    if not members:
        return []
    percentage = pct(HUNDRED / Decimal(len(members)))
    return [
        ProfitShareData(
            member_id=member.member_id,
            member_name=member.member_name,
            percentage=percentage,
            amount=money(revenue * percentage / HUNDRED),
            project_id=project_id,
        )
        for member in members
    ]


def _validate_share(share: ProfitShareData) -> None:
    percentage = to_decimal(share.percentage)
    if percentage is None or percentage < 0 or percentage > HUNDRED:
        raise ValidationError(
            f"Percentage for {share.member_name} must be between 0 and 100.",
            field="percentage",
            member=share.member_name,
        )
    amount = to_decimal(share.amount)
    if amount is None or amount < 0:
        raise ValidationError(
            f"Amount for {share.member_name} must be a non-negative numeric value.",
            field="amount",
            member=share.member_name,
        )


def update_shares(
    shares: Sequence[ProfitShareData],
    total_revenue: Any = None,
) -> list[ProfitShareData]:
    """Validate a share set and, when revenue is given, recompute every amount from its percentage.

    Without revenue the amounts are returned as supplied, which keeps manual
    overrides that no longer match the percentage formula.
    """
    for share in shares:
        _validate_share(share)
    if total_revenue is None:
        return [replace(share) for share in shares]

    revenue = _revenue(total_revenue)
    return [
        replace(share, amount=money(Decimal(str(share.percentage)) / HUNDRED * revenue))
        for share in shares
    ]


def ensure_finalizable(
    shares: Sequence[ProfitShareData],
    *,
    tolerance: Decimal = FINALIZE_TOLERANCE,
) -> None:
    total = sum((Decimal(str(share.percentage)) for share in shares), Decimal("0"))
    if not within_tolerance(total, HUNDRED, tolerance):
        logger.warning("Rejected profit share set summing to %s%%", total)
        raise InvariantError(
            f"Total percentage must equal 100% (currently {total.normalize():f}%).",
            actual_sum=total,
        )
