from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from app.core.errors import ValidationError
from app.models.enums import AnomalyDirection, AnomalyMetric
from app.utils.decimal_math import to_decimal


DEFAULT_Z_THRESHOLD = Decimal("2.0")
MIN_POINTS = 3


@dataclass(frozen=True)
class Anomaly:
    index: int
    value: Decimal
    z_score: Decimal
    direction: AnomalyDirection


@dataclass(frozen=True)
class PeriodAnomaly:
    metric: AnomalyMetric
    direction: AnomalyDirection


def _mean_and_std(values: list[Decimal]) -> tuple[Decimal, Decimal]:
    count = Decimal(len(values))
    mean = sum(values, Decimal("0")) / count
    variance = sum(((value - mean) ** 2 for value in values), Decimal("0")) / count
    return mean, variance.sqrt() if variance > 0 else Decimal("0")


def _threshold(threshold: Decimal | float | str) -> Decimal:
    value = to_decimal(threshold)
    if value is None or value <= 0:
        raise ValidationError(f"Anomaly threshold must be a positive number (got {threshold}).", field="threshold")
    return value


def detect_anomalies(
    values: Sequence[Decimal | int | float | str],
    threshold: Decimal | float | str = DEFAULT_Z_THRESHOLD,
) -> list[Anomaly]:
    limit = _threshold(threshold)
    series = [Decimal(str(value)) for value in values]
    if len(series) < MIN_POINTS:
        return []

    mean, std = _mean_and_std(series)
    # A constant series has no spread; dividing by 1 keeps every z-score at 0.
    divisor = std if std > 0 else Decimal("1")

    rows: list[Anomaly] = []
    for index, value in enumerate(series):
        z_score = abs(value - mean) / divisor
        if z_score > limit:
            rows.append(
                Anomaly(
                    index=index,
                    value=value,
                    z_score=z_score,
                    direction=AnomalyDirection.spike if value > mean else AnomalyDirection.dip,
                )
            )
    return rows


def classify_period_anomalies(
    income: Sequence[Decimal],
    expense: Sequence[Decimal],
    profit: Sequence[Decimal],
    threshold: Decimal | float | str = DEFAULT_Z_THRESHOLD,
) -> dict[int, PeriodAnomaly]:
    """Map period index to the first metric flagging it, in order income > expense > profit."""
    flagged: dict[int, PeriodAnomaly] = {}
    for metric, series in (
        (AnomalyMetric.income, income),
        (AnomalyMetric.expense, expense),
        (AnomalyMetric.profit, profit),
    ):
        for anomaly in detect_anomalies(series, threshold):
            flagged.setdefault(anomaly.index, PeriodAnomaly(metric=metric, direction=anomaly.direction))
    return flagged
