from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from app.core.errors import ValidationError
from app.utils.decimal_math import money


DEFAULT_FORECAST_PERIODS = 3


def linear_regression(values: Sequence[Decimal | int | float | str]) -> tuple[Decimal, Decimal]:
    """Least-squares slope and intercept of ``values`` against their index."""
    series = [Decimal(str(value)) for value in values]
    n = len(series)
    if n == 0:
        return Decimal("0"), Decimal("0")
    x_mean = Decimal(n - 1) / Decimal(2)
    y_mean = sum(series, Decimal("0")) / Decimal(n)

    numerator = Decimal("0")
    denominator = Decimal("0")
    for index, value in enumerate(series):
        dx = Decimal(index) - x_mean
        numerator += dx * (value - y_mean)
        denominator += dx * dx

    slope = Decimal("0") if denominator == 0 else numerator / denominator
    intercept = y_mean - slope * x_mean
    return slope, intercept


def forecast_linear_trend(
    values: Sequence[Decimal | int | float | str],
    periods: int = DEFAULT_FORECAST_PERIODS,
) -> list[Decimal]:
    if periods < 0:
        raise ValidationError(f"Forecast periods must be >= 0 (got {periods}).", field="periods")
    series = [Decimal(str(value)) for value in values]
    if len(series) < 2:
        last = money(series[-1]) if series else money(0)
        return [last for _ in range(periods)]

    slope, intercept = linear_regression(series)
    n = len(series)
    # Flows are magnitudes; the trend line is floored at zero.
    return [money(max(Decimal("0"), slope * Decimal(n + step) + intercept)) for step in range(periods)]


def moving_average(values: Sequence[Decimal | int | float | str], window: int = 3) -> list[Decimal]:
    """Centred simple moving average; the window shrinks at the edges."""
    if window < 1:
        raise ValidationError(f"Moving average window must be >= 1 (got {window}).", field="window")
    series = [Decimal(str(value)) for value in values]
    half = window // 2
    rows: list[Decimal] = []
    for index in range(len(series)):
        chunk = series[max(0, index - half) : min(len(series), index + half + 1)]
        rows.append(money(sum(chunk, Decimal("0")) / Decimal(len(chunk))))
    return rows
