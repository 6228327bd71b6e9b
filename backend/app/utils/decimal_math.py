from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext


MONEY_QUANT = Decimal("0.01")
PCT_QUANT = Decimal("0.000001")
HUNDRED = Decimal("100")
INFINITY = Decimal("Infinity")


def _quantize(value: Decimal | int | float | str, quant: Decimal) -> Decimal:
    number = Decimal(str(value))
    with localcontext() as ctx:
        # integer digits plus the quantized places, with room for a rounding carry
        if number.is_finite() and number:
            ctx.prec = max(ctx.prec, number.adjusted() - quant.as_tuple().exponent + 2)
        return number.quantize(quant, rounding=ROUND_HALF_UP)


def money(value: Decimal | int | float | str) -> Decimal:
    return _quantize(value, MONEY_QUANT)


def pct(value: Decimal | int | float | str) -> Decimal:
    return _quantize(value, PCT_QUANT)


def to_decimal(value: Decimal | int | float | str | None) -> Decimal | None:
    """Convert a numeric input to Decimal, or None when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        converted = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not converted.is_finite():
        return None
    return converted


def within_tolerance(actual: Decimal, expected: Decimal, tolerance: Decimal | str = "0.01") -> bool:
    return abs(actual - expected) <= Decimal(str(tolerance))
