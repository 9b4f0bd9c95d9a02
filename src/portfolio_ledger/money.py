"""
Fixed-precision money helpers.

All amounts in the ledger are Decimals. Floats only appear at the very edge
(export, charts) through to_float().
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")
ONE = Decimal("1")
CENT = Decimal("0.01")
QTY = Decimal("0.00000001")
PCT = Decimal("0.0001")


def dec(value) -> Decimal:
    """
    Convert any numeric-ish value to Decimal.

    Floats go through str() so 0.1 stays 0.1. None, empty strings, NaN and
    unparsable text all become zero.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return ZERO if not value.is_finite() else value
    if isinstance(value, bool):
        return Decimal(int(value))
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    return result if result.is_finite() else ZERO


def add(a: Decimal, b: Decimal) -> Decimal:
    return dec(a) + dec(b)


def sub(a: Decimal, b: Decimal) -> Decimal:
    return dec(a) - dec(b)


def mul(a: Decimal, b: Decimal) -> Decimal:
    return dec(a) * dec(b)


def div(a: Decimal, b: Decimal, default: Decimal = ZERO) -> Decimal:
    """Divide a by b, returning default instead of raising on a zero denominator."""
    denominator = dec(b)
    if denominator == 0:
        return default
    return dec(a) / denominator


def gt(a: Decimal, b: Decimal) -> bool:
    return dec(a) > dec(b)


def gte(a: Decimal, b: Decimal) -> bool:
    return dec(a) >= dec(b)


def lt(a: Decimal, b: Decimal) -> bool:
    return dec(a) < dec(b)


def eq(a: Decimal, b: Decimal) -> bool:
    return dec(a) == dec(b)


def quantize(value: Decimal, places: Decimal = CENT) -> Decimal:
    """Round half up to the given exponent (CENT, QTY or PCT)."""
    return dec(value).quantize(places, ROUND_HALF_UP)


def to_float(value: Decimal, places: int = 2) -> float:
    """Convert to float for display/aggregation boundaries only."""
    return float(quantize(value, Decimal(1).scaleb(-places)))


def clamp_non_negative(value: Decimal) -> Decimal:
    value = dec(value)
    return value if value > 0 else ZERO
