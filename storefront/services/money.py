"""
Money Utilities - Safe Decimal operations for monetary values.

Prices arrive from PostgREST as JSON numbers; everything is converted to
Decimal before arithmetic so totals never drift through float rounding.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Union

MONEY_PRECISION = Decimal("0.01")

CURRENCY_SYMBOL = "₹"

Number = Union[str, int, float, Decimal, None]


def to_decimal(value: Number) -> Decimal:
    """
    Convert any value to Decimal safely.

    Returns Decimal("0") for None or unparseable input.
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            # via str to keep 10.1 as 10.1 rather than its binary expansion
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_money(value: Number) -> Decimal:
    """Round to two decimal places, half up."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def multiply(a: Number, b: Number) -> Decimal:
    """Safe multiplication of monetary values."""
    return to_decimal(a) * to_decimal(b)


def subtract(a: Number, b: Number) -> Decimal:
    """Safe subtraction of monetary values."""
    return to_decimal(a) - to_decimal(b)


def divide(a: Number, b: Number) -> Decimal:
    """Safe division; division by zero yields zero."""
    divisor = to_decimal(b)
    if divisor == 0:
        return Decimal("0")
    return to_decimal(a) / divisor


def money_sum(values: Iterable[Number]) -> Decimal:
    """Sum monetary values, starting from Decimal zero."""
    total = Decimal("0")
    for value in values:
        total += to_decimal(value)
    return total


def to_float(value: Number) -> float:
    """
    Convert to float for JSON payloads.

    Use only at the API boundary, not for internal calculations.
    """
    return float(to_decimal(value))


def format_money(value: Number, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format with currency symbol, e.g. ``₹1,250.00``."""
    return f"{symbol}{round_money(value):,.2f}"
