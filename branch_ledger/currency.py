"""
Currency Precision Module

Decimal helpers for the ledger's single currency. NEVER uses float for
monetary values: every amount is a Decimal quantized to 2 fractional digits
with half-away-from-zero rounding.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from typing import Union

# Set global decimal context for financial precision
getcontext().prec = 28

CURRENCY_PRECISION = 2
CENT = Decimal('0.1') ** CURRENCY_PRECISION
ZERO = Decimal('0.00')

Numeric = Union[Decimal, int, str]


def to_decimal(value: Numeric) -> Decimal:
    """
    Convert a numeric value to Decimal without going through float

    Raises:
        ValueError: If value cannot be represented as a finite Decimal
    """
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to Decimal")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Cannot convert '{value}' to Decimal")
    else:
        # floats carry binary noise, go through their shortest repr
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Cannot convert '{value}' to Decimal")

    if not result.is_finite():
        raise ValueError(f"Value '{value}' is not a finite number")
    return result


def quantize_amount(value: Decimal) -> Decimal:
    """Round to currency precision, half away from zero"""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def has_currency_precision(value: Decimal) -> bool:
    """Check that value has at most 2 significant fractional digits"""
    return value == value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal) -> str:
    """Format for display with exactly 2 fractional digits"""
    return f"{quantize_amount(value):.{CURRENCY_PRECISION}f}"
