"""
Decimal precision helpers

Indicator values use round-half-up at 8 fraction digits. Order quantities
are always floored so an order never exceeds the balance it was sized from.
"""
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, localcontext

from trading_bot.constants import PRICE_QUANTUM

# Working precision for divisions before quantizing to PRICE_SCALE
_DIVISION_PRECISION = 50


def round_half_up(value: Decimal) -> Decimal:
    """Round to 8 fraction digits, ties away from zero."""
    return value.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)


def floor_quantity(value: Decimal) -> Decimal:
    """
    Truncate to 8 fraction digits.

    Examples:
        >>> floor_quantity(Decimal("0.123456789"))
        Decimal('0.12345678')
    """
    return value.quantize(PRICE_QUANTUM, rounding=ROUND_DOWN)


def divide_half_up(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Divide and round the quotient half-up to 8 fraction digits."""
    with localcontext() as ctx:
        ctx.prec = _DIVISION_PRECISION
        quotient = numerator / denominator
    return round_half_up(quotient)


def divide_floor(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Divide and truncate the quotient to 8 fraction digits."""
    with localcontext() as ctx:
        ctx.prec = _DIVISION_PRECISION
        ctx.rounding = ROUND_DOWN
        quotient = numerator / denominator
    return floor_quantity(quotient)


def to_decimal(value) -> Decimal:
    """Convert exchange payload values (str/int/float) to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
