"""Integer money arithmetic and rounding.

All amounts are whole currency units. Intermediate fractional values are
computed in Decimal and rounded half-up back to int before being stored or
compared; Python's built-in round() is never used because it rounds halves
to even.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from .errors import InvalidAmount, errmsg
from .validation import require_amount, require_int

Number = Union[int, float, Decimal]

_UNIT = Decimal("1")
_HUNDRED = Decimal("100")


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    return Decimal(str(value))


def round_half_up(value: Number) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(to_decimal(value).quantize(_UNIT, rounding=ROUND_HALF_UP))


def percent_of(base: int, percent: Number) -> int:
    """Return round_half_up(base * percent / 100).

    Example: percent_of(3000, 10) = 300, percent_of(5, 50) = 3
    """
    return round_half_up(to_decimal(base) * to_decimal(percent) / _HUNDRED)


def divide_half_up(numerator: int, denominator: int) -> int:
    """Integer quotient rounded half-up; 0 when the denominator is 0."""
    if denominator == 0:
        return 0
    return round_half_up(to_decimal(numerator) / to_decimal(denominator))


def split_evenly(total: int, parts: int) -> tuple[int, int]:
    """Floor-divide total into parts, returning (base, remainder).

    base * parts + remainder == total always holds.
    """
    require_amount(total, "total")
    require_int(parts, "parts")
    if parts < 1:
        raise InvalidAmount(f"{errmsg.QUANTITY_POSITIVE}: parts={parts}")
    return divmod(total, parts)


def clamp(amount: int, ceiling: int) -> int:
    """Clamp a non-negative amount so it never exceeds ceiling."""
    return max(0, min(amount, ceiling))
