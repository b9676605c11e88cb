"""Validation helpers for engine precondition checks.

Eliminates repeated validation boilerplate across pricing, split and
session operations.
"""

from collections.abc import Collection
from typing import Any

from .errors import InvalidAmount, errmsg


def require_int(value: Any, field: str) -> None:
    """Require that a value is a plain integer (bools rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{errmsg.AMOUNT_NOT_INT}: {field}={value!r}")


def require_amount(value: Any, field: str) -> None:
    """Require a non-negative integer money amount."""
    require_int(value, field)
    if value < 0:
        raise InvalidAmount(f"{errmsg.AMOUNT_NEGATIVE}: {field}={value}")


def require_quantity(value: Any) -> None:
    """Require a line quantity of at least one."""
    require_int(value, "quantity")
    if value < 1:
        raise InvalidAmount(f"{errmsg.QUANTITY_POSITIVE}: {value}")


def require_rate(value: Any, field: str = "tax_rate") -> None:
    """Require a percentage rate between 0 and 100 inclusive."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidAmount(f"{errmsg.TAX_RATE_RANGE}: {field}={value!r}")
    if not 0 <= value <= 100:
        raise InvalidAmount(f"{errmsg.TAX_RATE_RANGE}: {field}={value}")


def require_member(key: Any, container: Collection, error: Exception) -> None:
    """Require that a key is present, raising the given error otherwise."""
    if key not in container:
        raise error


def require_in_range(value: int, low: int, high: int, error: Exception) -> None:
    """Require low <= value <= high."""
    if not low <= value <= high:
        raise error
