"""Line pricing: discounts, supplements and per-line tax.

Business Rules:
1. A line's gross total is (unit price + supplements) * quantity
2. A line discount never exceeds the gross total
3. Percentage discounts round half-up to a whole amount
4. Tax is charged on the post-discount net amount at the line's own rate
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from .errors import InvalidDiscount, errmsg
from .money import clamp, percent_of, round_half_up
from .validation import require_amount, require_quantity, require_rate


class DiscountKind(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"


class TaxRate:
    """Tax rate codes from the product catalog, in percent."""

    STANDARD = 18
    REDUCED = 10
    EXEMPT = 0


_TAX_CODES = {
    "STANDARD": TaxRate.STANDARD,
    "REDUIT": TaxRate.REDUCED,
    "REDUCED": TaxRate.REDUCED,
    "EXONERE": TaxRate.EXEMPT,
    "EXEMPT": TaxRate.EXEMPT,
}


def tax_rate_percent(rate: Union[str, int, float]) -> Union[int, float]:
    """Resolve a catalog tax code or numeric percent to a percent.

    Unknown codes fall back to the standard rate, as the catalog does.
    """
    if isinstance(rate, str):
        return _TAX_CODES.get(rate.strip().upper(), TaxRate.STANDARD)
    require_rate(rate)
    return rate


@dataclass(frozen=True)
class Discount:
    """A percentage or fixed-amount discount owned by one line or the cart."""

    kind: DiscountKind
    value: Union[int, float]

    @classmethod
    def percentage(cls, value: Union[int, float]) -> "Discount":
        return cls(DiscountKind.PERCENTAGE, value)

    @classmethod
    def fixed(cls, value: Union[int, float]) -> "Discount":
        return cls(DiscountKind.FIXED_AMOUNT, value)

    def validate(self) -> None:
        """Raise InvalidDiscount if the value is out of bounds for the kind."""
        value = self.value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidDiscount(f"{errmsg.DISCOUNT_NOT_FINITE}: {value!r}")
        if not math.isfinite(value):
            raise InvalidDiscount(f"{errmsg.DISCOUNT_NOT_FINITE}: {value!r}")
        if self.kind == DiscountKind.PERCENTAGE:
            if not 0 < value <= 100:
                raise InvalidDiscount(f"{errmsg.PERCENTAGE_RANGE}: {value}")
        elif self.kind == DiscountKind.FIXED_AMOUNT:
            if value < 0:
                raise InvalidDiscount(f"{errmsg.FIXED_DISCOUNT_NEGATIVE}: {value}")
        else:
            raise InvalidDiscount(f"{errmsg.INVALID_DISCOUNT_TYPE}: {self.kind!r}")

    def amount_on(self, base: int) -> int:
        """Discount amount against base, clamped so base never goes negative."""
        self.validate()
        if self.kind == DiscountKind.PERCENTAGE:
            amount = percent_of(base, self.value)
        else:
            amount = round_half_up(self.value)
        return clamp(amount, base)


@dataclass(frozen=True)
class Supplement:
    """Paid add-on to a line item (e.g. extra topping)."""

    name: str
    price: int

    def __post_init__(self) -> None:
        require_amount(self.price, f"supplement {self.name!r} price")


@dataclass
class LineItem:
    """One product entry in a cart."""

    id: str
    unit_price: int
    quantity: int = 1
    supplements: list = field(default_factory=list)
    line_discount: Optional[Discount] = None
    notes: str = ""
    product_id: str = ""
    name: str = ""
    tax_rate: Union[int, float] = 0

    def __post_init__(self) -> None:
        require_amount(self.unit_price, "unit_price")
        require_quantity(self.quantity)
        require_rate(self.tax_rate)
        if self.line_discount is not None:
            self.line_discount.validate()

    @property
    def supplements_total(self) -> int:
        return sum(s.price for s in self.supplements)

    @property
    def unit_price_with_supplements(self) -> int:
        return self.unit_price + self.supplements_total

    @property
    def gross_total(self) -> int:
        return self.unit_price_with_supplements * self.quantity

    @property
    def discount_amount(self) -> int:
        if self.line_discount is None:
            return 0
        return apply_line_discount(self, self.line_discount)

    @property
    def net_total(self) -> int:
        return self.gross_total - self.discount_amount

    @property
    def tax_amount(self) -> int:
        return compute_tax(self.net_total, self.tax_rate)

    @property
    def total(self) -> int:
        """Net total including tax."""
        return self.net_total + self.tax_amount

    @property
    def has_supplements(self) -> bool:
        return bool(self.supplements)


def apply_line_discount(line: LineItem, discount: Discount) -> int:
    """Compute the discount amount for a line without storing it.

    Percentage: round_half_up(gross_total * value / 100)
    Fixed amount: value
    Either way the result is clamped to the line's gross total.
    """
    return discount.amount_on(line.gross_total)


def compute_tax(net_amount: int, rate: Union[int, float]) -> int:
    """Tax on a net amount at a percentage rate, rounded half-up."""
    require_rate(rate)
    return percent_of(net_amount, rate)
