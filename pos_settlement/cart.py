"""Cart aggregation and cart-wide discount.

Line discounts are retail price corrections applied first; the cart-wide
discount is a checkout promotion applied second, against the subtotal left
after line discounts.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

import structlog

from .errors import InvalidAmount, LineNotFound, errmsg
from .pricing import Discount, LineItem, Supplement
from .validation import require_amount, require_int, require_quantity

logger = structlog.get_logger()


class DiscountScope(str, Enum):
    """Which entity a discount entered at the till is attached to."""

    LINE = "LINE"
    CART = "CART"


@dataclass(frozen=True)
class CartTotals:
    subtotal: int = 0
    line_discounts_total: int = 0
    cart_discount_amount: int = 0
    tax: int = 0
    grand_total: int = 0

    @property
    def discounts_total(self) -> int:
        return self.line_discounts_total + self.cart_discount_amount

    @property
    def net_subtotal(self) -> int:
        """Subtotal after all discounts, before tax."""
        return self.subtotal - self.discounts_total


@dataclass
class Cart:
    """Ordered line items plus at most one cart-wide discount."""

    lines: list = field(default_factory=list)
    discount: Optional[Discount] = None

    def __post_init__(self) -> None:
        self.log = logger.bind(component="cart")

    def __len__(self) -> int:
        return len(self.lines)

    def is_empty(self) -> bool:
        return not self.lines

    @property
    def totals(self) -> CartTotals:
        return compute_totals(self)

    def line(self, line_id: str) -> LineItem:
        for line in self.lines:
            if line.id == line_id:
                return line
        raise LineNotFound(line_id)

    def add_line(self, line: LineItem) -> LineItem:
        if not line.id:
            raise InvalidAmount(errmsg.LINE_ID_REQUIRED)
        if any(existing.id == line.id for existing in self.lines):
            raise InvalidAmount(f"{errmsg.DUPLICATE_LINE}: {line.id}")
        self.lines.append(line)
        self.log.info("line_added", line_id=line.id, quantity=line.quantity)
        return line

    def add_item(
        self,
        product_id: str,
        unit_price: int,
        quantity: int = 1,
        supplements: Optional[list] = None,
        tax_rate: Union[int, float] = 0,
        name: str = "",
    ) -> LineItem:
        """Add a product, merging into an existing plain line for the same product.

        A line carrying supplements is never merged: each supplemented line
        is its own entry.
        """
        require_quantity(quantity)
        supplements = [
            s if isinstance(s, Supplement) else Supplement(**s)
            for s in (supplements or [])
        ]
        if not supplements:
            for existing in self.lines:
                if existing.product_id == product_id and not existing.has_supplements:
                    return self.update_quantity(existing.id, existing.quantity + quantity)

        line = LineItem(
            id=str(uuid.uuid4()),
            unit_price=unit_price,
            quantity=quantity,
            supplements=supplements,
            product_id=product_id,
            name=name,
            tax_rate=tax_rate,
        )
        return self.add_line(line)

    def remove_line(self, line_id: str) -> LineItem:
        line = self.line(line_id)
        self.lines.remove(line)
        self.log.info("line_removed", line_id=line_id)
        return line

    def update_quantity(self, line_id: str, quantity: int) -> Optional[LineItem]:
        """Set a line's quantity; zero or less removes the line."""
        require_int(quantity, "quantity")
        if quantity <= 0:
            self.remove_line(line_id)
            return None
        line = self.line(line_id)
        line.quantity = quantity
        self.log.info("quantity_updated", line_id=line_id, quantity=quantity)
        return line

    def update_notes(self, line_id: str, notes: str) -> LineItem:
        line = self.line(line_id)
        line.notes = notes
        return line

    def set_line_discount(self, line_id: str, discount: Optional[Discount]) -> int:
        """Attach (or clear, with None) a line discount; returns the amount."""
        line = self.line(line_id)
        if discount is not None:
            discount.validate()
        line.line_discount = discount
        amount = line.discount_amount
        self.log.info("line_discount_set", line_id=line_id, discount_amount=amount)
        return amount

    def set_discount(self, discount: Discount) -> int:
        """Replace the cart-wide discount; discounts never stack."""
        discount.validate()
        self.discount = discount
        amount = apply_cart_discount(self)
        self.log.info(
            "cart_discount_set",
            kind=discount.kind.value,
            value=discount.value,
            discount_amount=amount,
        )
        return amount

    def clear_discount(self) -> None:
        self.discount = None

    def clear(self) -> None:
        self.lines.clear()
        self.discount = None
        self.log.info("cart_cleared")

    def item_amounts(self) -> dict:
        """Line id -> amount charged for the line when a bill is split by item.

        Each line pays its tax-included total less its share of the cart
        discount, so the amounts always sum to the grand total.
        """
        line_totals = [line.total for line in self.lines]
        shares = apportion(apply_cart_discount(self), line_totals)
        return {
            line.id: total - share
            for line, total, share in zip(self.lines, line_totals, shares)
        }


def apportion(amount: int, weights: list) -> list:
    """Split amount across weights proportionally, never exceeding a weight.

    Floor shares first; the leftover units go one each to the earliest
    entries that still have room. Requires amount <= sum(weights).
    """
    whole = sum(weights)
    if amount == 0 or whole == 0:
        return [0] * len(weights)
    shares = [amount * w // whole for w in weights]
    leftover = amount - sum(shares)
    for i, weight in enumerate(weights):
        if leftover == 0:
            break
        if shares[i] < weight:
            shares[i] += 1
            leftover -= 1
    return shares


def apply_cart_discount(cart: Cart) -> int:
    """Cart-wide discount amount against the post-line-discount subtotal."""
    if cart.discount is None:
        return 0
    base = sum(line.net_total for line in cart.lines)
    return cart.discount.amount_on(base)


def compute_totals(cart: Cart) -> CartTotals:
    """Aggregate a cart into subtotal, discounts, tax and grand total.

    Tax is summed line by line at each line's own rate.
    """
    subtotal = sum(line.gross_total for line in cart.lines)
    line_discounts = sum(line.discount_amount for line in cart.lines)
    cart_discount = apply_cart_discount(cart)
    tax = sum(line.tax_amount for line in cart.lines)

    return CartTotals(
        subtotal=subtotal,
        line_discounts_total=line_discounts,
        cart_discount_amount=cart_discount,
        tax=tax,
        grand_total=subtotal - line_discounts - cart_discount + tax,
    )


def apply_discount(
    cart: Cart,
    scope: DiscountScope,
    discount: Discount,
    line_id: Optional[str] = None,
) -> int:
    """Route a discount to the line or the cart, returning the amount applied."""
    if scope == DiscountScope.LINE:
        if not line_id:
            raise InvalidAmount(errmsg.LINE_ID_REQUIRED_FOR_SCOPE)
        return cart.set_line_discount(line_id, discount)
    return cart.set_discount(discount)


def available_credit(credit_limit: int, credit_balance: int) -> int:
    """Remaining credit on a customer account (may be negative if overdrawn)."""
    require_amount(credit_limit, "credit_limit")
    require_amount(credit_balance, "credit_balance")
    return credit_limit - credit_balance


def can_charge_to_account(
    grand_total: int,
    credit_limit: int,
    credit_balance: int,
    credit_allowed: bool = True,
) -> bool:
    """Whether a sale can be put on the customer's account."""
    if not credit_allowed:
        return False
    return available_credit(credit_limit, credit_balance) >= grand_total
