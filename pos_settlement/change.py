"""Change calculator: decompose a cash surplus into notes and coins.

The decomposition is a greedy pass over a descending denomination catalog.
Greedy yields the fewest pieces for canonical currency systems such as the
FCFA catalog below. For a non-canonical catalog (e.g. 1/3/4) greedy can use
more pieces than necessary; that is a known limitation of the configured
catalog, not something this module compensates for.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .errors import (
    InsufficientPayment,
    InvalidDenominationCatalog,
    UnrepresentableAmount,
    errmsg,
)
from .validation import require_amount, require_int


class DenominationKind(str, Enum):
    NOTE = "NOTE"
    COIN = "COIN"


@dataclass(frozen=True)
class Denomination:
    face_value: int
    kind: DenominationKind
    label: str = ""

    def __post_init__(self) -> None:
        require_int(self.face_value, "face_value")
        if self.face_value <= 0:
            raise InvalidDenominationCatalog(
                f"{errmsg.FACE_VALUE_POSITIVE}: {self.face_value}"
            )


DEFAULT_DENOMINATIONS: tuple = (
    Denomination(10000, DenominationKind.NOTE, "10 000"),
    Denomination(5000, DenominationKind.NOTE, "5 000"),
    Denomination(2000, DenominationKind.NOTE, "2 000"),
    Denomination(1000, DenominationKind.NOTE, "1 000"),
    Denomination(500, DenominationKind.COIN, "500"),
    Denomination(200, DenominationKind.COIN, "200"),
    Denomination(100, DenominationKind.COIN, "100"),
    Denomination(50, DenominationKind.COIN, "50"),
    Denomination(25, DenominationKind.COIN, "25"),
    Denomination(10, DenominationKind.COIN, "10"),
    Denomination(5, DenominationKind.COIN, "5"),
    Denomination(1, DenominationKind.COIN, "1"),
)

DEFAULT_SUGGESTION_LIMIT = 6


@dataclass(frozen=True)
class ChangePiece:
    denomination: Denomination
    count: int

    @property
    def subtotal(self) -> int:
        return self.denomination.face_value * self.count


@dataclass(frozen=True)
class ChangeBreakdown:
    """Ordered pieces (largest first) whose face values sum to change_due."""

    change_due: int
    pieces: tuple = ()

    @property
    def total(self) -> int:
        return sum(p.subtotal for p in self.pieces)

    @property
    def piece_count(self) -> int:
        return sum(p.count for p in self.pieces)

    def counts(self) -> dict:
        """Face value -> count."""
        return {p.denomination.face_value: p.count for p in self.pieces}


def validate_catalog(denominations: Sequence[Denomination]) -> None:
    """Require a non-empty catalog in strictly descending face-value order."""
    if not denominations:
        raise InvalidDenominationCatalog(errmsg.CATALOG_EMPTY)
    for larger, smaller in zip(denominations, denominations[1:]):
        if smaller.face_value >= larger.face_value:
            raise InvalidDenominationCatalog(
                f"{errmsg.CATALOG_NOT_DESCENDING}: "
                f"{larger.face_value} before {smaller.face_value}"
            )


def compute_change(
    amount_tendered: int,
    amount_due: int,
    denominations: Sequence[Denomination] = DEFAULT_DENOMINATIONS,
) -> ChangeBreakdown:
    """Break amount_tendered - amount_due into denominations, largest first.

    Raises InsufficientPayment when the tender does not cover the amount due
    and UnrepresentableAmount when the catalog cannot express the change
    (it has no unit-value piece and the remainder is not a multiple).
    """
    require_amount(amount_tendered, "amount_tendered")
    require_amount(amount_due, "amount_due")
    if amount_tendered < amount_due:
        raise InsufficientPayment(amount_tendered, amount_due)
    validate_catalog(denominations)

    change_due = amount_tendered - amount_due
    remaining = change_due
    pieces = []
    for denomination in denominations:
        count, remaining = divmod(remaining, denomination.face_value)
        if count > 0:
            pieces.append(ChangePiece(denomination, count))

    if remaining != 0:
        raise UnrepresentableAmount(change_due, remaining)

    return ChangeBreakdown(change_due=change_due, pieces=tuple(pieces))


def rounding_steps(denominations: Sequence[Denomination]) -> list:
    """Quick-tender steps, ascending: the largest coin, then every note."""
    coins = [d.face_value for d in denominations if d.kind == DenominationKind.COIN]
    notes = [d.face_value for d in denominations if d.kind == DenominationKind.NOTE]
    steps = set(notes)
    if coins:
        steps.add(max(coins))
    return sorted(steps)


def suggest_rounded_amounts(
    amount_due: int,
    denominations: Sequence[Denomination] = DEFAULT_DENOMINATIONS,
    limit: Optional[int] = DEFAULT_SUGGESTION_LIMIT,
) -> list:
    """Quick-tender suggestions: the exact amount, then round-ups.

    The rounding steps are the largest coin and every note, smallest first.
    Each step rounds amount_due up to its next multiple; only values strictly
    above the amount due are kept, without duplicates, until limit entries
    are collected.

    Example: 7350 with the default catalog -> [7350, 7500, 8000, 10000]
    """
    require_amount(amount_due, "amount_due")
    validate_catalog(denominations)

    suggestions = [amount_due]
    for step in rounding_steps(denominations):
        if limit is not None and len(suggestions) >= limit:
            break
        rounded = -(-amount_due // step) * step
        if rounded > amount_due and rounded not in suggestions:
            suggestions.append(rounded)

    return sorted(suggestions)
