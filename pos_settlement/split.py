"""Split-bill allocator.

A SplitSession divides a bill total among payers under one of three modes:

- EQUAL: floor division, the first part absorbs the remainder
- CUSTOM: amounts typed per part; only validated at settlement
- ITEMS: each line item is owned by at most one part; a part's amount is
  the sum of its items' amounts (tax-included, less any cart discount share)

In every mode the part amounts must sum to the total before settlement.

Modes switch freely until a part is paid. A paid part is frozen. settle()
is one-shot: it produces a SettlementResult for transaction persistence and
closes the session.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

import structlog

from .cart import Cart
from .errors import (
    AmountMismatch,
    IncompleteSettlement,
    InsufficientPayment,
    InvalidSplitOperation,
    SettlementEngineError,
    SplitLocked,
    errmsg,
)
from .money import split_evenly
from .payments import PaymentMethod, to_payment_method
from .pricing import LineItem
from .validation import require_amount, require_in_range, require_member

logger = structlog.get_logger()

DEFAULT_PARTY_SIZE = 2
MAX_PARTS = 20


class SplitMode(str, Enum):
    EQUAL = "EQUAL"
    CUSTOM = "CUSTOM"
    ITEMS = "ITEMS"


def _new_part_id() -> str:
    return f"part-{uuid.uuid4().hex[:12]}"


@dataclass
class SplitPart:
    """One payer's share of the bill."""

    id: str
    amount: int = 0
    paid: bool = False
    payment_method: Optional[PaymentMethod] = None
    reference: Optional[str] = None
    assigned_item_ids: set = field(default_factory=set)
    label: str = ""
    amount_tendered: Optional[int] = None
    change_given: Optional[int] = None


@dataclass(frozen=True)
class SettledPart:
    part_id: str
    part_amount: int
    payment_method: PaymentMethod
    reference: Optional[str] = None
    amount_tendered: Optional[int] = None
    change_given: Optional[int] = None
    item_ids: tuple = ()

    def to_dict(self) -> dict:
        return {
            "part_id": self.part_id,
            "part_amount": self.part_amount,
            "payment_method": self.payment_method.value,
            "reference": self.reference,
            "amount_tendered": self.amount_tendered,
            "change_given": self.change_given,
            "item_ids": list(self.item_ids),
        }


@dataclass(frozen=True)
class SettlementResult:
    """Finalized split handed to transaction persistence."""

    total: int
    mode: SplitMode
    parts: tuple
    lines: tuple = ()
    sale_id: Optional[str] = None

    @property
    def collected(self) -> int:
        return sum(p.part_amount for p in self.parts)

    def to_dict(self) -> dict:
        return {
            "sale_id": self.sale_id,
            "total": self.total,
            "mode": self.mode.value,
            "parts": [p.to_dict() for p in self.parts],
            "line_item_ids": [line.id for line in self.lines],
        }


@dataclass
class SplitSession:
    """State of one bill being split among payers."""

    total: int
    mode: SplitMode = SplitMode.EQUAL
    parts: list = field(default_factory=list)
    party_size: int = DEFAULT_PARTY_SIZE
    item_amounts: dict = field(default_factory=dict)
    lines: tuple = ()
    sale_id: Optional[str] = None
    is_open: bool = True

    def __post_init__(self) -> None:
        require_amount(self.total, "total")
        self.log = logger.bind(component="split_bill", sale_id=self.sale_id)

    @classmethod
    def open(
        cls,
        total: int,
        lines: Sequence[LineItem] = (),
        party_size: int = DEFAULT_PARTY_SIZE,
        sale_id: Optional[str] = None,
        item_amounts: Optional[dict] = None,
    ) -> "SplitSession":
        """Open a split in EQUAL mode over party_size payers.

        item_amounts maps line id -> amount charged in an ITEMS split and
        defaults to each line's tax-included total.
        """
        seen = set()
        for line in lines:
            if line.id in seen:
                raise InvalidSplitOperation(f"{errmsg.DUPLICATE_ITEM}: {line.id}")
            seen.add(line.id)
        if item_amounts is None:
            item_amounts = {line.id: line.total for line in lines}
        else:
            for line in lines:
                require_member(
                    line.id,
                    item_amounts,
                    InvalidSplitOperation(f"{errmsg.ITEM_NOT_FOUND}: {line.id}"),
                )
            item_amounts = {line.id: item_amounts[line.id] for line in lines}
        for item_id, amount in item_amounts.items():
            require_amount(amount, f"item_amounts[{item_id}]")

        session = cls(
            total=total,
            lines=tuple(lines),
            item_amounts=item_amounts,
            sale_id=sale_id,
        )
        session.split_equal(party_size)
        session.log.info("split_opened", total=total, party_size=party_size)
        return session

    @classmethod
    def from_cart(
        cls,
        cart: Cart,
        party_size: int = DEFAULT_PARTY_SIZE,
        sale_id: Optional[str] = None,
    ) -> "SplitSession":
        """Open a split over a cart; ITEMS amounts sum to its grand total."""
        return cls.open(
            cart.totals.grand_total,
            cart.lines,
            party_size,
            sale_id,
            item_amounts=cart.item_amounts(),
        )

    # --- derived state ---

    @property
    def allocated(self) -> int:
        return sum(p.amount for p in self.parts)

    @property
    def variance(self) -> int:
        """Positive when under-allocated, negative when over-allocated."""
        return self.total - self.allocated

    @property
    def is_locked(self) -> bool:
        return any(p.paid for p in self.parts)

    @property
    def all_paid(self) -> bool:
        return bool(self.parts) and all(p.paid for p in self.parts)

    @property
    def remaining_to_pay(self) -> int:
        return sum(p.amount for p in self.parts if not p.paid)

    @property
    def unassigned_item_ids(self) -> list:
        """Items not yet owned by any part, in cart order (ITEMS mode only)."""
        if self.mode != SplitMode.ITEMS:
            return []
        owned = set()
        for part in self.parts:
            owned |= part.assigned_item_ids
        return [item_id for item_id in self.item_amounts if item_id not in owned]

    def part(self, part_id: str) -> SplitPart:
        for part in self.parts:
            if part.id == part_id:
                return part
        raise InvalidSplitOperation(f"{errmsg.PART_NOT_FOUND}: {part_id}")

    def owner_of(self, item_id: str) -> Optional[SplitPart]:
        for part in self.parts:
            if item_id in part.assigned_item_ids:
                return part
        return None

    # --- guards ---

    def _require_open(self) -> None:
        if not self.is_open:
            raise SplitLocked(errmsg.SPLIT_SETTLED)

    def _require_unlocked(self) -> None:
        if self.is_locked:
            raise SplitLocked(errmsg.SPLIT_HAS_PAYMENTS)

    @staticmethod
    def _require_unpaid(part: SplitPart) -> None:
        if part.paid:
            raise SplitLocked(f"{errmsg.PART_PAID}: {part.id}")

    def _require_part_count(self, n: int) -> None:
        require_in_range(
            n,
            1,
            MAX_PARTS,
            InvalidSplitOperation(f"{errmsg.PART_COUNT_RANGE}: {n} (1-{MAX_PARTS})"),
        )

    # --- mode transitions ---

    def set_mode(self, mode: SplitMode) -> None:
        """Switch allocation policy; only allowed before any part is paid."""
        self._require_open()
        mode = SplitMode(mode)
        if mode == self.mode:
            return
        self._require_unlocked()

        if mode == SplitMode.EQUAL:
            self._generate_equal(self.party_size)
        elif mode == SplitMode.CUSTOM:
            if len(self.parts) < 2:
                self.parts = [SplitPart(id=_new_part_id(), amount=self.total, label="Part 1")]
            for part in self.parts:
                part.assigned_item_ids = set()
        else:
            self.parts = [
                SplitPart(id=_new_part_id(), label=f"Person {i + 1}")
                for i in range(self.party_size)
            ]

        self.log.info("split_mode_changed", previous=self.mode.value, mode=mode.value)
        self.mode = mode

    def split_equal(self, n: int) -> list:
        """EQUAL(n): regenerate n parts, the first absorbing the remainder.

        Regenerating discards per-part payment state: part identity is not
        stable across resizes.
        """
        self._require_open()
        self._require_part_count(n)
        if self.mode != SplitMode.EQUAL:
            self._require_unlocked()
        discarded = sum(1 for p in self.parts if p.paid)
        if discarded:
            self.log.warning("paid_parts_discarded", count=discarded)

        self.mode = SplitMode.EQUAL
        self.party_size = n
        self._generate_equal(n)
        return self.parts

    def _generate_equal(self, n: int) -> None:
        base, remainder = split_evenly(self.total, n)
        self.parts = [
            SplitPart(
                id=_new_part_id(),
                amount=base + remainder if i == 0 else base,
                label=f"Person {i + 1}",
            )
            for i in range(n)
        ]

    def set_party_size(self, n: int) -> None:
        """Change the number of payers.

        EQUAL regenerates all parts. ITEMS keeps the first n parts (dropped
        parts release their items) and appends empty ones. CUSTOM only
        records the size; parts are added and removed explicitly.
        """
        self._require_open()
        self._require_part_count(n)

        if self.mode == SplitMode.EQUAL:
            self.split_equal(n)
            return

        if self.mode == SplitMode.ITEMS:
            for dropped in self.parts[n:]:
                self._require_unpaid(dropped)
            kept = self.parts[:n]
            for i in range(len(kept), n):
                kept.append(SplitPart(id=_new_part_id(), label=f"Person {i + 1}"))
            self.parts = kept
        self.party_size = n

    # --- CUSTOM / ITEMS part management ---

    def add_part(self, amount: Optional[int] = None) -> SplitPart:
        """Add a part. In CUSTOM mode it defaults to the unallocated remainder."""
        self._require_open()
        if self.mode == SplitMode.EQUAL:
            raise InvalidSplitOperation(f"{errmsg.AMOUNT_NOT_EDITABLE}: use set_party_size")
        self._require_part_count(len(self.parts) + 1)

        if self.mode == SplitMode.ITEMS:
            if amount is not None:
                raise InvalidSplitOperation(errmsg.AMOUNT_NOT_EDITABLE)
            part = SplitPart(id=_new_part_id(), label=f"Person {len(self.parts) + 1}")
        else:
            if amount is None:
                amount = max(0, self.variance)
            require_amount(amount, "amount")
            part = SplitPart(id=_new_part_id(), amount=amount, label=f"Part {len(self.parts) + 1}")

        self.parts.append(part)
        self.log.info("part_added", part_id=part.id, amount=part.amount)
        return part

    def remove_part(self, part_id: str) -> SplitPart:
        """Remove an unpaid part; ITEMS-mode items it held become unassigned."""
        self._require_open()
        if self.mode == SplitMode.EQUAL:
            raise InvalidSplitOperation(f"{errmsg.AMOUNT_NOT_EDITABLE}: use set_party_size")
        part = self.part(part_id)
        self._require_unpaid(part)
        if len(self.parts) <= 1:
            raise InvalidSplitOperation(errmsg.LAST_PART)

        self.parts.remove(part)
        self.log.info("part_removed", part_id=part_id)
        return part

    def set_part_amount(self, part_id: str, amount: int) -> SplitPart:
        """Enter a CUSTOM amount. Never rebalances other parts."""
        self._require_open()
        if self.mode != SplitMode.CUSTOM:
            raise InvalidSplitOperation(errmsg.AMOUNT_NOT_EDITABLE)
        part = self.part(part_id)
        self._require_unpaid(part)
        require_amount(amount, "amount")

        part.amount = amount
        self.log.info("part_amount_set", part_id=part_id, amount=amount, variance=self.variance)
        return part

    def assign_item(self, item_id: str, part_id: str) -> SplitPart:
        """Give an item to a part, taking it away from any previous owner."""
        self._require_open()
        if self.mode != SplitMode.ITEMS:
            raise InvalidSplitOperation(errmsg.ITEMS_MODE_ONLY)
        require_member(
            item_id,
            self.item_amounts,
            InvalidSplitOperation(f"{errmsg.ITEM_NOT_FOUND}: {item_id}"),
        )
        target = self.part(part_id)
        self._require_unpaid(target)

        owner = self.owner_of(item_id)
        if owner is target:
            return target
        if owner is not None:
            self._require_unpaid(owner)
            owner.assigned_item_ids.discard(item_id)
            self._recompute(owner)

        target.assigned_item_ids.add(item_id)
        self._recompute(target)
        self.log.info(
            "item_assigned",
            item_id=item_id,
            part_id=part_id,
            previous_part_id=owner.id if owner else None,
        )
        return target

    def unassign_item(self, item_id: str) -> None:
        self._require_open()
        if self.mode != SplitMode.ITEMS:
            raise InvalidSplitOperation(errmsg.ITEMS_MODE_ONLY)
        owner = self.owner_of(item_id)
        if owner is None:
            return
        self._require_unpaid(owner)
        owner.assigned_item_ids.discard(item_id)
        self._recompute(owner)
        self.log.info("item_unassigned", item_id=item_id, part_id=owner.id)

    def _recompute(self, part: SplitPart) -> None:
        part.amount = sum(self.item_amounts[item_id] for item_id in part.assigned_item_ids)

    # --- payment and settlement ---

    def mark_as_paid(
        self,
        part_id: str,
        method: PaymentMethod,
        reference: Optional[str] = None,
        amount_tendered: Optional[int] = None,
    ) -> SplitPart:
        """Record payment of a part; repeating it for a paid part is a no-op.

        A cash tender records the change given back for that part.
        """
        self._require_open()
        part = self.part(part_id)
        if part.paid:
            return part

        method = to_payment_method(method)
        change_given = None
        if amount_tendered is not None:
            require_amount(amount_tendered, "amount_tendered")
            if amount_tendered < part.amount:
                raise InsufficientPayment(amount_tendered, part.amount)
            change_given = amount_tendered - part.amount

        part.paid = True
        part.payment_method = method
        part.reference = reference
        part.amount_tendered = amount_tendered
        part.change_given = change_given
        self.log.info(
            "part_paid",
            part_id=part_id,
            amount=part.amount,
            method=method.value,
            remaining=self.remaining_to_pay,
        )
        return part

    def _check_settleable(self) -> None:
        unpaid = [p.id for p in self.parts if not p.paid]
        if unpaid:
            raise IncompleteSettlement(f"{errmsg.PARTS_UNPAID}: {', '.join(unpaid)}")
        unassigned = self.unassigned_item_ids
        if unassigned:
            raise IncompleteSettlement(f"{errmsg.ITEMS_UNASSIGNED}: {', '.join(unassigned)}")
        if self.allocated != self.total:
            raise AmountMismatch(self.total, self.allocated)

    def can_settle(self) -> bool:
        if not self.is_open:
            return False
        try:
            self._check_settleable()
        except SettlementEngineError:
            return False
        return True

    def settle(self) -> SettlementResult:
        """Finalize the split. One-shot: the session is closed afterwards."""
        self._require_open()
        try:
            self._check_settleable()
        except SettlementEngineError as e:
            self.log.warning("settlement_rejected", code=e.code, reason=str(e))
            raise

        order = list(self.item_amounts)
        result = SettlementResult(
            total=self.total,
            mode=self.mode,
            parts=tuple(
                SettledPart(
                    part_id=p.id,
                    part_amount=p.amount,
                    payment_method=p.payment_method,
                    reference=p.reference,
                    amount_tendered=p.amount_tendered,
                    change_given=p.change_given,
                    item_ids=tuple(i for i in order if i in p.assigned_item_ids),
                )
                for p in self.parts
            ),
            lines=self.lines,
            sale_id=self.sale_id,
        )
        self.is_open = False
        self.log.info("split_settled", mode=self.mode.value, parts=len(self.parts), total=self.total)
        return result

    def cancel(self) -> None:
        """Abandon the split without producing a settlement."""
        self._require_open()
        paid = sum(1 for p in self.parts if p.paid)
        if paid:
            self.log.warning("split_cancelled_with_payments", paid_parts=paid)
        self.is_open = False
        self.parts = []
        self.log.info("split_cancelled")
