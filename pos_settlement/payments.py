"""Payment methods and per-method aggregation."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from .errors import InvalidPaymentMethod, errmsg

from .validation import require_amount


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    AIRTEL_MONEY = "AIRTEL_MONEY"
    MOOV_MONEY = "MOOV_MONEY"
    CHEQUE = "CHEQUE"
    TRANSFER = "TRANSFER"
    ACCOUNT = "ACCOUNT"

    @property
    def bucket(self) -> str:
        """Reporting bucket: cash, card, mobile or other."""
        return _BUCKETS.get(self, "other")


_BUCKETS = {
    PaymentMethod.CASH: "cash",
    PaymentMethod.CARD: "card",
    PaymentMethod.AIRTEL_MONEY: "mobile",
    PaymentMethod.MOOV_MONEY: "mobile",
}


def to_payment_method(value: Any) -> PaymentMethod:
    """Resolve a method or its name; unknown names raise InvalidPaymentMethod."""
    try:
        return PaymentMethod(value)
    except ValueError as e:
        raise InvalidPaymentMethod(f"{errmsg.UNKNOWN_PAYMENT_METHOD}: {value!r}") from e


@dataclass(frozen=True)
class Payment:
    method: PaymentMethod
    amount: int
    reference: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", to_payment_method(self.method))
        require_amount(self.amount, "amount")


@dataclass(frozen=True)
class PaymentTotals:
    cash: int = 0
    card: int = 0
    mobile: int = 0
    other: int = 0

    @property
    def total(self) -> int:
        return self.cash + self.card + self.mobile + self.other


def payment_totals(payments: Iterable[Payment]) -> PaymentTotals:
    """Sum payments into their reporting buckets."""
    sums = {"cash": 0, "card": 0, "mobile": 0, "other": 0}
    for payment in payments:
        sums[to_payment_method(payment.method).bucket] += payment.amount
    return PaymentTotals(**sums)


def remaining_due(total: int, payments: Iterable[Payment]) -> int:
    """Amount still owed after partial payments of a mixed payment."""
    require_amount(total, "total")
    paid = sum(p.amount for p in payments)
    return max(0, total - paid)
