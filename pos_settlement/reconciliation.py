"""Cash session lifecycle and drawer reconciliation.

A cash session opens with a float, accumulates per-method sales totals,
and closes once with a counted cash amount. Expected cash in the drawer is
the float plus cash sales; any difference from the count is a variance.
No tolerance band applies: tolerating small variances is a business
decision for the caller.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Mapping, Optional, Sequence

import structlog

from .change import DEFAULT_DENOMINATIONS, Denomination
from .errors import InvalidAmount, InvalidDenominationCatalog, SessionClosed, errmsg
from .money import divide_half_up
from .payments import Payment, PaymentMethod, to_payment_method
from .validation import require_amount, require_int

logger = structlog.get_logger()


class VarianceClassification(str, Enum):
    BALANCED = "BALANCED"
    SURPLUS = "SURPLUS"
    SHORTAGE = "SHORTAGE"


@dataclass(frozen=True)
class ReconciliationResult:
    expected: int
    counted: int
    variance: int
    classification: VarianceClassification

    @property
    def is_balanced(self) -> bool:
        return self.classification == VarianceClassification.BALANCED


@dataclass
class CashSession:
    """Cash drawer session from open to close."""

    opened_at: datetime
    float_amount: int
    cash_sales_total: int = 0
    card_sales_total: int = 0
    mobile_sales_total: int = 0
    other_sales_total: int = 0
    sales_count: int = 0
    counted_cash: Optional[int] = None
    variance: Optional[int] = None
    closed_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        require_amount(self.float_amount, "float_amount")
        for name in ("cash", "card", "mobile", "other"):
            require_amount(getattr(self, f"{name}_sales_total"), f"{name}_sales_total")

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None

    @property
    def expected_cash(self) -> int:
        return self.float_amount + self.cash_sales_total

    @property
    def total_sales(self) -> int:
        return (
            self.cash_sales_total
            + self.card_sales_total
            + self.mobile_sales_total
            + self.other_sales_total
        )


def open_session(float_amount: int, opened_at: Optional[datetime] = None) -> CashSession:
    """Open a drawer session; the float is fixed from here on."""
    session = CashSession(
        opened_at=opened_at or datetime.now(timezone.utc),
        float_amount=float_amount,
    )
    logger.info("cash_session_opened", component="cash_session", float_amount=float_amount)
    return session


def _resolve(method: PaymentMethod, amount: int) -> tuple:
    require_amount(amount, "amount")
    return f"{to_payment_method(method).bucket}_sales_total", amount


def record_payment(session: CashSession, method: PaymentMethod, amount: int) -> CashSession:
    """Accumulate one payment into the session's per-method totals."""
    if session.is_closed:
        raise SessionClosed(errmsg.SESSION_CLOSED)
    return record_payments(session, [Payment(method, amount)], count_sale=False)


def record_payments(
    session: CashSession,
    payments: Iterable[Payment],
    count_sale: bool = True,
) -> CashSession:
    """Accumulate all payments of one sale and count the sale once.

    Every payment is checked before the session changes: a rejected batch
    leaves the totals and the sale count untouched.
    """
    if session.is_closed:
        raise SessionClosed(errmsg.SESSION_CLOSED)
    entries = [_resolve(payment.method, payment.amount) for payment in payments]

    for field_name, amount in entries:
        setattr(session, field_name, getattr(session, field_name) + amount)
    if count_sale:
        session.sales_count += 1
    return session


def classify_variance(variance: int) -> VarianceClassification:
    if variance == 0:
        return VarianceClassification.BALANCED
    if variance > 0:
        return VarianceClassification.SURPLUS
    return VarianceClassification.SHORTAGE


def reconcile(session: CashSession, counted_cash: int) -> ReconciliationResult:
    """Compare counted cash against float + cash sales.

    Pure: safe to call repeatedly while the count is being adjusted.
    """
    require_amount(counted_cash, "counted_cash")
    expected = session.expected_cash
    variance = counted_cash - expected
    return ReconciliationResult(
        expected=expected,
        counted=counted_cash,
        variance=variance,
        classification=classify_variance(variance),
    )


def close_session(
    session: CashSession,
    counted_cash: int,
    closed_at: Optional[datetime] = None,
) -> ReconciliationResult:
    """Freeze the count and variance on the session. Happens once."""
    log = logger.bind(component="cash_session", opened_at=session.opened_at.isoformat())
    if session.is_closed:
        log.warning("cash_session_close_rejected", reason=errmsg.SESSION_CLOSED)
        raise SessionClosed(errmsg.SESSION_CLOSED)

    result = reconcile(session, counted_cash)
    session.counted_cash = result.counted
    session.variance = result.variance
    session.closed_at = closed_at or datetime.now(timezone.utc)

    log.info(
        "cash_session_closed",
        expected=result.expected,
        counted=result.counted,
        variance=result.variance,
        classification=result.classification.value,
    )
    return result


def count_cash(
    counts: Mapping[int, int],
    denominations: Sequence[Denomination] = DEFAULT_DENOMINATIONS,
) -> int:
    """Total of a drawer count given as face value -> number of pieces."""
    known = {d.face_value for d in denominations}
    total = 0
    for face_value, count in counts.items():
        if face_value not in known:
            raise InvalidDenominationCatalog(f"{errmsg.UNKNOWN_DENOMINATION}: {face_value}")
        require_int(count, f"count[{face_value}]")
        if count < 0:
            raise InvalidAmount(f"{errmsg.AMOUNT_NEGATIVE}: count[{face_value}]={count}")
        total += face_value * count
    return total


def sales_summary(session: CashSession) -> dict:
    """Session figures for the closing screen.

    Shares are whole percentages of total sales, rounded half-up; the
    average ticket is rounded half-up and 0 when nothing was sold.
    """
    total = session.total_sales

    def share(amount: int) -> int:
        return divide_half_up(amount * 100, total)

    return {
        "total_sales": total,
        "sales_count": session.sales_count,
        "average_ticket": divide_half_up(total, session.sales_count),
        "expected_cash": session.expected_cash,
        "shares": {
            "cash": share(session.cash_sales_total),
            "card": share(session.card_sales_total),
            "mobile": share(session.mobile_sales_total),
            "other": share(session.other_sales_total),
        },
    }
