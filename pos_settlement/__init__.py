"""Transaction pricing, discount and settlement engine for point-of-sale."""

from .errors import (
    SettlementEngineError,
    InvalidDiscount,
    InsufficientPayment,
    UnrepresentableAmount,
    SplitLocked,
    IncompleteSettlement,
    AmountMismatch,
    InvalidAmount,
    InvalidSplitOperation,
    InvalidDenominationCatalog,
    LineNotFound,
    SessionClosed,
    InvalidPaymentMethod,
)
from .money import round_half_up, percent_of, divide_half_up, split_evenly
from .pricing import (
    DiscountKind,
    Discount,
    Supplement,
    LineItem,
    TaxRate,
    tax_rate_percent,
    apply_line_discount,
    compute_tax,
)
from .cart import (
    Cart,
    CartTotals,
    DiscountScope,
    apply_cart_discount,
    apply_discount,
    apportion,
    compute_totals,
    available_credit,
    can_charge_to_account,
)
from .change import (
    DenominationKind,
    Denomination,
    ChangePiece,
    ChangeBreakdown,
    DEFAULT_DENOMINATIONS,
    compute_change,
    suggest_rounded_amounts,
    validate_catalog,
)
from .payments import (
    PaymentMethod,
    Payment,
    PaymentTotals,
    payment_totals,
    remaining_due,
    to_payment_method,
)
from .split import (
    SplitMode,
    SplitPart,
    SplitSession,
    SettledPart,
    SettlementResult,
    MAX_PARTS,
)
from .reconciliation import (
    VarianceClassification,
    ReconciliationResult,
    CashSession,
    open_session,
    record_payment,
    record_payments,
    classify_variance,
    reconcile,
    close_session,
    count_cash,
    sales_summary,
)
from .config import configure_logging, load_denominations

__all__ = [
    # Errors
    "SettlementEngineError",
    "InvalidDiscount",
    "InsufficientPayment",
    "UnrepresentableAmount",
    "SplitLocked",
    "IncompleteSettlement",
    "AmountMismatch",
    "InvalidAmount",
    "InvalidSplitOperation",
    "InvalidDenominationCatalog",
    "LineNotFound",
    "SessionClosed",
    "InvalidPaymentMethod",
    # Money
    "round_half_up",
    "percent_of",
    "divide_half_up",
    "split_evenly",
    # Pricing
    "DiscountKind",
    "Discount",
    "Supplement",
    "LineItem",
    "TaxRate",
    "tax_rate_percent",
    "apply_line_discount",
    "compute_tax",
    # Cart
    "Cart",
    "CartTotals",
    "DiscountScope",
    "apply_cart_discount",
    "apply_discount",
    "apportion",
    "compute_totals",
    "available_credit",
    "can_charge_to_account",
    # Change
    "DenominationKind",
    "Denomination",
    "ChangePiece",
    "ChangeBreakdown",
    "DEFAULT_DENOMINATIONS",
    "compute_change",
    "suggest_rounded_amounts",
    "validate_catalog",
    # Payments
    "PaymentMethod",
    "Payment",
    "PaymentTotals",
    "payment_totals",
    "remaining_due",
    "to_payment_method",
    # Split
    "SplitMode",
    "SplitPart",
    "SplitSession",
    "SettledPart",
    "SettlementResult",
    "MAX_PARTS",
    # Reconciliation
    "VarianceClassification",
    "ReconciliationResult",
    "CashSession",
    "open_session",
    "record_payment",
    "record_payments",
    "classify_variance",
    "reconcile",
    "close_session",
    "count_cash",
    "sales_summary",
    # Config
    "configure_logging",
    "load_denominations",
]
