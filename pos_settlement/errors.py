"""Error types for the settlement engine."""


class errmsg:
    """Error message constants for the settlement engine."""

    AMOUNT_NOT_INT = "Amount must be an integer"
    AMOUNT_NEGATIVE = "Amount cannot be negative"
    QUANTITY_POSITIVE = "Quantity must be at least 1"
    TAX_RATE_RANGE = "Tax rate must be 0-100"
    PERCENTAGE_RANGE = "Percentage must be greater than 0 and at most 100"
    FIXED_DISCOUNT_NEGATIVE = "Fixed discount cannot be negative"
    DISCOUNT_NOT_FINITE = "Discount value must be a finite number"
    INVALID_DISCOUNT_TYPE = "Invalid discount type"
    LINE_NOT_FOUND = "Line not in cart"
    LINE_ID_REQUIRED = "Line ID is required"
    DUPLICATE_LINE = "Line already in cart"
    LINE_ID_REQUIRED_FOR_SCOPE = "Line discount requires a line ID"
    PAYMENT_INSUFFICIENT = "Amount tendered is less than amount due"
    UNREPRESENTABLE = "Change cannot be expressed with the denomination catalog"
    CATALOG_EMPTY = "Denomination catalog is empty"
    CATALOG_NOT_DESCENDING = "Denominations must be in strictly descending order"
    FACE_VALUE_POSITIVE = "Denomination face value must be positive"
    UNKNOWN_DENOMINATION = "Denomination not in catalog"
    PART_PAID = "Part is already paid"
    SPLIT_HAS_PAYMENTS = "Cannot change split mode after a part is paid"
    SPLIT_SETTLED = "Split session is no longer open"
    PARTS_UNPAID = "All parts must be paid before settlement"
    ITEMS_UNASSIGNED = "All items must be assigned before settlement"
    AMOUNTS_MISMATCH = "Part amounts do not sum to the total"
    PART_NOT_FOUND = "Part not in split session"
    ITEM_NOT_FOUND = "Item not in split session"
    PART_COUNT_RANGE = "Number of parts out of range"
    LAST_PART = "A split session keeps at least one part"
    AMOUNT_NOT_EDITABLE = "Part amounts are only editable in custom mode"
    ITEMS_MODE_ONLY = "Item assignment requires items mode"
    DUPLICATE_ITEM = "Item appears twice in split session"
    UNKNOWN_PAYMENT_METHOD = "Unknown payment method"
    SESSION_CLOSED = "Cash session is already closed"


class SettlementEngineError(Exception):
    """Base class for engine errors.

    Every engine error is a local validation failure: it is raised to the
    immediate caller and never retried.
    """

    code = "SETTLEMENT_ENGINE_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidDiscount(SettlementEngineError):
    """Discount value out of bounds for its kind."""

    code = "INVALID_DISCOUNT"


class InsufficientPayment(SettlementEngineError):
    """Tendered amount is less than the amount due."""

    code = "INSUFFICIENT_PAYMENT"

    def __init__(self, amount_tendered: int, amount_due: int):
        super().__init__(
            f"{errmsg.PAYMENT_INSUFFICIENT}: tendered {amount_tendered}, due {amount_due}"
        )
        self.amount_tendered = amount_tendered
        self.amount_due = amount_due

    @property
    def shortfall(self) -> int:
        return self.amount_due - self.amount_tendered


class UnrepresentableAmount(SettlementEngineError):
    """Change cannot be expressed with the given denomination catalog."""

    code = "UNREPRESENTABLE_AMOUNT"

    def __init__(self, amount: int, remainder: int):
        super().__init__(f"{errmsg.UNREPRESENTABLE}: {amount} (remainder {remainder})")
        self.amount = amount
        self.remainder = remainder


class SplitLocked(SettlementEngineError):
    """Mutation of a paid part, or of a split that has payments or is settled."""

    code = "SPLIT_LOCKED"


class IncompleteSettlement(SettlementEngineError):
    """Settlement attempted with unpaid parts or unassigned items."""

    code = "INCOMPLETE_SETTLEMENT"


class AmountMismatch(SettlementEngineError):
    """Settlement attempted while part amounts do not sum to the total."""

    code = "AMOUNT_MISMATCH"

    def __init__(self, total: int, allocated: int):
        super().__init__(
            f"{errmsg.AMOUNTS_MISMATCH}: total {total}, allocated {allocated}"
        )
        self.total = total
        self.allocated = allocated

    @property
    def variance(self) -> int:
        """Positive when under-allocated, negative when over-allocated."""
        return self.total - self.allocated


class InvalidAmount(SettlementEngineError):
    """Money amount, quantity or rate outside its allowed range."""

    code = "INVALID_AMOUNT"


class InvalidSplitOperation(SettlementEngineError):
    """Split operation not valid in the current mode or for the given ids."""

    code = "INVALID_SPLIT_OPERATION"


class InvalidDenominationCatalog(SettlementEngineError):
    """Denomination catalog is malformed or lacks a requested denomination."""

    code = "INVALID_DENOMINATION_CATALOG"


class LineNotFound(SettlementEngineError):
    """Cart has no line with the given id."""

    code = "LINE_NOT_FOUND"

    def __init__(self, line_id: str):
        super().__init__(f"{errmsg.LINE_NOT_FOUND}: {line_id}")
        self.line_id = line_id


class SessionClosed(SettlementEngineError):
    """Cash session has already been closed."""

    code = "SESSION_CLOSED"


class InvalidPaymentMethod(SettlementEngineError):
    """Payment method not among the supported methods."""

    code = "INVALID_PAYMENT_METHOD"
