"""Tests for error types."""

import pytest

from pos_settlement.errors import (
    AmountMismatch,
    IncompleteSettlement,
    InsufficientPayment,
    InvalidAmount,
    InvalidDenominationCatalog,
    InvalidDiscount,
    InvalidPaymentMethod,
    InvalidSplitOperation,
    LineNotFound,
    SessionClosed,
    SettlementEngineError,
    SplitLocked,
    UnrepresentableAmount,
    errmsg,
)


class TestSettlementEngineError:
    """Tests for the base error class."""

    def test_message_preserved(self) -> None:
        """Message is exposed as attribute and str()."""
        err = SettlementEngineError("something went wrong")
        assert err.message == "something went wrong"
        assert str(err) == "something went wrong"

    def test_exception_inheritance(self) -> None:
        """SettlementEngineError is an Exception."""
        assert isinstance(SettlementEngineError("x"), Exception)

    @pytest.mark.parametrize(
        "cls",
        [
            InvalidDiscount,
            SplitLocked,
            IncompleteSettlement,
            InvalidAmount,
            InvalidSplitOperation,
            InvalidDenominationCatalog,
            SessionClosed,
            InvalidPaymentMethod,
        ],
    )
    def test_subclasses_share_base(self, cls) -> None:
        """Every engine error is catchable as SettlementEngineError."""
        with pytest.raises(SettlementEngineError):
            raise cls("rejected")

    def test_codes_are_distinct(self) -> None:
        """Each error kind carries its own stable code."""
        codes = {
            InvalidDiscount.code,
            InsufficientPayment.code,
            UnrepresentableAmount.code,
            SplitLocked.code,
            IncompleteSettlement.code,
            AmountMismatch.code,
            InvalidAmount.code,
            InvalidSplitOperation.code,
            InvalidDenominationCatalog.code,
            LineNotFound.code,
            SessionClosed.code,
            InvalidPaymentMethod.code,
        }
        assert len(codes) == 12


class TestInsufficientPayment:
    def test_carries_amounts(self) -> None:
        err = InsufficientPayment(5000, 7350)
        assert err.amount_tendered == 5000
        assert err.amount_due == 7350
        assert err.shortfall == 2350
        assert errmsg.PAYMENT_INSUFFICIENT in str(err)
        assert err.code == "INSUFFICIENT_PAYMENT"


class TestAmountMismatch:
    def test_under_allocated_variance_positive(self) -> None:
        err = AmountMismatch(total=1000, allocated=900)
        assert err.variance == 100

    def test_over_allocated_variance_negative(self) -> None:
        err = AmountMismatch(total=1000, allocated=1200)
        assert err.variance == -200
        assert "1000" in str(err) and "1200" in str(err)


class TestUnrepresentableAmount:
    def test_carries_remainder(self) -> None:
        err = UnrepresentableAmount(amount=7, remainder=2)
        assert err.amount == 7
        assert err.remainder == 2


class TestLineNotFound:
    def test_message_names_line(self) -> None:
        err = LineNotFound("line-9")
        assert err.line_id == "line-9"
        assert str(err) == f"{errmsg.LINE_NOT_FOUND}: line-9"
