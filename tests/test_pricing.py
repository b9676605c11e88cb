"""Tests for line pricing."""

import pytest

from pos_settlement.errors import InvalidAmount, InvalidDiscount
from pos_settlement.pricing import (
    Discount,
    DiscountKind,
    LineItem,
    Supplement,
    TaxRate,
    apply_line_discount,
    compute_tax,
    tax_rate_percent,
)


def _line(**overrides) -> LineItem:
    fields = {"id": "l1", "unit_price": 1000, "quantity": 3}
    fields.update(overrides)
    return LineItem(**fields)


class TestDiscountValidation:
    @pytest.mark.parametrize("value", [0, -5, 100.01, 250])
    def test_percentage_out_of_range(self, value) -> None:
        with pytest.raises(InvalidDiscount):
            Discount.percentage(value).validate()

    @pytest.mark.parametrize("value", [0.5, 10, 100])
    def test_percentage_in_range(self, value) -> None:
        Discount.percentage(value).validate()

    def test_fixed_negative(self) -> None:
        with pytest.raises(InvalidDiscount):
            Discount.fixed(-1).validate()

    def test_fixed_zero_allowed(self) -> None:
        Discount.fixed(0).validate()

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "10", True])
    def test_non_numeric_rejected(self, value) -> None:
        with pytest.raises(InvalidDiscount):
            Discount(DiscountKind.FIXED_AMOUNT, value).validate()

    def test_line_rejects_invalid_discount(self) -> None:
        with pytest.raises(InvalidDiscount):
            _line(line_discount=Discount.percentage(150))


class TestLineTotals:
    def test_gross_total(self) -> None:
        line = _line()
        assert line.gross_total == 3000
        assert line.discount_amount == 0
        assert line.net_total == 3000

    def test_supplements_add_to_unit_price(self) -> None:
        line = _line(
            unit_price=2500,
            quantity=2,
            supplements=[Supplement("cheese", 300), Supplement("bacon", 500)],
        )
        assert line.supplements_total == 800
        assert line.unit_price_with_supplements == 3300
        assert line.gross_total == 6600

    def test_percentage_discount_scenario(self) -> None:
        """unit 1000 x 3 at 10% off: gross 3000, discount 300, net 2700."""
        line = _line(line_discount=Discount.percentage(10))
        assert line.gross_total == 3000
        assert line.discount_amount == 300
        assert line.net_total == 2700

    def test_notes_have_no_effect(self) -> None:
        assert _line(notes="no onions").net_total == _line().net_total

    def test_tax_on_net_amount(self) -> None:
        line = _line(line_discount=Discount.percentage(10), tax_rate=TaxRate.STANDARD)
        assert line.tax_amount == 486
        assert line.total == 3186


class TestLineValidation:
    def test_zero_quantity(self) -> None:
        with pytest.raises(InvalidAmount):
            _line(quantity=0)

    def test_negative_price(self) -> None:
        with pytest.raises(InvalidAmount):
            _line(unit_price=-1)

    def test_float_price(self) -> None:
        with pytest.raises(InvalidAmount):
            _line(unit_price=10.5)

    def test_negative_supplement(self) -> None:
        with pytest.raises(InvalidAmount):
            Supplement("extra", -100)

    def test_tax_rate_range(self) -> None:
        with pytest.raises(InvalidAmount):
            _line(tax_rate=120)


class TestApplyLineDiscount:
    def test_fixed_amount(self) -> None:
        assert apply_line_discount(_line(), Discount.fixed(450)) == 450

    def test_fixed_amount_clamped_to_gross(self) -> None:
        assert apply_line_discount(_line(), Discount.fixed(5000)) == 3000

    def test_hundred_percent_zeroes_line(self) -> None:
        assert apply_line_discount(_line(), Discount.percentage(100)) == 3000

    def test_fractional_fixed_rounded(self) -> None:
        assert apply_line_discount(_line(), Discount.fixed(99.5)) == 100

    def test_pure(self) -> None:
        """Computing the amount does not attach the discount."""
        line = _line()
        apply_line_discount(line, Discount.percentage(50))
        assert line.line_discount is None

    def test_invalid_discount(self) -> None:
        with pytest.raises(InvalidDiscount):
            apply_line_discount(_line(), Discount.percentage(0))

    @pytest.mark.parametrize("unit_price", [0, 1, 7, 999, 2500])
    @pytest.mark.parametrize("quantity", [1, 2, 9])
    @pytest.mark.parametrize(
        "discount",
        [Discount.percentage(0.1), Discount.percentage(33), Discount.percentage(100),
         Discount.fixed(0), Discount.fixed(15), Discount.fixed(100000)],
    )
    def test_clamp_holds(self, unit_price, quantity, discount) -> None:
        line = _line(unit_price=unit_price, quantity=quantity)
        amount = apply_line_discount(line, discount)
        assert 0 <= amount <= line.gross_total


class TestTax:
    def test_compute_tax_rounds_half_up(self) -> None:
        """250 * 18% = 45; 25 * 10% = 2.5 -> 3."""
        assert compute_tax(250, 18) == 45
        assert compute_tax(25, 10) == 3

    def test_exempt(self) -> None:
        assert compute_tax(9999, TaxRate.EXEMPT) == 0

    @pytest.mark.parametrize(
        "code,expected",
        [("STANDARD", 18), ("reduit", 10), ("REDUCED", 10), ("EXONERE", 0), ("exempt", 0), ("???", 18)],
    )
    def test_tax_codes(self, code, expected) -> None:
        assert tax_rate_percent(code) == expected

    def test_numeric_rate_passthrough(self) -> None:
        assert tax_rate_percent(5.5) == 5.5
