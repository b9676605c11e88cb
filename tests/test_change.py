"""Tests for the change calculator."""

import pytest

from pos_settlement.change import (
    DEFAULT_DENOMINATIONS,
    Denomination,
    DenominationKind,
    compute_change,
    suggest_rounded_amounts,
    validate_catalog,
)
from pos_settlement.errors import (
    InsufficientPayment,
    InvalidDenominationCatalog,
    UnrepresentableAmount,
)

NOTE = DenominationKind.NOTE
COIN = DenominationKind.COIN


def _catalog(*values: int) -> tuple:
    return tuple(Denomination(v, NOTE if v >= 1000 else COIN, str(v)) for v in values)


class TestComputeChange:
    def test_scenario_without_unit_coin(self) -> None:
        """10000 tendered for 7350: 2650 as 2000 + 500 + 100 + 50."""
        catalog = _catalog(5000, 2000, 1000, 500, 100, 50, 25, 10, 5)
        breakdown = compute_change(10000, 7350, catalog)
        assert breakdown.change_due == 2650
        assert breakdown.total == 2650
        assert breakdown.counts() == {2000: 1, 500: 1, 100: 1, 50: 1}
        assert breakdown.piece_count == 4

    def test_repeated_pieces(self) -> None:
        breakdown = compute_change(20000, 2, DEFAULT_DENOMINATIONS)
        assert breakdown.counts() == {
            10000: 1, 5000: 1, 2000: 2, 500: 1, 200: 2, 50: 1, 25: 1, 10: 2, 1: 3,
        }
        assert breakdown.total == 19998

    def test_pieces_largest_first(self) -> None:
        breakdown = compute_change(10000, 1, DEFAULT_DENOMINATIONS)
        values = [p.denomination.face_value for p in breakdown.pieces]
        assert values == sorted(values, reverse=True)
        assert all(p.count > 0 for p in breakdown.pieces)

    def test_exact_payment(self) -> None:
        breakdown = compute_change(7350, 7350)
        assert breakdown.change_due == 0
        assert breakdown.pieces == ()

    def test_insufficient_payment(self) -> None:
        with pytest.raises(InsufficientPayment) as exc:
            compute_change(5000, 7350)
        assert exc.value.shortfall == 2350

    def test_unrepresentable(self) -> None:
        with pytest.raises(UnrepresentableAmount) as exc:
            compute_change(1000, 997, _catalog(500, 100, 5))
        assert exc.value.amount == 3
        assert exc.value.remainder == 3

    @pytest.mark.parametrize("due", [0, 1, 99, 1234, 7350, 9999, 10000])
    @pytest.mark.parametrize("tendered_extra", [0, 1, 4, 26, 2650, 14999])
    def test_exactness(self, due, tendered_extra) -> None:
        breakdown = compute_change(due + tendered_extra, due)
        assert sum(p.denomination.face_value * p.count for p in breakdown.pieces) == tendered_extra

    def test_non_canonical_catalog_stays_greedy(self) -> None:
        """1/3/4 catalog: greedy pays 6 as 4+1+1 rather than 3+3."""
        breakdown = compute_change(6, 0, _catalog(4, 3, 1))
        assert breakdown.counts() == {4: 1, 1: 2}


class TestValidateCatalog:
    def test_default_catalog_valid(self) -> None:
        validate_catalog(DEFAULT_DENOMINATIONS)

    def test_empty(self) -> None:
        with pytest.raises(InvalidDenominationCatalog):
            validate_catalog(())

    def test_ascending_rejected(self) -> None:
        with pytest.raises(InvalidDenominationCatalog):
            compute_change(100, 0, _catalog(1, 5, 10))

    def test_duplicate_rejected(self) -> None:
        with pytest.raises(InvalidDenominationCatalog):
            validate_catalog(_catalog(10, 10, 1))

    def test_non_positive_face_value(self) -> None:
        with pytest.raises(InvalidDenominationCatalog):
            Denomination(0, COIN)


class TestSuggestRoundedAmounts:
    def test_default_catalog(self) -> None:
        assert suggest_rounded_amounts(7350) == [7350, 7500, 8000, 10000]

    def test_always_includes_exact_amount_first(self) -> None:
        suggestions = suggest_rounded_amounts(1234)
        assert suggestions[0] == 1234
        assert all(s >= 1234 for s in suggestions)

    def test_sorted_and_unique(self) -> None:
        suggestions = suggest_rounded_amounts(1234)
        assert suggestions == sorted(set(suggestions))

    def test_limit(self) -> None:
        assert len(suggest_rounded_amounts(1234, limit=3)) == 3

    def test_round_amount(self) -> None:
        """10000 is already a multiple of every note; nothing rounds above it."""
        assert suggest_rounded_amounts(10000) == [10000]

    def test_custom_catalog(self) -> None:
        assert suggest_rounded_amounts(730, _catalog(1000, 500, 100)) == [730, 1000]

    def test_deterministic(self) -> None:
        assert suggest_rounded_amounts(4321) == suggest_rounded_amounts(4321)
