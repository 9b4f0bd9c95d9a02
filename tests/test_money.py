"""
Unit tests for the fixed-precision money helpers.
"""

from decimal import Decimal

from portfolio_ledger.money import (
    CENT,
    PCT,
    QTY,
    ZERO,
    add,
    clamp_non_negative,
    dec,
    div,
    eq,
    gt,
    gte,
    lt,
    mul,
    quantize,
    sub,
    to_float,
)


class TestDec:
    """Tests for converting loose values to Decimal."""

    def test_float_goes_through_str(self):
        """0.1 must stay 0.1, not the binary approximation."""
        assert dec(0.1) == Decimal("0.1")

    def test_none_and_garbage_become_zero(self):
        assert dec(None) == ZERO
        assert dec("") == ZERO
        assert dec("abc") == ZERO

    def test_nan_and_infinity_become_zero(self):
        assert dec(float("nan")) == ZERO
        assert dec(Decimal("NaN")) == ZERO
        assert dec("Infinity") == ZERO

    def test_strings_and_ints(self):
        assert dec(" 12.50 ") == Decimal("12.50")
        assert dec(7) == Decimal("7")
        assert dec(True) == Decimal("1")


class TestArithmetic:
    """Tests for the arithmetic and comparison helpers."""

    def test_no_float_drift(self):
        """0.1 + 0.2 is exactly 0.3 in the kernel."""
        assert add(0.1, 0.2) == Decimal("0.3")
        assert eq(add(0.1, 0.2), "0.3")

    def test_sub_and_mul(self):
        assert sub("10", "2.5") == Decimal("7.5")
        assert mul("4", "150") == Decimal("600")

    def test_div_by_zero_returns_zero(self):
        assert div(Decimal("5"), ZERO) == ZERO

    def test_div_by_zero_custom_default(self):
        assert div(5, 0, default=Decimal("1")) == Decimal("1")

    def test_div(self):
        assert div(1, 4) == Decimal("0.25")

    def test_comparisons(self):
        assert gt("1.01", "1")
        assert gte("1", "1.00")
        assert lt("-0.01", 0)
        assert not gt(None, 0)


class TestRounding:
    """Tests for quantize/to_float rounding."""

    def test_half_up_to_cents(self):
        assert quantize(Decimal("6.875")) == Decimal("6.88")
        assert quantize(Decimal("6.874")) == Decimal("6.87")

    def test_negative_half_rounds_away_from_zero(self):
        assert quantize(Decimal("-0.005"), CENT) == Decimal("-0.01")

    def test_quantity_and_percent_precision(self):
        assert quantize(Decimal("0.123456789"), QTY) == Decimal("0.12345679")
        assert quantize(Decimal("0.21005"), PCT) == Decimal("0.2101")

    def test_to_float(self):
        assert to_float(Decimal("1.005")) == 1.01
        assert to_float(Decimal("0.23456"), 4) == 0.2346

    def test_clamp_non_negative(self):
        assert clamp_non_negative(Decimal("-3")) == ZERO
        assert clamp_non_negative(Decimal("3")) == Decimal("3")
