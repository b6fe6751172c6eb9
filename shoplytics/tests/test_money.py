"""Tests for the integer-minor-unit Money type."""
from __future__ import annotations

from decimal import Decimal

import pytest

from shoplytics.app.services.money import InvalidAmount, Money


class TestFromMajor:
    def test_decimal_string(self) -> None:
        assert Money.from_major("99.50") == Money(9950)

    def test_integer(self) -> None:
        assert Money.from_major(250) == Money(25000)

    def test_decimal(self) -> None:
        assert Money.from_major(Decimal("0.01")) == Money(1)

    def test_float_goes_through_its_repr(self) -> None:
        # 0.1 is not exact in binary; the repr is, and that is what we keep
        assert Money.from_major(0.1) == Money(10)

    def test_negative_rejected_by_default(self) -> None:
        with pytest.raises(InvalidAmount, match="negative"):
            Money.from_major("-5")

    def test_negative_allowed_when_asked(self) -> None:
        assert Money.from_major("-5", allow_negative=True) == Money(-500)

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_rejected(self, value: str) -> None:
        with pytest.raises(InvalidAmount, match="finite"):
            Money.from_major(value)

    def test_garbage_rejected(self) -> None:
        with pytest.raises(InvalidAmount):
            Money.from_major("ten rupees")

    def test_sub_minor_precision_rejected(self) -> None:
        with pytest.raises(InvalidAmount, match="precision"):
            Money.from_major("1.005")

    def test_trailing_zeros_are_not_extra_precision(self) -> None:
        assert Money.from_major("1.5000") == Money(150)


class TestArithmetic:
    def test_add_and_subtract(self) -> None:
        assert Money(250) + Money(75) == Money(325)
        assert Money(250) - Money(300) == Money(-50)

    def test_times_quantity(self) -> None:
        assert Money(10000).times(3) == Money(30000)

    def test_times_rejects_non_int(self) -> None:
        with pytest.raises(TypeError):
            Money(100).times(1.5)  # type: ignore[arg-type]

    def test_minor_must_be_int(self) -> None:
        with pytest.raises(TypeError):
            Money(1.0)  # type: ignore[arg-type]

    def test_comparison_and_min_max(self) -> None:
        assert Money(100) < Money(200)
        assert min(Money(30000), Money(25000)) == Money(25000)
        assert max(Money.zero(), Money(-1)) == Money.zero()


class TestApplyRate:
    def test_exact_rate(self) -> None:
        assert Money(22500).apply_rate(18) == Money(4050)

    @pytest.mark.parametrize(
        "minor, rate, expected",
        [
            (1, "50", 1),     # 0.5 rounds up
            (3, "50", 2),     # 1.5 rounds up
            (25, "18", 5),    # 4.5 rounds up
            (1, "18", 0),     # 0.18 rounds down
            (12345, "12.5", 1543),  # 1543.125 rounds down
        ],
    )
    def test_rounds_half_up(self, minor: int, rate: str, expected: int) -> None:
        assert Money(minor).apply_rate(rate) == Money(expected)

    def test_zero_and_full_rate(self) -> None:
        assert Money(999).apply_rate(0) == Money.zero()
        assert Money(999).apply_rate(100) == Money(999)

    def test_repeatable(self) -> None:
        assert Money(33333).apply_rate("18") == Money(33333).apply_rate(Decimal("18"))


class TestFormatting:
    def test_str_is_two_decimal_major_units(self) -> None:
        assert str(Money(26550)) == "265.50"
        assert str(Money(5)) == "0.05"

    def test_format_with_symbol_and_grouping(self) -> None:
        assert Money(123456).format("₹") == "₹1,234.56"

    def test_format_negative(self) -> None:
        assert Money(-500).format() == "-5.00"

    def test_to_major(self) -> None:
        assert Money(4050).to_major() == Decimal("40.50")
