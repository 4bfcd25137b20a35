"""Tests for the Money value object."""

from decimal import Decimal

import pytest
from ordering.errors import NegativeResultError
from ordering.shared.money import Money
from protean.exceptions import ValidationError


class TestConstruction:
    def test_from_string(self):
        assert Money.of("10.50").cents == 1050

    def test_from_int(self):
        assert Money.of(3).amount == Decimal("3.00")

    def test_from_decimal_rounds_half_up(self):
        assert Money.of(Decimal("2.345")).cents == 235
        assert Money.of(Decimal("2.344")).cents == 234

    def test_float_is_rejected(self):
        with pytest.raises(ValidationError):
            Money.of(10.5)

    def test_garbage_is_rejected(self):
        with pytest.raises(ValidationError):
            Money.of("ten dollars")

    def test_zero(self):
        assert Money.zero().is_zero
        assert str(Money.zero()) == "0.00"

    def test_string_form_has_two_places(self):
        assert str(Money.of("25")) == "25.00"


class TestArithmetic:
    def test_add(self):
        assert Money.of("10.00").add(Money.of("5.25")) == Money.of("15.25")

    def test_subtract(self):
        assert Money.of("10.00").subtract(Money.of("2.50")) == Money.of("7.50")

    def test_subtract_below_zero_raises(self):
        with pytest.raises(NegativeResultError):
            Money.of("1.00").subtract(Money.of("2.00"))

    def test_subtract_below_zero_when_allowed(self):
        assert Money.of("1.00").subtract(Money.of("2.00"), allow_negative=True).cents == -100

    def test_multiply_by_quantity(self):
        assert Money.of("10.00").multiply(3) == Money.of("30.00")

    def test_multiply_rejects_non_integers(self):
        with pytest.raises(TypeError):
            Money.of("10.00").multiply(1.5)

    def test_percentage_rounds_half_up(self):
        # 15% of 0.10 is 0.015
        assert Money.of("0.10").percentage(15) == Money.of("0.02")

    def test_percentage(self):
        assert Money.of("100.00").percentage(10) == Money.of("10.00")

    def test_min(self):
        assert Money.min(Money.of("3.00"), Money.of("2.00")) == Money.of("2.00")

    def test_total(self):
        assert Money.total([Money.of("1.10"), Money.of("2.20")]) == Money.of("3.30")

    def test_total_of_nothing_is_zero(self):
        assert Money.total([]).is_zero


class TestComparison:
    def test_compare(self):
        assert Money.of("1.00").compare(Money.of("2.00")) == -1
        assert Money.of("2.00").compare(Money.of("2.00")) == 0
        assert Money.of("3.00").compare(Money.of("2.00")) == 1

    def test_ordering_operators(self):
        assert Money.of("1.00") < Money.of("1.01")
        assert Money.of("1.00") <= Money.of("1.00")
        assert Money.of("2.00") > Money.of("1.99")
        assert Money.of("2.00") >= Money.of("2.00")

    def test_equality_is_by_value(self):
        assert Money.of("5") == Money.of("5.00")
