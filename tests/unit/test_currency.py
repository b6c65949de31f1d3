"""
Tests for the currency registry and the Currency value object.

Covers:
- Registered codes accepted, unknown codes rejected at construction
- Normalization of case and whitespace
- Precision lookup used by Money.round()
"""

from decimal import Decimal

import pytest

from pos_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from pos_kernel.domain.values import Currency, Money
from pos_kernel.exceptions import InvalidCurrencyError


class TestCurrencyRegistry:
    """Registry lookups."""

    def test_default_currency_registered(self):
        assert CurrencyRegistry.is_valid("INR")
        assert CurrencyRegistry.get_info("INR").symbol == "₹"

    def test_unknown_codes_not_valid(self):
        for code in ["XXY", "ABC", "123", "", "inr"]:
            assert not CurrencyRegistry.is_valid(code)

    def test_decimal_places(self):
        assert CurrencyRegistry.get_decimal_places("INR") == 2
        assert CurrencyRegistry.get_decimal_places("JPY") == 0
        assert CurrencyRegistry.get_decimal_places("KWD") == 3

    def test_unknown_code_defaults_to_two_places(self):
        assert CurrencyRegistry.get_decimal_places("ZZZ") == 2

    def test_all_codes(self):
        codes = CurrencyRegistry.all_codes()
        assert {"INR", "USD", "EUR"} <= codes

    def test_quantum(self):
        assert CurrencyInfo("JPY", 0, "Yen").quantum == Decimal("1")
        assert CurrencyInfo("INR", 2, "Rupee").quantum == Decimal("0.01")
        assert CurrencyInfo("KWD", 3, "Dinar").quantum == Decimal("0.001")


class TestDisplay:
    """Receipt formatting."""

    def test_symbol_and_grouping(self):
        assert Money.of("1212.4", "INR").display() == "₹1,212.40"

    def test_rounds_half_up(self):
        assert Money.of("27.455", "INR").display() == "₹27.46"

    def test_code_prefix_without_symbol(self):
        assert Money.of("5", "AED").display() == "AED 5.00"

    def test_negative(self):
        assert Money.of("-0.40", "INR").display() == "-₹0.40"

    def test_zero_places(self):
        assert Money.of("1234.5", "JPY").display() == "¥1,235"


class TestCurrencyValueObject:
    """Currency validates at construction."""

    def test_normalized(self):
        assert Currency(" inr ").code == "INR"

    def test_invalid_rejected(self):
        with pytest.raises(InvalidCurrencyError) as exc_info:
            Currency("XXY")
        assert exc_info.value.code == "INVALID_CURRENCY"
        assert exc_info.value.currency == "XXY"

    def test_empty_rejected(self):
        with pytest.raises(InvalidCurrencyError):
            Currency("")

    def test_symbol_falls_back_to_code(self):
        assert Currency("INR").symbol == "₹"
        assert Currency("AED").symbol == "AED"

    def test_str(self):
        assert str(Currency("usd")) == "USD"


class TestPrecisionByCurrency:
    """Money.round() follows the currency's precision."""

    def test_two_places(self):
        assert Money.of("10.005", "INR").round() == Money.of("10.01", "INR")

    def test_zero_places(self):
        assert Money.of("100.5", "JPY").round() == Money.of("101", "JPY")

    def test_three_places(self):
        assert Money.of("1.0005", "KWD").round() == Money.of("1.001", "KWD")
