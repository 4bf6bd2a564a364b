"""
Tests for fixed-point money helpers.
"""
from decimal import Decimal
import pytest

from tripledger.core.money import (
    CurrencyMismatchError, Money, calculate_inverse_rate, format_currency,
    from_minor_units, normalize_currency_code, round_half_away_from_zero, to_minor_units
)


def test_round_half_away_from_zero():
    """Ties round away from zero for both signs."""
    assert round_half_away_from_zero(Decimal("2.5")) == 3
    assert round_half_away_from_zero(Decimal("-2.5")) == -3
    assert round_half_away_from_zero(Decimal("2.4999")) == 2
    assert round_half_away_from_zero(Decimal("-0.5")) == -1


def test_money_rejects_floats_and_bools():
    with pytest.raises(TypeError):
        Money(10.5, "EUR")
    with pytest.raises(TypeError):
        Money(True, "EUR")
    with pytest.raises(TypeError):
        Money(Decimal("10"), "EUR")


def test_money_rejects_implicit_coercion():
    """Plain numbers must be wrapped in Money before combining."""
    with pytest.raises(TypeError):
        Money(100, "EUR") + 5
    with pytest.raises(CurrencyMismatchError):
        Money(100, "EUR") + Money(100, "USD")


def test_money_arithmetic():
    total = Money(1000, "eur") + Money(250, "EUR") - Money(50, "EUR")
    assert total == Money(1200, "EUR")
    assert -total == Money(-1200, "EUR")
    assert Money(1, "EUR") > Money(0, "EUR")
    assert not Money.zero("EUR")


def test_money_convert_and_scale():
    """€100.00 at 1.10 becomes $110.00; scaling rounds half away from zero."""
    assert Money(10000, "EUR").convert(1.1, "USD") == Money(11000, "USD")
    assert Money(3333, "USD").convert(Decimal("0.92"), "EUR") == Money(3066, "EUR")
    assert Money(5, "EUR").scale(1, 2) == Money(3, "EUR")
    assert Money(-5, "EUR").scale(1, 2) == Money(-3, "EUR")
    with pytest.raises(ZeroDivisionError):
        Money(5, "EUR").scale(1, 0)


def test_minor_unit_conversion():
    assert to_minor_units(100.5, "USD") == 10050
    assert to_minor_units(100.999, "USD") == 10100
    assert to_minor_units(-25.5, "USD") == -2550
    assert to_minor_units(0.1) + to_minor_units(0.2) == 30
    assert to_minor_units(1500, "JPY") == 1500
    assert from_minor_units(10050, "USD") == Decimal("100.50")
    assert from_minor_units(-2550, "EUR") == Decimal("-25.50")


def test_format_currency():
    assert format_currency(10000, "USD") == "$100.00"
    assert format_currency(10000, "EUR") == "€100.00"
    assert format_currency(10000, "GBP") == "£100.00"
    assert format_currency(-5000, "USD") == "-$50.00"
    assert format_currency(0, "EUR") == "€0.00"
    assert format_currency(10000, "XYZ") == "XYZ100.00"
    assert format_currency(1000, "JPY") == "¥1000"


def test_normalize_currency_code():
    assert normalize_currency_code(" eur ") == "EUR"
    with pytest.raises(ValueError):
        normalize_currency_code("EURO")
    with pytest.raises(ValueError):
        normalize_currency_code("E1R")


def test_inverse_rate():
    assert calculate_inverse_rate(Decimal("1.25")) == Decimal("0.8")
    with pytest.raises(ValueError):
        calculate_inverse_rate(0)
