"""
Fixed-point money arithmetic.

All amounts are integers in minor currency units (cents for EUR/USD, whole
yen for JPY). Floats never enter a balance: exchange rates are applied
through Decimal and rounded half away from zero back to an integer.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Union
import re

# Number of minor-unit digits per currency; anything unlisted uses 2
CURRENCY_DECIMALS = {
    "JPY": 0,
    "KRW": 0,
    "VND": 0,
    "CLP": 0,
    "ISK": 0,
    "BHD": 3,
    "KWD": 3,
    "OMR": 3,
    "TND": 3,
}

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "KRW": "₩",
    "INR": "₹",
    "CHF": "CHF ",
}

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")


class CurrencyMismatchError(ValueError):
    """Raised when money in two different currencies is combined."""


def normalize_currency_code(code: str) -> str:
    """Upper-case and validate an ISO 4217 style three-letter code."""
    if not isinstance(code, str):
        raise TypeError(f"Currency code must be a string, got {type(code).__name__}")
    normalized = code.strip().upper()
    if not _CURRENCY_CODE.match(normalized):
        raise ValueError(f"Invalid currency code: {code!r}")
    return normalized


def currency_exponent(currency: str) -> int:
    return CURRENCY_DECIMALS.get(currency.upper(), 2)


def round_half_away_from_zero(value: Decimal) -> int:
    """Round a Decimal to the nearest integer, ties away from zero."""
    # ROUND_HALF_UP in the decimal module rounds ties away from zero for both signs
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_decimal(value: Union[int, float, str, Decimal]) -> Decimal:
    """Convert a rate or major amount to Decimal without binary float noise."""
    if isinstance(value, bool):
        raise TypeError("Booleans are not numeric amounts")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr() gives the shortest string that round-trips, e.g. 0.92 -> "0.92"
        return Decimal(repr(value))
    return Decimal(value)


def to_minor_units(major: Union[int, float, str, Decimal], currency: str = "EUR") -> int:
    """Convert a major-unit amount (e.g. 100.50) to minor units (10050)."""
    scaled = to_decimal(major).scaleb(currency_exponent(currency))
    return round_half_away_from_zero(scaled)


def from_minor_units(minor: int, currency: str = "EUR") -> Decimal:
    """Convert minor units back to a major-unit Decimal."""
    return Decimal(minor).scaleb(-currency_exponent(currency))


def format_currency(minor: int, currency: str) -> str:
    """Render minor units for display, e.g. format_currency(-5000, "USD") -> "-$50.00"."""
    code = currency.upper()
    symbol = CURRENCY_SYMBOLS.get(code, code)
    exponent = currency_exponent(code)
    major = from_minor_units(abs(minor), code)
    sign = "-" if minor < 0 else ""
    return f"{sign}{symbol}{major:.{exponent}f}"


@dataclass(frozen=True)
class Money:
    """An integer amount of minor units tagged with its currency."""

    minor: int
    currency: str

    def __post_init__(self):
        # bool is an int subclass; reject it along with floats and Decimals
        if isinstance(self.minor, bool) or not isinstance(self.minor, int):
            raise TypeError(
                f"Money requires an integer amount of minor units, got {type(self.minor).__name__}"
            )
        object.__setattr__(self, "currency", normalize_currency_code(self.currency))

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls(0, currency)

    def _check(self, other) -> "Money":
        if not isinstance(other, Money):
            raise TypeError(
                f"Cannot combine Money with {type(other).__name__}; wrap it in Money first"
            )
        if other.currency != self.currency:
            raise CurrencyMismatchError(
                f"Cannot combine {self.currency} with {other.currency}"
            )
        return other

    def __add__(self, other: "Money") -> "Money":
        other = self._check(other)
        return Money(self.minor + other.minor, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        other = self._check(other)
        return Money(self.minor - other.minor, self.currency)

    def __neg__(self) -> "Money":
        return Money(-self.minor, self.currency)

    def __abs__(self) -> "Money":
        return Money(abs(self.minor), self.currency)

    def __lt__(self, other: "Money") -> bool:
        return self.minor < self._check(other).minor

    def __le__(self, other: "Money") -> bool:
        return self.minor <= self._check(other).minor

    def __gt__(self, other: "Money") -> bool:
        return self.minor > self._check(other).minor

    def __ge__(self, other: "Money") -> bool:
        return self.minor >= self._check(other).minor

    def __bool__(self) -> bool:
        return self.minor != 0

    def convert(self, rate: Union[int, float, str, Decimal], target_currency: str) -> "Money":
        """Apply an exchange rate (1 self.currency = rate target_currency)."""
        converted = round_half_away_from_zero(Decimal(self.minor) * to_decimal(rate))
        return Money(converted, target_currency)

    def scale(self, numerator: int, denominator: int) -> "Money":
        """Return self * numerator / denominator rounded half away from zero."""
        if denominator == 0:
            raise ZeroDivisionError("Cannot scale money by a zero denominator")
        scaled = Decimal(self.minor) * Decimal(numerator) / Decimal(denominator)
        return Money(round_half_away_from_zero(scaled), self.currency)

    def format(self) -> str:
        return format_currency(self.minor, self.currency)


def calculate_inverse_rate(rate: Union[int, float, str, Decimal]) -> Decimal:
    """Inverse of an exchange rate, e.g. EUR->USD 1.25 gives USD->EUR 0.8."""
    value = to_decimal(rate)
    if value == 0:
        raise ValueError("Cannot calculate inverse of zero rate")
    return Decimal(1) / value
