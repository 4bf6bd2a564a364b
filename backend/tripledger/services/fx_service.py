"""
Foreign exchange service for normalizing expenses into a trip's base currency.

Rates are never looked up here. Each expense carries the rate snapshot taken
when it was created; an expense in a foreign currency without one is
excluded from balances and reported back so the caller can ask for a rate.
"""
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional, Tuple
import logging

from tripledger.core.money import Money, normalize_currency_code, to_decimal
from tripledger.services.types import ExpenseRecord, NormalizedExpense, Rate

logger = logging.getLogger(__name__)


def parse_rate(rate: Optional[Rate]) -> Optional[Decimal]:
    """
    Turn a stored rate into a usable Decimal.

    Returns None for a missing rate and for values that cannot convert an
    amount (non-numeric, NaN, infinite, zero or negative).
    """
    if rate is None or isinstance(rate, bool):
        return None
    try:
        value = to_decimal(rate)
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not value.is_finite() or value <= 0:
        return None
    return value


def parse_currency(code) -> Optional[str]:
    """Normalized currency code, or None when it is not a three-letter code."""
    try:
        return normalize_currency_code(code)
    except (TypeError, ValueError):
        return None


def convert_to_base(amount: int, currency: str, rate: Optional[Rate], base_currency: str) -> Optional[int]:
    """
    Convert minor units from currency to base currency.

    Args:
        amount: Amount in minor units of the source currency
        currency: Source currency code
        rate: Exchange rate (1 source_currency = rate base_currency)
        base_currency: Target currency code

    Returns:
        Amount in base currency minor units, or None when the source currency
        code is malformed or no usable rate exists
    """
    code = parse_currency(currency)
    if code is None:
        return None
    if code == normalize_currency_code(base_currency):
        return amount
    parsed = parse_rate(rate)
    if parsed is None:
        return None
    return Money(amount, code).convert(parsed, base_currency).minor


def normalize(expense: ExpenseRecord, base_currency: str) -> NormalizedExpense:
    """Express an expense in base currency; flag it as excluded if it cannot be."""
    base = normalize_currency_code(base_currency)

    currency = parse_currency(expense.currency)
    if currency is None:
        logger.warning(
            f"Expense {expense.id} has an invalid currency code {expense.currency!r}; excluding it"
        )
        return _excluded(expense, base)

    # Currency equality alone decides inclusion, whatever rate is attached
    if currency == base:
        return NormalizedExpense(
            expense_id=expense.id,
            amount=expense.amount,
            currency=base,
            excluded=False,
        )

    rate = parse_rate(expense.fx_rate)
    if rate is None:
        logger.warning(
            f"Expense {expense.id} in {currency} has no usable rate to {base}; excluding it"
        )
        return _excluded(expense, base)

    converted = Money(expense.amount, currency).convert(rate, base)
    return NormalizedExpense(
        expense_id=expense.id,
        amount=converted.minor,
        currency=base,
        excluded=False,
        rate=rate,
    )


def _excluded(expense: ExpenseRecord, base: str) -> NormalizedExpense:
    return NormalizedExpense(expense_id=expense.id, amount=0, currency=base, excluded=True)


def normalize_all(
    expenses: Iterable[ExpenseRecord], base_currency: str
) -> Tuple[List[Tuple[ExpenseRecord, NormalizedExpense]], List[str]]:
    """Normalize a batch, returning included pairs and excluded expense ids in input order."""
    included = []
    excluded_ids = []
    for expense in expenses:
        normalized = normalize(expense, base_currency)
        if normalized.excluded:
            excluded_ids.append(expense.id)
        else:
            included.append((expense, normalized))
    return included, excluded_ids
