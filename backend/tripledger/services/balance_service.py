"""
Balance aggregation across a trip's expenses.
"""
from decimal import Decimal
from typing import Dict, List, Sequence
import logging

from tripledger.core.money import Money, normalize_currency_code, round_half_away_from_zero
from tripledger.services.fx_service import normalize_all
from tripledger.services.split_service import DEFAULT_SHARE_TOLERANCE, share_drift
from tripledger.services.types import (
    BalanceResult, ExpenseRecord, NormalizedExpense, UserBalance
)

logger = logging.getLogger(__name__)


class _Ledger:
    """Running totals per participant, remembering first-seen order."""

    def __init__(self, currency: str):
        self.currency = currency
        self.totals: Dict[str, int] = {}
        self.names: Dict[str, str] = {}

    def touch(self, user_id: str, user_name: str = None):
        if user_id not in self.totals:
            self.totals[user_id] = 0
            self.names[user_id] = user_name or user_id
        elif user_name and self.names[user_id] == user_id:
            self.names[user_id] = user_name

    def credit(self, user_id: str, amount: int, user_name: str = None):
        self.touch(user_id, user_name)
        self.totals[user_id] += amount

    def debit(self, user_id: str, amount: int, user_name: str = None):
        self.touch(user_id, user_name)
        self.totals[user_id] -= amount

    def balances(self) -> List[UserBalance]:
        return [
            UserBalance(
                user_id=user_id,
                user_name=self.names[user_id],
                net_balance=total,
                currency=self.currency,
            )
            for user_id, total in self.totals.items()
        ]


def participant_debit(expense: ExpenseRecord, normalized: NormalizedExpense, share_amount: int) -> int:
    """
    Rescale a share from the expense currency into the normalized total.

    The share keeps its proportion of the original amount, so the debits of
    one expense add back up to its normalized credit within rounding.
    """
    if expense.amount == 0:
        # No proportion to keep; convert the share on its own
        if normalized.rate is None:
            return share_amount
        return Money(share_amount, expense.currency).convert(normalized.rate, normalized.currency).minor
    if normalized.amount == expense.amount:
        return share_amount
    scaled = Decimal(normalized.amount) * Decimal(share_amount) / Decimal(expense.amount)
    return round_half_away_from_zero(scaled)


def compute_balances(
    expenses: Sequence[ExpenseRecord],
    base_currency: str,
    share_tolerance: int = DEFAULT_SHARE_TOLERANCE,
) -> BalanceResult:
    """
    Calculate net balance for each participant across all expenses.

    Net balance = total paid - total owed, in base currency minor units.
    Positive balance = participant is owed money
    Negative balance = participant owes money

    Expenses that cannot be normalized contribute nothing; their ids are
    returned in excluded_expense_ids. Participants appear in the order they
    are first seen, but callers should not rely on it.
    """
    base = normalize_currency_code(base_currency)
    if not expenses:
        return BalanceResult()

    included, excluded_ids = normalize_all(expenses, base)
    ledger = _Ledger(base)

    for expense, normalized in included:
        drift = share_drift(expense)
        if abs(drift) > share_tolerance:
            # Upstream data problem; process the shares as given
            logger.warning(
                f"Expense {expense.id} shares sum to {expense.share_total} "
                f"but amount is {expense.amount} (drift {drift:+d})"
            )

        # Credit the payer (they paid the full amount)
        ledger.credit(expense.payer_id, normalized.amount, expense.payer_name)

        # Debit each participant (they owe their share)
        for participant in expense.participants:
            debit = participant_debit(expense, normalized, participant.share_amount)
            ledger.debit(participant.user_id, debit, participant.user_name)

    balances = ledger.balances()
    logger.debug(
        f"Computed {len(balances)} balances in {base} from {len(included)} expenses "
        f"({len(excluded_ids)} excluded)"
    )
    return BalanceResult(balances=tuple(balances), excluded_expense_ids=tuple(excluded_ids))


def total_balance(balances: Sequence[UserBalance]) -> int:
    """Sum of all net balances; zero for a conserved ledger."""
    return sum(balance.net_balance for balance in balances)
