"""
Share calculation for new expenses and share-sum checks for existing ones.

Splitting happens where expenses are created, not inside the settlement
engine; the engine only uses share_drift() to log suspicious records.
"""
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple
from dataclasses import dataclass
import enum

from tripledger.core.money import round_half_away_from_zero, to_decimal
from tripledger.services.types import ExpenseRecord, ExpenseShare


DEFAULT_SHARE_TOLERANCE = 1


class SplitType(str, enum.Enum):
    """How an expense is divided among its participants."""
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    AMOUNT = "amount"
    SHARES = "shares"


class InvalidSplitError(ValueError):
    """Raised when split inputs cannot produce shares summing to the total."""


@dataclass(frozen=True)
class SplitInput:
    user_id: str
    share_value: Optional[Decimal] = None  # Percentage, weight or fixed amount depending on split type
    user_name: Optional[str] = None


def _distribute_remainder(total: int, raw: Sequence[Decimal]) -> List[int]:
    """
    Floor each raw share and hand out the leftover minor units one at a time,
    largest fractional part first, so the result sums exactly to total.
    Ties go to the earliest participant; a zero raw share never receives one.
    """
    floors = [int(value) for value in raw]  # raw values are non-negative
    remainder = total - sum(floors)
    # sorted() is stable, so equal fractions keep input order
    order = sorted(
        (i for i, value in enumerate(raw) if value > 0),
        key=lambda i: raw[i] - floors[i],
        reverse=True,
    )
    for i in range(remainder):
        floors[order[i % len(order)]] += 1
    return floors


def calculate_shares(
    amount: int, split_type: SplitType, participants: Sequence[SplitInput]
) -> List[ExpenseShare]:
    """
    Compute integer minor-unit shares for a new expense.

    Equal: 10000 split three ways gives 3334, 3333, 3333.
    Percentage: values must sum to 100.
    Amount: values are minor units and must sum to amount.
    Shares: values are relative weights.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidSplitError("Expense amount must be an integer number of minor units")
    if amount < 0:
        raise InvalidSplitError("Expense amount cannot be negative")
    if not participants:
        raise InvalidSplitError("An expense needs at least one participant")

    split_type = SplitType(split_type)

    if split_type == SplitType.EQUAL:
        count = len(participants)
        raw = [Decimal(amount) / count] * count
        amounts = _distribute_remainder(amount, raw)

    elif split_type == SplitType.PERCENTAGE:
        values = [_require_value(p) for p in participants]
        if sum(values) != Decimal(100):
            raise InvalidSplitError(f"Percentages must sum to 100, got {sum(values)}")
        amounts = _distribute_remainder(amount, [Decimal(amount) * v / 100 for v in values])

    elif split_type == SplitType.SHARES:
        weights = [_require_value(p) for p in participants]
        total_weight = sum(weights)
        if total_weight <= 0:
            raise InvalidSplitError("Share weights must sum to a positive number")
        amounts = _distribute_remainder(
            amount, [Decimal(amount) * w / total_weight for w in weights]
        )

    else:
        amounts = [round_half_away_from_zero(_require_value(p)) for p in participants]
        if sum(amounts) != amount:
            raise InvalidSplitError(
                f"Custom amounts sum to {sum(amounts)} but expense total is {amount}"
            )

    return [
        ExpenseShare(user_id=p.user_id, share_amount=share, user_name=p.user_name)
        for p, share in zip(participants, amounts)
    ]


def _require_value(participant: SplitInput) -> Decimal:
    if participant.share_value is None:
        raise InvalidSplitError(f"Participant {participant.user_id} is missing a share value")
    value = to_decimal(participant.share_value)
    if value < 0:
        raise InvalidSplitError(f"Participant {participant.user_id} has a negative share value")
    return value


def share_drift(expense: ExpenseRecord) -> int:
    """Signed difference between the sum of shares and the expense total."""
    return expense.share_total - expense.amount


def validate_expense_shares(
    expense: ExpenseRecord, tolerance: int = DEFAULT_SHARE_TOLERANCE
) -> bool:
    """True when the shares add up to the total within tolerance minor units."""
    return abs(share_drift(expense)) <= tolerance


def find_share_mismatches(
    expenses: Sequence[ExpenseRecord], tolerance: int = DEFAULT_SHARE_TOLERANCE
) -> List[Tuple[str, int]]:
    """List (expense_id, drift) for every expense outside tolerance."""
    return [
        (expense.id, share_drift(expense))
        for expense in expenses
        if not validate_expense_shares(expense, tolerance)
    ]
