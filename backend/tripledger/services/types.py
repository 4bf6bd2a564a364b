"""Immutable value types passed between the settlement engine stages."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple, Union

Rate = Union[Decimal, float, int, str]


@dataclass(frozen=True)
class ExpenseShare:
    """One participant's share of an expense, in the expense's own currency."""

    user_id: str
    share_amount: int
    user_name: Optional[str] = None


@dataclass(frozen=True)
class ExpenseRecord:
    """Expense as handed to the engine, already filtered for the caller."""

    id: str
    amount: int
    currency: str
    payer_id: str
    participants: Tuple[ExpenseShare, ...] = ()
    fx_rate: Optional[Rate] = None  # 1 unit of currency = fx_rate units of base currency
    payer_name: Optional[str] = None

    def __post_init__(self):
        # Accept any sequence of shares but store a tuple so the record stays hashable
        if not isinstance(self.participants, tuple):
            object.__setattr__(self, "participants", tuple(self.participants))

    @property
    def share_total(self) -> int:
        return sum(p.share_amount for p in self.participants)


@dataclass(frozen=True)
class NormalizedExpense:
    """An expense amount expressed in the trip's base currency."""

    expense_id: str
    amount: int
    currency: str
    excluded: bool = False
    rate: Optional[Decimal] = None


@dataclass(frozen=True)
class UserBalance:
    """Signed position of one participant: positive is owed, negative owes."""

    user_id: str
    user_name: str
    net_balance: int
    currency: str


@dataclass(frozen=True)
class SuggestedSettlement:
    """A transfer proposed by the optimizer; never persisted by the engine."""

    from_user_id: str
    to_user_id: str
    amount: int
    currency: str
    from_user_name: str = ""
    to_user_name: str = ""


@dataclass(frozen=True)
class SettlementSnapshot:
    """Read-only view of a persisted settlement record."""

    id: int
    trip_id: Optional[int]
    from_user_id: str
    to_user_id: str
    amount: int
    currency: str
    status: str
    note: Optional[str] = None
    settled_by: Optional[str] = None
    settled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record) -> "SettlementSnapshot":
        """Build a snapshot from an ORM row or any object with the same attributes."""
        return cls(
            id=record.id,
            trip_id=getattr(record, "trip_id", None),
            from_user_id=record.from_user_id,
            to_user_id=record.to_user_id,
            amount=record.amount,
            currency=record.currency,
            status=record.status,
            note=getattr(record, "note", None),
            settled_by=getattr(record, "settled_by", None),
            settled_at=getattr(record, "settled_at", None),
            created_at=getattr(record, "created_at", None),
        )


@dataclass(frozen=True)
class BalanceResult:
    """Output of the balance aggregator."""

    balances: Tuple[UserBalance, ...] = ()
    excluded_expense_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ReconciliationResult:
    """Recorded settlements partitioned by lifecycle status."""

    pending: Tuple[SettlementSnapshot, ...] = ()
    settled: Tuple[SettlementSnapshot, ...] = ()
    overlapping: Tuple[SuggestedSettlement, ...] = ()  # Suggestions already covered by a pending record


@dataclass(frozen=True)
class SettlementSummary:
    """Everything the caller needs to render a trip's settle-up screen."""

    base_currency: str
    balances: Tuple[UserBalance, ...] = ()
    excluded_expense_ids: Tuple[str, ...] = ()
    suggested_settlements: Tuple[SuggestedSettlement, ...] = ()
    pending_settlements: Tuple[SettlementSnapshot, ...] = ()
    settled_settlements: Tuple[SettlementSnapshot, ...] = ()
    total_expenses: int = 0
