"""
Settlement service for automated fair settlement calculation.
"""
from typing import Dict, Iterable, List, Optional, Sequence
import logging

from tripledger.core.money import format_currency, normalize_currency_code
from tripledger.models.settlement import SettlementStatus
from tripledger.services.balance_service import compute_balances
from tripledger.services.split_service import DEFAULT_SHARE_TOLERANCE
from tripledger.services.types import (
    ExpenseRecord, ReconciliationResult, SettlementSnapshot, SettlementSummary,
    SuggestedSettlement, UserBalance
)

logger = logging.getLogger(__name__)

# Balances smaller than this (in minor units) are treated as settled
SETTLEMENT_EPSILON = 1


class _Position:
    """Mutable working copy of one balance while the optimizer runs."""

    __slots__ = ("user_id", "user_name", "remaining")

    def __init__(self, balance: UserBalance):
        self.user_id = balance.user_id
        self.user_name = balance.user_name
        self.remaining = balance.net_balance


def _top_creditor(positions: List[_Position], epsilon: int) -> Optional[_Position]:
    best = None
    for position in positions:
        if position.remaining >= epsilon and (best is None or position.remaining > best.remaining):
            best = position
    return best


def _top_debtor(positions: List[_Position], epsilon: int) -> Optional[_Position]:
    best = None
    for position in positions:
        if position.remaining <= -epsilon and (best is None or position.remaining < best.remaining):
            best = position
    return best


def _optimize_currency(
    balances: Sequence[UserBalance], currency: str, epsilon: int
) -> List[SuggestedSettlement]:
    positions = [_Position(b) for b in balances if abs(b.net_balance) >= epsilon]
    transfers = []

    while True:
        # Strict comparisons keep the first participant in input order on ties
        creditor = _top_creditor(positions, epsilon)
        debtor = _top_debtor(positions, epsilon)
        if creditor is None or debtor is None:
            break

        amount = min(creditor.remaining, -debtor.remaining)
        if amount <= 0:
            break

        transfers.append(SuggestedSettlement(
            from_user_id=debtor.user_id,
            to_user_id=creditor.user_id,
            amount=amount,
            currency=currency,
            from_user_name=debtor.user_name,
            to_user_name=creditor.user_name,
        ))
        logger.debug(f"{debtor.user_id} -> {creditor.user_id}: {amount} {currency}")

        creditor.remaining -= amount
        debtor.remaining += amount

    return transfers


def optimize(
    balances: Sequence[UserBalance], epsilon: int = SETTLEMENT_EPSILON
) -> List[SuggestedSettlement]:
    """
    Minimize the number of transfers needed to settle debts.

    Greedy minimum-cash-flow: repeatedly let the most indebted participant
    pay the largest creditor min(credit, debt) until every remaining balance
    is within epsilon of zero. Produces at most N-1 transfers for N non-zero
    balances. Integer arithmetic only.

    Balances are expected to share one currency. If they do not, each
    currency is settled separately, in order of first appearance.
    """
    if not balances:
        return []

    by_currency: Dict[str, List[UserBalance]] = {}
    for balance in balances:
        by_currency.setdefault(balance.currency, []).append(balance)

    transfers = []
    for currency, group in by_currency.items():
        transfers.extend(_optimize_currency(group, currency, epsilon))
    return transfers


def _snapshot(record) -> SettlementSnapshot:
    if isinstance(record, SettlementSnapshot):
        return record
    return SettlementSnapshot.from_record(record)


def reconcile(
    suggested: Sequence[SuggestedSettlement], history: Iterable
) -> ReconciliationResult:
    """
    Partition recorded settlements by lifecycle status.

    Pending records are outstanding obligations; settled records are completed
    payments. Suggestions whose debtor and creditor match a pending record are
    returned in `overlapping` so the caller can show the pending record instead
    of recording the pair again. Records with any other status are skipped.
    """
    pending = []
    settled = []
    for record in history:
        snapshot = _snapshot(record)
        if snapshot.status == SettlementStatus.SETTLED.value:
            settled.append(snapshot)
        elif snapshot.status == SettlementStatus.PENDING.value:
            pending.append(snapshot)
        else:
            logger.warning(f"Settlement {snapshot.id} has unknown status {snapshot.status!r}; ignoring it")

    pending_pairs = {(p.from_user_id, p.to_user_id) for p in pending}
    overlapping = [s for s in suggested if (s.from_user_id, s.to_user_id) in pending_pairs]
    if overlapping:
        logger.debug(f"{len(overlapping)} suggestions overlap pending settlements")

    return ReconciliationResult(
        pending=tuple(pending), settled=tuple(settled), overlapping=tuple(overlapping)
    )


def apply_settled_transfers(
    balances: Sequence[UserBalance], settled: Sequence[SettlementSnapshot], base_currency: str
) -> List[UserBalance]:
    """
    Net completed payments into expense balances.

    A settled transfer from A to B means A has paid part of their debt, so A
    moves up by the amount and B moves down. Records in another currency
    than the base currency are skipped.
    """
    base = normalize_currency_code(base_currency)
    totals: Dict[str, int] = {}
    names: Dict[str, str] = {}
    for balance in balances:
        totals[balance.user_id] = balance.net_balance
        names[balance.user_id] = balance.user_name

    for record in settled:
        if record.currency.upper() != base:
            logger.warning(
                f"Settlement {record.id} is in {record.currency}, not {base}; "
                f"not netted into balances"
            )
            continue
        for user_id in (record.from_user_id, record.to_user_id):
            if user_id not in totals:
                totals[user_id] = 0
                names[user_id] = user_id
        totals[record.from_user_id] += record.amount
        totals[record.to_user_id] -= record.amount

    return [
        UserBalance(user_id=user_id, user_name=names[user_id], net_balance=total, currency=base)
        for user_id, total in totals.items()
    ]


def compute_settlement_summary(
    expenses: Sequence[ExpenseRecord],
    base_currency: str,
    history: Iterable = (),
    epsilon: int = SETTLEMENT_EPSILON,
    share_tolerance: int = DEFAULT_SHARE_TOLERANCE,
) -> SettlementSummary:
    """
    Run the full pipeline: normalize, aggregate, net settled payments,
    optimize, and partition the recorded history.
    """
    base = normalize_currency_code(base_currency)
    balance_result = compute_balances(expenses, base, share_tolerance=share_tolerance)
    snapshots = [_snapshot(record) for record in history]
    settled = [s for s in snapshots if s.status == SettlementStatus.SETTLED.value]

    balances = balance_result.balances
    if settled:
        balances = tuple(apply_settled_transfers(balances, settled, base))

    suggestions = optimize(balances, epsilon=epsilon)
    recorded = reconcile(suggestions, snapshots)

    logger.info(
        f"Settlement summary in {base}: {len(expenses)} expenses, "
        f"{len(balance_result.excluded_expense_ids)} excluded, "
        f"{len(suggestions)} suggested transfers, "
        f"{len(recorded.pending)} pending, {len(recorded.settled)} settled"
    )

    return SettlementSummary(
        base_currency=base,
        balances=tuple(balances),
        excluded_expense_ids=balance_result.excluded_expense_ids,
        suggested_settlements=tuple(suggestions),
        pending_settlements=recorded.pending,
        settled_settlements=recorded.settled,
        total_expenses=len(expenses),
    )


def format_summary(summary: SettlementSummary) -> str:
    """Plain-text rendering of a summary, for logs and notifications."""
    base = summary.base_currency
    lines = [
        f"Total expenses: {summary.total_expenses}",
        f"Participants: {len(summary.balances)}",
        "",
        "Net balances:",
    ]
    for balance in summary.balances:
        sign = "+" if balance.net_balance > 0 else ""
        lines.append(f"  {balance.user_name}: {sign}{format_currency(balance.net_balance, base)}")
    lines.append("")
    lines.append("Transfers:")
    for transfer in summary.suggested_settlements:
        lines.append(
            f"  {transfer.from_user_name} -> {transfer.to_user_name}: "
            f"{format_currency(transfer.amount, transfer.currency)}"
        )
    if summary.excluded_expense_ids:
        lines.append("")
        lines.append(f"Excluded (missing exchange rate): {', '.join(summary.excluded_expense_ids)}")
    return "\n".join(lines)
