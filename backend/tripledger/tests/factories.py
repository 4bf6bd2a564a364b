"""
Builders for engine inputs used across the test modules.
"""
from tripledger.services.types import ExpenseRecord, ExpenseShare, UserBalance


def make_expense(expense_id, amount, payer, shares, currency="EUR", fx_rate=None):
    """Build an ExpenseRecord; shares maps user_id -> share_amount."""
    return ExpenseRecord(
        id=expense_id,
        amount=amount,
        currency=currency,
        payer_id=payer,
        payer_name=payer.title(),
        fx_rate=fx_rate,
        participants=tuple(
            ExpenseShare(user_id=user_id, share_amount=share, user_name=user_id.title())
            for user_id, share in shares.items()
        ),
    )


def make_balances(amounts, currency="EUR"):
    """Build UserBalance entries from an ordered mapping of user_id -> net balance."""
    return [
        UserBalance(user_id=user_id, user_name=user_id.title(), net_balance=amount, currency=currency)
        for user_id, amount in amounts.items()
    ]


def balance_map(balances):
    return {b.user_id: b.net_balance for b in balances}
