"""
Pydantic schemas for expenses handed to the settlement engine.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from decimal import Decimal

from tripledger.core.money import normalize_currency_code
from tripledger.services.types import ExpenseRecord, ExpenseShare


class ExpenseParticipantIn(BaseModel):
    """Schema for one participant's share of an expense."""
    user_id: str
    share_amount: int  # Minor units of the expense's own currency
    user_name: Optional[str] = None


class ExpenseIn(BaseModel):
    """Schema for an expense as consumed by settlement computation."""
    id: str
    amount: int  # Minor units
    currency: str
    fx_rate: Optional[Decimal] = None  # 1 unit of currency = fx_rate base currency
    payer_id: str
    payer_name: Optional[str] = None
    participants: List[ExpenseParticipantIn] = Field(default_factory=list)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return normalize_currency_code(v)

    def to_record(self) -> ExpenseRecord:
        return ExpenseRecord(
            id=self.id,
            amount=self.amount,
            currency=self.currency,
            payer_id=self.payer_id,
            payer_name=self.payer_name,
            fx_rate=self.fx_rate,
            participants=tuple(
                ExpenseShare(user_id=p.user_id, share_amount=p.share_amount, user_name=p.user_name)
                for p in self.participants
            ),
        )
