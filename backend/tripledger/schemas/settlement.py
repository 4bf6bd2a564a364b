"""
Pydantic schemas for settlement computation and settlement records.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from tripledger.core.money import normalize_currency_code
from tripledger.models.settlement import SettlementStatus
from tripledger.schemas.expense import ExpenseIn
from tripledger.services.types import SettlementSnapshot, SuggestedSettlement


class UserBalanceResponse(BaseModel):
    """Schema for a participant's net position."""
    user_id: str
    user_name: str
    net_balance: int  # Base currency minor units; positive = owed money
    currency: str

    class Config:
        from_attributes = True


class SuggestedSettlementSchema(BaseModel):
    """Schema for a single suggested transfer."""
    from_user_id: str
    from_user_name: str = ""
    to_user_id: str
    to_user_name: str = ""
    amount: int = Field(gt=0)
    currency: str

    class Config:
        from_attributes = True

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return normalize_currency_code(v)

    def to_suggestion(self) -> SuggestedSettlement:
        return SuggestedSettlement(
            from_user_id=self.from_user_id,
            to_user_id=self.to_user_id,
            amount=self.amount,
            currency=self.currency,
            from_user_name=self.from_user_name,
            to_user_name=self.to_user_name,
        )


class SettlementRecordResponse(BaseModel):
    """Schema for a recorded settlement."""
    id: int
    trip_id: Optional[int] = None
    from_user_id: str
    to_user_id: str
    amount: int
    currency: str
    status: SettlementStatus
    note: Optional[str] = None
    settled_by: Optional[str] = None
    settled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    def to_snapshot(self) -> SettlementSnapshot:
        data = self.model_dump()
        data["status"] = self.status.value
        return SettlementSnapshot(**data)


class SettlementComputeRequest(BaseModel):
    """Schema for POST /settlements/compute."""
    base_currency: Optional[str] = None
    expenses: List[ExpenseIn] = Field(default_factory=list)
    history: List[SettlementRecordResponse] = Field(default_factory=list)

    @field_validator("base_currency")
    @classmethod
    def upper_base_currency(cls, v: Optional[str]) -> Optional[str]:
        return normalize_currency_code(v) if v is not None else v


class SettlementSummaryResponse(BaseModel):
    """Schema for the settlement summary returned to the caller."""
    base_currency: str
    balances: List[UserBalanceResponse]
    excluded_expense_ids: List[str]
    suggested_settlements: List[SuggestedSettlementSchema]
    pending_settlements: List[SettlementRecordResponse]
    settled_settlements: List[SettlementRecordResponse]
    total_expenses: int

    class Config:
        from_attributes = True


class TripSettlementsResponse(BaseModel):
    """Schema for a trip's recorded settlements grouped by status."""
    trip_id: int
    pending: List[SettlementRecordResponse]
    settled: List[SettlementRecordResponse]


class SettleRequest(BaseModel):
    """Schema for marking a settlement as paid."""
    settled_by: str
    note: Optional[str] = Field(default=None, max_length=500)
