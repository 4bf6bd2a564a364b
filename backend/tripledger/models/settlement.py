"""
Settlement record model.

A record is created when a suggested transfer is accepted and moves from
pending to settled exactly once, when one of the two parties confirms payment.
"""
from sqlalchemy import (
    Column, String, Text, ForeignKey, Integer, DateTime, CheckConstraint, Index
)
from sqlalchemy.orm import relationship
from tripledger.db.base import BaseModel
import enum


class SettlementStatus(str, enum.Enum):
    """Settlement lifecycle status."""
    PENDING = "pending"
    SETTLED = "settled"


class SettlementRecord(BaseModel):
    """Persisted transfer between two trip participants."""
    __tablename__ = "settlements"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    from_user_id = Column(String(64), nullable=False, index=True)
    to_user_id = Column(String(64), nullable=False, index=True)
    amount = Column(Integer, nullable=False)  # Minor units, always positive
    currency = Column(String(3), nullable=False, default="EUR")
    status = Column(String(16), nullable=False, default=SettlementStatus.PENDING.value)
    settled_at = Column(DateTime(timezone=True), nullable=True)
    settled_by = Column(String(64), nullable=True)
    note = Column(Text, nullable=True)

    # Relationships
    trip = relationship("Trip", back_populates="settlements")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_settlement_amount_positive"),
        CheckConstraint("from_user_id <> to_user_id", name="ck_settlement_different_users"),
        CheckConstraint("status IN ('pending', 'settled')", name="ck_settlement_status"),
        CheckConstraint(
            "(status = 'pending' AND settled_at IS NULL AND settled_by IS NULL) OR "
            "(status = 'settled' AND settled_at IS NOT NULL AND settled_by IS NOT NULL)",
            name="ck_settlement_settled_fields",
        ),
        Index("ix_settlements_trip_status", "trip_id", "status"),
    )

    @property
    def is_settled(self) -> bool:
        return self.status == SettlementStatus.SETTLED.value
