"""
Trip model for group travel management.
"""
from sqlalchemy import Column, String, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from tripledger.core.config import settings
from tripledger.db.base import BaseModel


class Trip(BaseModel):
    """Trip whose expenses are settled in a single base currency."""
    __tablename__ = "trips"

    name = Column(String(200), nullable=False)
    base_currency = Column(String(3), nullable=False, default=lambda: settings.DEFAULT_BASE_CURRENCY)

    # Relationships
    participants = relationship("TripParticipant", back_populates="trip", cascade="all, delete-orphan")
    settlements = relationship("SettlementRecord", back_populates="trip", cascade="all, delete-orphan")


class TripParticipant(BaseModel):
    """Membership row granting a user access to a trip."""
    __tablename__ = "trip_participants"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    display_name = Column(String(200), nullable=True)

    # Relationships
    trip = relationship("Trip", back_populates="participants")

    __table_args__ = (
        UniqueConstraint("trip_id", "user_id", name="uq_trip_participant"),
    )
