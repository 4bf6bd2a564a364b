"""Models package - Import all models for SQLAlchemy registration."""
from tripledger.models.trip import Trip, TripParticipant
from tripledger.models.settlement import SettlementRecord, SettlementStatus

__all__ = [
    "Trip",
    "TripParticipant",
    "SettlementRecord",
    "SettlementStatus",
]
