"""
Persistence side of the settlement lifecycle.

Records are created pending when a suggested transfer is accepted and move
to settled exactly once. The transition is a single conditional UPDATE, so
two concurrent "mark as paid" requests cannot both succeed; the loser gets
a rejection back instead of an exception.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
import enum
import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from tripledger.core.money import normalize_currency_code
from tripledger.models.settlement import SettlementRecord, SettlementStatus
from tripledger.models.trip import Trip, TripParticipant
from tripledger.services.types import SettlementSnapshot, SuggestedSettlement

logger = logging.getLogger(__name__)


class SettleRejection(str, enum.Enum):
    """Why a settle request was refused."""
    NOT_FOUND = "not_found"
    ALREADY_SETTLED = "already_settled"
    ACCESS_REVOKED = "access_revoked"
    NOT_A_PARTY = "not_a_party"


@dataclass(frozen=True)
class SettleResult:
    """Outcome of a settle request: the updated record or a rejection reason."""

    record: Optional[SettlementSnapshot] = None
    rejection: Optional[SettleRejection] = None

    @property
    def ok(self) -> bool:
        return self.rejection is None


class InvalidSettlementError(ValueError):
    """Raised when a suggestion cannot be recorded for a trip."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def has_trip_access(db: Session, trip_id: int, user_id: str) -> bool:
    """Check if a user is currently a participant of the trip."""
    participant = db.query(TripParticipant).filter(
        TripParticipant.trip_id == trip_id,
        TripParticipant.user_id == user_id
    ).first()
    return participant is not None


def record_suggestion(db: Session, trip_id: int, suggestion: SuggestedSettlement) -> SettlementRecord:
    """Persist an accepted suggestion as a pending settlement record."""
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise InvalidSettlementError(f"Trip {trip_id} not found")
    if suggestion.amount <= 0:
        raise InvalidSettlementError("Settlement amount must be positive")
    if suggestion.from_user_id == suggestion.to_user_id:
        raise InvalidSettlementError("A settlement needs two different participants")
    for user_id in (suggestion.from_user_id, suggestion.to_user_id):
        if not has_trip_access(db, trip_id, user_id):
            raise InvalidSettlementError(f"User {user_id} is not a participant of trip {trip_id}")

    record = SettlementRecord(
        trip_id=trip_id,
        from_user_id=suggestion.from_user_id,
        to_user_id=suggestion.to_user_id,
        amount=suggestion.amount,
        currency=normalize_currency_code(suggestion.currency),
        status=SettlementStatus.PENDING.value,
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    logger.info(
        f"Recorded pending settlement {record.id} on trip {trip_id}: "
        f"{record.from_user_id} -> {record.to_user_id} {record.amount} {record.currency}"
    )
    return record


def list_trip_settlements(db: Session, trip_id: int) -> List[SettlementRecord]:
    """All recorded settlements for a trip, oldest first."""
    return db.query(SettlementRecord).filter(
        SettlementRecord.trip_id == trip_id
    ).order_by(SettlementRecord.created_at, SettlementRecord.id).all()


def settle_record(
    db: Session,
    record_id: int,
    settled_by: str,
    note: Optional[str] = None,
    settled_at: Optional[datetime] = None,
) -> SettleResult:
    """
    Mark a pending settlement as paid.

    Fails without changing anything when the record does not exist, is
    already settled, when settled_by is neither party, or when either party
    has lost access to the trip.
    """
    record = db.query(SettlementRecord).filter(SettlementRecord.id == record_id).first()
    if not record:
        return _reject(db, record_id, SettleRejection.NOT_FOUND)
    if record.status == SettlementStatus.SETTLED.value:
        return _reject(db, record_id, SettleRejection.ALREADY_SETTLED)
    if settled_by not in (record.from_user_id, record.to_user_id):
        return _reject(db, record_id, SettleRejection.NOT_A_PARTY)
    if not (has_trip_access(db, record.trip_id, record.from_user_id)
            and has_trip_access(db, record.trip_id, record.to_user_id)):
        return _reject(db, record_id, SettleRejection.ACCESS_REVOKED)

    now = settled_at or _utcnow()
    # Only a row that is still pending is updated; a concurrent winner leaves zero rows
    result = db.execute(
        update(SettlementRecord)
        .where(
            SettlementRecord.id == record_id,
            SettlementRecord.status == SettlementStatus.PENDING.value,
        )
        .values(
            status=SettlementStatus.SETTLED.value,
            settled_by=settled_by,
            settled_at=now,
            note=note,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return _reject(db, record_id, SettleRejection.ALREADY_SETTLED)

    db.commit()
    db.refresh(record)
    logger.info(f"Settlement {record_id} marked as settled by {settled_by}")
    return SettleResult(record=SettlementSnapshot.from_record(record))


def _reject(db: Session, record_id: int, reason: SettleRejection) -> SettleResult:
    db.rollback()
    logger.warning(f"Rejected settle request for settlement {record_id}: {reason.value}")
    return SettleResult(rejection=reason)
