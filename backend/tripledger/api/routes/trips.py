"""
Trip-scoped settlement record routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from tripledger.db.session import get_db
from tripledger.models.trip import Trip
from tripledger.schemas.settlement import (
    SettlementRecordResponse, SuggestedSettlementSchema, TripSettlementsResponse
)
from tripledger.services.settlement_service import reconcile
from tripledger.services.settlement_record_service import (
    InvalidSettlementError, list_trip_settlements, record_suggestion
)

router = APIRouter(prefix="/trips", tags=["trips"])


def get_trip_or_404(trip_id: int, db: Session) -> Trip:
    """Load a trip or fail with 404."""
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )
    return trip


@router.get("/{trip_id}/settlements", response_model=TripSettlementsResponse)
async def get_trip_settlements(trip_id: int, db: Session = Depends(get_db)):
    """Get recorded settlements for a trip, grouped by status."""
    get_trip_or_404(trip_id, db)
    recorded = reconcile((), list_trip_settlements(db, trip_id))
    return TripSettlementsResponse(
        trip_id=trip_id,
        pending=[SettlementRecordResponse.model_validate(r) for r in recorded.pending],
        settled=[SettlementRecordResponse.model_validate(r) for r in recorded.settled],
    )


@router.post(
    "/{trip_id}/settlements",
    response_model=SettlementRecordResponse,
    status_code=status.HTTP_201_CREATED
)
async def accept_suggested_settlement(
    trip_id: int,
    suggestion: SuggestedSettlementSchema,
    db: Session = Depends(get_db)
):
    """Record an accepted suggestion as a pending settlement."""
    get_trip_or_404(trip_id, db)
    try:
        record = record_suggestion(db, trip_id, suggestion.to_suggestion())
    except InvalidSettlementError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return record
