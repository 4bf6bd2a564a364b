"""
Settlement computation and lifecycle routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from tripledger.core.config import settings
from tripledger.db.session import get_db
from tripledger.schemas.settlement import (
    SettlementComputeRequest, SettlementSummaryResponse, SettlementRecordResponse,
    SettleRequest
)
from tripledger.services.settlement_service import compute_settlement_summary
from tripledger.services.settlement_record_service import SettleRejection, settle_record

router = APIRouter(prefix="/settlements", tags=["settlements"])

REJECTION_STATUS = {
    SettleRejection.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    SettleRejection.ALREADY_SETTLED: status.HTTP_409_CONFLICT,
    SettleRejection.ACCESS_REVOKED: status.HTTP_403_FORBIDDEN,
    SettleRejection.NOT_A_PARTY: status.HTTP_403_FORBIDDEN,
}

REJECTION_DETAIL = {
    SettleRejection.NOT_FOUND: "Settlement not found",
    SettleRejection.ALREADY_SETTLED: "Settlement is already settled",
    SettleRejection.ACCESS_REVOKED: "Both parties must still have access to the trip",
    SettleRejection.NOT_A_PARTY: "Only the payer or the recipient can mark a settlement as paid",
}


@router.post("/compute", response_model=SettlementSummaryResponse)
async def compute_settlements(request: SettlementComputeRequest):
    """Compute balances and suggested transfers for a set of expenses."""
    summary = compute_settlement_summary(
        [expense.to_record() for expense in request.expenses],
        request.base_currency or settings.DEFAULT_BASE_CURRENCY,
        history=[record.to_snapshot() for record in request.history],
        epsilon=settings.SETTLEMENT_EPSILON,
        share_tolerance=settings.SHARE_SUM_TOLERANCE,
    )
    return SettlementSummaryResponse.model_validate(summary)


@router.post("/{settlement_id}/settle", response_model=SettlementRecordResponse)
async def mark_settlement_paid(
    settlement_id: int,
    request: SettleRequest,
    db: Session = Depends(get_db)
):
    """Mark a pending settlement as paid."""
    result = settle_record(db, settlement_id, request.settled_by, note=request.note)
    if not result.ok:
        raise HTTPException(
            status_code=REJECTION_STATUS[result.rejection],
            detail=REJECTION_DETAIL[result.rejection]
        )
    return result.record
