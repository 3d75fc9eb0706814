import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from tripsplit.db.database import get_db
from tripsplit.services.auth.dependencies import get_current_user_id
from tripsplit.services.settlement_service import get_settlement
from tripsplit.services.trip_service import get_trip_for_member
from tripsplit.schemas.settlement_schema import SettlementReport
from tripsplit.utils.settlement import UnbalancedLedgerError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settlements", tags=["settlements"])


@router.get("/trips/{trip_ref}", response_model=SettlementReport)
def get_trip_settlement(
    trip_ref: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get member balances and the suggested transfers that settle them"""
    trip = get_trip_for_member(db, trip_ref, user_id)

    try:
        return get_settlement(db, trip.id)
    except UnbalancedLedgerError as e:
        logger.error(f"Settlement rejected for trip {trip.id}: {e}")
        raise HTTPException(status_code=409, detail=str(e))
