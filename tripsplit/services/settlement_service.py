import logging
from sqlalchemy.orm import Session
from typing import List, Optional
from tripsplit.core.config import settings
from tripsplit.schemas.settlement_schema import MemberBalance, SettlementReport
from tripsplit.services.expense_service import get_total_expenses, sum_owed, sum_paid
from tripsplit.services.trip_service import get_trip_members
from tripsplit.utils.settlement import aggregate_balances, build_settlement_report

logger = logging.getLogger(__name__)


def get_member_balances(db: Session, trip_id: str) -> List[MemberBalance]:
    """Net balance of every current member of the trip, in join order"""
    members = [(member.user_id, member.display_name) for member in get_trip_members(db, trip_id)]
    return aggregate_balances(
        members,
        lambda member_id: sum_paid(db, trip_id, member_id),
        lambda member_id: sum_owed(db, trip_id, member_id),
    )


def get_settlement(db: Session, trip_id: str, strict: Optional[bool] = None) -> SettlementReport:
    """
    Build the settlement report of a trip.

    All reads go through the same session so the balances come from one
    consistent snapshot before the engine runs.

    Raises:
        UnbalancedLedgerError: In strict mode, when the balances do not sum to zero
    """
    if strict is None:
        strict = settings.STRICT_ZERO_SUM

    balances = get_member_balances(db, trip_id)
    total_expenses = get_total_expenses(db, trip_id)

    logger.debug(f"Computing settlement for trip {trip_id} (strict={strict})")
    return build_settlement_report(balances, total_expenses, strict=strict)
