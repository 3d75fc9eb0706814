import logging
import uuid
from sqlalchemy.orm import Session
from sqlalchemy import and_, func, or_
from fastapi import HTTPException
from typing import List, Optional
from tripsplit.models.trips import Trip, TripMember, MemberRole
from tripsplit.models.expenses import Expense, ExpenseSplit
from tripsplit.schemas.trip_schema import TripCreate, TripUpdate, VirtualMemberCreate
from tripsplit.utils.hash_code import create_unique_hash_code

logger = logging.getLogger(__name__)


def create_trip(db: Session, trip_data: TripCreate, created_by: str, display_name: str) -> Trip:
    """Create a new trip with a unique share code; the creator becomes admin"""
    trip = Trip(
        name=trip_data.name.strip(),
        hash_code=create_unique_hash_code(db),
        description=trip_data.description,
        start_date=trip_data.start_date,
        end_date=trip_data.end_date,
        created_by=created_by
    )
    db.add(trip)
    db.commit()
    db.refresh(trip)

    add_member_to_trip(db, trip.id, created_by, display_name, role=MemberRole.admin)
    logger.info(f"Trip {trip.id} created by {created_by} with code {trip.hash_code}")
    return trip


def get_trip(db: Session, trip_id: str) -> Optional[Trip]:
    """Get a trip by ID"""
    return db.query(Trip).filter(Trip.id == trip_id).first()


def get_trip_by_hash_code(db: Session, hash_code: str) -> Optional[Trip]:
    """Get a trip by its share code"""
    return db.query(Trip).filter(Trip.hash_code == hash_code.lower()).first()


def get_trip_by_ref(db: Session, trip_ref: str) -> Optional[Trip]:
    """Get a trip by ID or share code"""
    return db.query(Trip).filter(or_(Trip.id == trip_ref, Trip.hash_code == trip_ref.lower())).first()


def get_trip_for_member(db: Session, trip_ref: str, user_id: str) -> Trip:
    """Resolve a trip reference and check the user belongs to it"""
    trip = get_trip_by_ref(db, trip_ref)
    if not trip:
        raise HTTPException(status_code=404, detail="Trip not found")

    if not is_trip_member(db, trip.id, user_id):
        raise HTTPException(status_code=403, detail="You are not a member of this trip")
    return trip


def get_user_trips(db: Session, user_id: str) -> List[Trip]:
    """Get all trips for a user, newest first"""
    return db.query(Trip).join(TripMember, TripMember.trip_id == Trip.id)\
        .filter(TripMember.user_id == user_id)\
        .order_by(Trip.created_at.desc())\
        .all()


def update_trip(db: Session, trip_id: str, update_data: TripUpdate, user_id: str) -> Trip:
    """Update a trip (admin only)"""
    trip = get_trip(db, trip_id)
    if not trip:
        raise HTTPException(status_code=404, detail="Trip not found")

    if not is_trip_admin(db, trip_id, user_id):
        raise HTTPException(status_code=403, detail="Only trip admins can update trip")

    changes = update_data.model_dump(exclude_unset=True)
    start_date = changes.get("start_date", trip.start_date)
    end_date = changes.get("end_date", trip.end_date)
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="Start date cannot be later than end date")

    for field, value in changes.items():
        if field == "name" and value is not None:
            value = value.strip()
        setattr(trip, field, value)

    db.commit()
    db.refresh(trip)
    return trip


def delete_trip(db: Session, trip_id: str, user_id: str):
    """Delete a trip with its members, expenses and splits (admin only)"""
    trip = get_trip(db, trip_id)
    if not trip:
        raise HTTPException(status_code=404, detail="Trip not found")

    if not is_trip_admin(db, trip_id, user_id):
        raise HTTPException(status_code=403, detail="Only trip admins can delete trip")

    expense_ids = [row.id for row in db.query(Expense.id).filter(Expense.trip_id == trip_id).all()]
    if expense_ids:
        db.query(ExpenseSplit).filter(ExpenseSplit.expense_id.in_(expense_ids)).delete(synchronize_session=False)
    db.query(Expense).filter(Expense.trip_id == trip_id).delete(synchronize_session=False)
    db.query(TripMember).filter(TripMember.trip_id == trip_id).delete(synchronize_session=False)
    db.delete(trip)
    db.commit()
    logger.info(f"Trip {trip_id} deleted by {user_id}")


def add_member_to_trip(
    db: Session,
    trip_id: str,
    user_id: str,
    display_name: str,
    role: MemberRole = MemberRole.member,
    is_virtual: bool = False
) -> TripMember:
    """
    Add a member to a trip.

    Display names are unique within a trip (case-insensitive).
    """
    existing = get_trip_member(db, trip_id, user_id)
    if existing:
        raise HTTPException(status_code=400, detail="User is already a member of this trip")

    if is_display_name_taken(db, trip_id, display_name):
        raise HTTPException(
            status_code=400,
            detail=f"Display name '{display_name}' is already used in this trip"
        )

    member = TripMember(
        trip_id=trip_id,
        user_id=user_id,
        display_name=display_name,
        role=role,
        is_virtual=is_virtual
    )
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


def join_trip(db: Session, hash_code: str, user_id: str, display_name: str) -> Trip:
    """Join a trip using its share code"""
    trip = get_trip_by_hash_code(db, hash_code)
    if not trip:
        raise HTTPException(status_code=404, detail="Trip not found")

    add_member_to_trip(db, trip.id, user_id, display_name)
    logger.info(f"User {user_id} joined trip {trip.id}")
    return trip


def add_virtual_member(db: Session, trip_id: str, member_data: VirtualMemberCreate, admin_user_id: str) -> TripMember:
    """Add a member without an account, e.g. a friend who only shares costs (admin only)"""
    if not is_trip_admin(db, trip_id, admin_user_id):
        raise HTTPException(status_code=403, detail="Only trip admins can add virtual members")

    display_name = member_data.display_name.strip()
    if not display_name:
        raise HTTPException(status_code=400, detail="Display name cannot be empty")

    return add_member_to_trip(
        db, trip_id, f"virtual_{uuid.uuid4()}", display_name, is_virtual=True
    )


def remove_member_from_trip(db: Session, trip_id: str, target_user_id: str, admin_user_id: str) -> bool:
    """
    Remove a member from a trip (admin only).

    Expenses and splits of the member are kept, so the remaining balances of
    the trip may no longer sum to zero.

    Returns:
        Whether the member still had expenses or splits in the trip
    """
    if not is_trip_admin(db, trip_id, admin_user_id):
        raise HTTPException(status_code=403, detail="Only trip admins can remove members")

    if target_user_id == admin_user_id:
        raise HTTPException(status_code=400, detail="Admins cannot remove themselves")

    member = get_trip_member(db, trip_id, target_user_id)
    if not member:
        raise HTTPException(status_code=404, detail="User is not a member of this trip")

    has_expenses = member_has_expenses(db, trip_id, target_user_id)

    db.delete(member)
    db.commit()

    if has_expenses:
        logger.warning(f"Member {target_user_id} removed from trip {trip_id} with expense records kept")
    return has_expenses


def member_has_expenses(db: Session, trip_id: str, user_id: str) -> bool:
    """Check whether a user paid for or shares any expense of the trip"""
    paid = db.query(Expense.id).filter(
        and_(Expense.trip_id == trip_id, Expense.payer_id == user_id)
    ).first()
    if paid:
        return True

    shared = db.query(ExpenseSplit.id)\
        .join(Expense, ExpenseSplit.expense_id == Expense.id)\
        .filter(and_(Expense.trip_id == trip_id, ExpenseSplit.user_id == user_id))\
        .first()
    return shared is not None


def get_trip_members(db: Session, trip_id: str) -> List[TripMember]:
    """Get all members of a trip in join order"""
    return db.query(TripMember)\
        .filter(TripMember.trip_id == trip_id)\
        .order_by(TripMember.joined_at.asc(), TripMember.id.asc())\
        .all()


def get_trip_member(db: Session, trip_id: str, user_id: str) -> Optional[TripMember]:
    return db.query(TripMember).filter(
        and_(TripMember.trip_id == trip_id, TripMember.user_id == user_id)
    ).first()


def is_display_name_taken(db: Session, trip_id: str, display_name: str) -> bool:
    """Check if another member of the trip already goes by this name"""
    return db.query(TripMember.id).filter(
        and_(
            TripMember.trip_id == trip_id,
            func.lower(TripMember.display_name) == display_name.strip().lower()
        )
    ).first() is not None


def is_trip_member(db: Session, trip_id: str, user_id: str) -> bool:
    """Check if user is a member of the trip"""
    return get_trip_member(db, trip_id, user_id) is not None


def is_trip_admin(db: Session, trip_id: str, user_id: str) -> bool:
    """Check if user is an admin of the trip"""
    member = get_trip_member(db, trip_id, user_id)
    return member is not None and member.role == MemberRole.admin
