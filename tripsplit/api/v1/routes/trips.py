from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Dict, List
from tripsplit.db.database import get_db
from tripsplit.services.auth.dependencies import get_current_identity, get_current_user_id
from tripsplit.services.trip_service import (
    create_trip, get_trip_for_member, get_user_trips, update_trip, delete_trip,
    join_trip, get_trip_members, add_virtual_member, remove_member_from_trip
)
from tripsplit.schemas.trip_schema import (
    TripCreate, TripUpdate, TripOut, TripWithMembers, TripMemberOut,
    VirtualMemberCreate, MemberRemovalOut
)

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post("/", response_model=TripOut)
def create_new_trip(
    trip_data: TripCreate,
    identity: Dict[str, str] = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Create a new trip"""
    return create_trip(db, trip_data, identity["user_id"], identity["display_name"])


@router.get("/", response_model=List[TripOut])
def get_my_trips(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get all trips for current user"""
    return get_user_trips(db, user_id)


@router.post("/join/{hash_code}", response_model=TripOut)
def join_existing_trip(
    hash_code: str,
    identity: Dict[str, str] = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Join a trip with its share code"""
    return join_trip(db, hash_code, identity["user_id"], identity["display_name"])


@router.get("/{trip_ref}", response_model=TripWithMembers)
def get_trip_details(
    trip_ref: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get trip details with members; trip_ref is the trip id or its share code"""
    trip = get_trip_for_member(db, trip_ref, user_id)
    members = get_trip_members(db, trip.id)
    return TripWithMembers(
        id=trip.id,
        name=trip.name,
        hash_code=trip.hash_code,
        description=trip.description,
        start_date=trip.start_date,
        end_date=trip.end_date,
        created_by=trip.created_by,
        created_at=trip.created_at,
        members=[TripMemberOut.model_validate(member) for member in members]
    )


@router.put("/{trip_ref}", response_model=TripOut)
def update_existing_trip(
    trip_ref: str,
    update_data: TripUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Update a trip (admin only)"""
    trip = get_trip_for_member(db, trip_ref, user_id)
    return update_trip(db, trip.id, update_data, user_id)


@router.delete("/{trip_ref}")
def delete_existing_trip(
    trip_ref: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Delete a trip (admin only)"""
    trip = get_trip_for_member(db, trip_ref, user_id)
    delete_trip(db, trip.id, user_id)
    return {"message": "Trip deleted successfully"}


@router.get("/{trip_ref}/members", response_model=List[TripMemberOut])
def get_trip_members_list(
    trip_ref: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get all members of a trip"""
    trip = get_trip_for_member(db, trip_ref, user_id)
    return get_trip_members(db, trip.id)


@router.post("/{trip_ref}/members/virtual", response_model=TripMemberOut)
def add_trip_virtual_member(
    trip_ref: str,
    member_data: VirtualMemberCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Add a virtual member (admin only)"""
    trip = get_trip_for_member(db, trip_ref, user_id)
    return add_virtual_member(db, trip.id, member_data, user_id)


@router.delete("/{trip_ref}/members/{member_user_id}", response_model=MemberRemovalOut)
def remove_trip_member(
    trip_ref: str,
    member_user_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Remove a member (admin only); their expense records are kept"""
    trip = get_trip_for_member(db, trip_ref, user_id)
    has_expenses = remove_member_from_trip(db, trip.id, member_user_id, user_id)
    return MemberRemovalOut(
        message="Member removed successfully",
        warning="Expense records of this member were kept" if has_expenses else None
    )
