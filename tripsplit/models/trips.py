import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy.sql import func
from sqlalchemy import Column, String, DateTime, Date, Enum, ForeignKey, Boolean, Text, UniqueConstraint
from tripsplit.db.database import Base


class MemberRole(str, enum.Enum):
    admin = "admin"
    member = "member"


class Trip(Base):
    __tablename__ = "trips"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    hash_code = Column(String(8), nullable=False, unique=True, index=True)  # Share code used to join
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_by = Column(String, nullable=False)  # Reference to user service (no FK constraint)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)


class TripMember(Base):
    __tablename__ = "trip_members"
    __table_args__ = (UniqueConstraint("trip_id", "user_id", name="uq_trip_member"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    trip_id = Column(String, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)  # Reference to user service, or virtual_<uuid>
    display_name = Column(String(100), nullable=False)
    is_virtual = Column(Boolean, nullable=False, default=False)
    role = Column(Enum(MemberRole), nullable=False, default=MemberRole.member)
    # Client-side timestamp keeps join order stable within the same second
    joined_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
