from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Optional, List
from datetime import date, datetime
from tripsplit.models.trips import MemberRole


class TripBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_date_range(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("Start date cannot be later than end date")
        return self


class TripCreate(TripBase):
    pass


class TripUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    # Note: hash_code is generated once and cannot be updated

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value):
        if value is None or not value.strip():
            raise ValueError("Trip name cannot be empty")
        return value


class TripOut(TripBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    hash_code: str
    created_by: str
    created_at: datetime


class TripMemberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    trip_id: str
    user_id: str
    display_name: str
    is_virtual: bool
    role: MemberRole
    joined_at: datetime


class TripWithMembers(TripOut):
    members: List[TripMemberOut] = []


class VirtualMemberCreate(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=100)


class MemberRemovalOut(BaseModel):
    message: str
    warning: Optional[str] = None
