from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator, ConfigDict

from models.enums import CleaningStatus, EntityStatus, RoomAvailability, CLEANING_PROBLEM_STATUSES


# ===== TARIFAS =====

class RateBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    hours: int = Field(..., ge=0, description="Standard duration in hours, 0 for a purely hourly rate")
    excess_hour_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    description: Optional[str] = Field(None, max_length=1000)


class RateCreate(RateBase):
    pass


class RateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    hours: Optional[int] = Field(None, ge=0)
    excess_hour_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    description: Optional[str] = Field(None, max_length=1000)
    status: Optional[EntityStatus] = None

    @model_validator(mode="before")
    def require_some_field(cls, data):
        if isinstance(data, dict) and data:
            return data
        raise ValueError("At least one field is required for an update")


class RateRead(RateBase):
    id: int
    tenant_id: int
    branch_id: int
    status: EntityStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ===== HABITACIONES =====

class RoomBase(BaseModel):
    room_name: str = Field(..., min_length=1, max_length=255)
    room_code: str = Field(..., min_length=1, max_length=50)
    floor: Optional[int] = Field(None, ge=0)
    room_type: Optional[str] = Field(None, max_length=100)
    bed_type: Optional[str] = Field(None, max_length=100)
    capacity: Optional[int] = Field(None, ge=1)
    hotel_rate_ids: List[int] = Field(default_factory=list)


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    room_name: Optional[str] = Field(None, min_length=1, max_length=255)
    room_code: Optional[str] = Field(None, min_length=1, max_length=50)
    floor: Optional[int] = Field(None, ge=0)
    room_type: Optional[str] = Field(None, max_length=100)
    bed_type: Optional[str] = Field(None, max_length=100)
    capacity: Optional[int] = Field(None, ge=1)
    hotel_rate_ids: Optional[List[int]] = None

    @model_validator(mode="before")
    def require_some_field(cls, data):
        if isinstance(data, dict) and data:
            return data
        raise ValueError("At least one field is required for an update")


class RoomRead(RoomBase):
    id: int
    tenant_id: int
    branch_id: int
    is_available: RoomAvailability
    cleaning_status: CleaningStatus
    cleaning_notes: Optional[str] = None
    transaction_id: Optional[int] = None
    status: EntityStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ===== LIMPIEZA =====

class CleaningStatusUpdate(BaseModel):
    cleaning_status: CleaningStatus
    notes: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def notes_required_for_problems(self):
        if self.cleaning_status in CLEANING_PROBLEM_STATUSES and not (self.notes and self.notes.strip()):
            raise ValueError("Notes are required when marking a room dirty or out of order")
        return self


class CleaningLogRead(BaseModel):
    id: int
    room_id: int
    status: CleaningStatus
    notes: Optional[str] = None
    user_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
