from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator, ConfigDict

from models.enums import AcceptanceStatus, PaymentState, TransactionStatus


class BookingDetails(BaseModel):
    """Datos de huésped, tarifa y pago compartidos por todos los flujos de reserva"""
    client_name: str = Field(..., min_length=1, max_length=255)
    selected_rate_id: int = Field(..., gt=0)
    client_payment_method: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=2000)
    is_paid: PaymentState = PaymentState.UNPAID
    tender_amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    is_advance_reservation: bool = False
    reserved_check_in_datetime: Optional[datetime] = None
    reserved_check_out_datetime: Optional[datetime] = None

    @model_validator(mode="after")
    def validate_reservation_window(self):
        if self.is_advance_reservation:
            if not self.reserved_check_in_datetime or not self.reserved_check_out_datetime:
                raise ValueError("Reserved check-in and check-out are required for advance reservations")
            if self.reserved_check_out_datetime <= self.reserved_check_in_datetime:
                raise ValueError("Reserved check-out must be after reserved check-in")
        return self


class UnassignedReservationCreate(BookingDetails):
    """Reserva sin habitación. Los admins indican la sucursal explícitamente"""
    branch_id: Optional[int] = Field(None, gt=0)


class RoomBookingCreate(BookingDetails):
    room_id: int = Field(..., gt=0)


class AssignRoomRequest(BaseModel):
    room_id: int = Field(..., gt=0)


class CheckInReservedRequest(BaseModel):
    room_id: int = Field(..., gt=0)


class CheckoutRequest(BaseModel):
    tender_amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    client_payment_method: Optional[str] = Field(None, max_length=50)


class TransactionNotesUpdate(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)


class TransactionRead(BaseModel):
    id: int
    tenant_id: int
    branch_id: int
    hotel_room_id: Optional[int] = None
    hotel_rate_id: Optional[int] = None
    client_name: str
    client_payment_method: Optional[str] = None
    notes: Optional[str] = None
    status: TransactionStatus
    is_accepted: AcceptanceStatus
    is_paid: PaymentState
    is_admin_created: bool
    is_advance_reservation: bool
    reserved_check_in_datetime: Optional[datetime] = None
    reserved_check_out_datetime: Optional[datetime] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    hours_used: Optional[int] = None
    total_amount: Optional[Decimal] = None
    tender_amount: Optional[Decimal] = None
    created_by_user_id: Optional[int] = None
    accepted_by_user_id: Optional[int] = None
    declined_by_user_id: Optional[int] = None
    check_out_by_user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
