"""
Endpoints del ciclo de reservas: walk-ins, reservas, aceptación de sucursal,
check-in, checkout y cancelación
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session

from database import conexion
from models.enums import UserRole
from models.user import User
from schemas.reservations import (
    AssignRoomRequest,
    BookingDetails,
    CheckInReservedRequest,
    CheckoutRequest,
    RoomBookingCreate,
    TransactionNotesUpdate,
    TransactionRead,
    UnassignedReservationCreate,
)
from schemas.rooms import RoomRead
from services.reservation_service import ReservationService
from utils.dependencies import require_staff, resolve_branch_id, resolve_tenant_id
from utils.http_errors import raise_service_error


router = APIRouter(prefix="/reservations", tags=["Reservations"])


def _result(ok: bool, msg: str, data: Optional[dict]) -> dict:
    if not ok:
        raise_service_error(msg)
    body = {"success": True, "message": msg, "transaction": TransactionRead.model_validate(data["transaction"])}
    if data.get("room") is not None:
        body["room"] = RoomRead.model_validate(data["room"])
    return body


# ========== CREACIÓN ==========

@router.post("/walk-in", status_code=status.HTTP_201_CREATED)
def create_walk_in(
    payload: RoomBookingCreate,
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return _result(*ReservationService.create_walk_in(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        payload.room_id,
        current_user.id,
        payload,
    ))


@router.post("/room", status_code=status.HTTP_201_CREATED)
def create_room_reservation(
    payload: RoomBookingCreate,
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return _result(*ReservationService.create_room_reservation(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        payload.room_id,
        current_user.id,
        payload,
    ))


@router.post("/unassigned", status_code=status.HTTP_201_CREATED)
def create_unassigned_reservation(
    payload: UnassignedReservationCreate,
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    """Los admins reservan en nombre de una sucursal y esta debe aceptar; el personal reserva para su propia sucursal"""
    is_admin_created = current_user.role in (UserRole.ADMIN, UserRole.SYSAD)
    if is_admin_created and payload.branch_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="branch_id is required")
    return _result(*ReservationService.create_unassigned_reservation(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, payload.branch_id),
        current_user.id,
        payload,
        is_admin_created=is_admin_created,
    ))


# ========== CONSULTAS ==========

@router.get("/unassigned", response_model=List[TransactionRead])
def list_unassigned(
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return ReservationService.list_unassigned_reservations(
        db, resolve_tenant_id(current_user, tenant_id), resolve_branch_id(current_user, branch_id)
    )


@router.get("/{transaction_id}", response_model=TransactionRead)
def get_transaction(
    transaction_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    tx = ReservationService.get_transaction_details(
        db, resolve_tenant_id(current_user, tenant_id), resolve_branch_id(current_user, branch_id), transaction_id
    )
    if not tx:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found.")
    return tx


# ========== ACEPTACIÓN DE SUCURSAL ==========

@router.post("/{transaction_id}/accept")
def accept_reservation(
    payload: BookingDetails,
    transaction_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return _result(*ReservationService.accept_reservation(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        transaction_id,
        current_user.id,
        payload,
    ))


@router.post("/{transaction_id}/decline")
def decline_reservation(
    transaction_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return _result(*ReservationService.decline_reservation(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        transaction_id,
        current_user.id,
    ))


# ========== CHECK-IN ==========

@router.post("/{transaction_id}/assign-room")
def assign_room_and_check_in(
    payload: AssignRoomRequest,
    transaction_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return _result(*ReservationService.assign_room_and_check_in(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        transaction_id,
        payload.room_id,
        current_user.id,
    ))


@router.post("/{transaction_id}/check-in")
def check_in_reserved_guest(
    payload: CheckInReservedRequest,
    transaction_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return _result(*ReservationService.check_in_reserved_guest(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        transaction_id,
        payload.room_id,
        current_user.id,
    ))


# ========== ACTUALIZACIONES ==========

@router.put("/{transaction_id}/unassigned")
def update_unassigned_reservation(
    payload: BookingDetails,
    transaction_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return _result(*ReservationService.update_unassigned_reservation(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        transaction_id,
        current_user.id,
        payload,
    ))


@router.put("/{transaction_id}")
def update_reserved_transaction(
    payload: BookingDetails,
    transaction_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return _result(*ReservationService.update_reserved_transaction_details(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        transaction_id,
        current_user.id,
        payload,
    ))


@router.patch("/{transaction_id}/notes")
def update_notes(
    payload: TransactionNotesUpdate,
    transaction_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return _result(*ReservationService.update_transaction_notes(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        transaction_id,
        current_user.id,
        payload.notes,
    ))


# ========== CANCELACIÓN / CHECKOUT ==========

@router.post("/{transaction_id}/cancel")
def cancel_reservation(
    transaction_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return _result(*ReservationService.cancel_reservation(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        transaction_id,
        current_user.id,
    ))


@router.post("/{transaction_id}/checkout/{room_id}")
def check_out(
    payload: CheckoutRequest,
    transaction_id: int = Path(..., gt=0),
    room_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return _result(*ReservationService.check_out(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        transaction_id,
        room_id,
        current_user.id,
        payload.tender_amount,
        payload.client_payment_method,
    ))
