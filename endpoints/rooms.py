"""
Endpoints del catálogo de habitaciones y de housekeeping
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from database import conexion
from models.user import User
from schemas.reservations import TransactionRead
from schemas.rooms import CleaningLogRead, CleaningStatusUpdate, RateRead, RoomCreate, RoomRead, RoomUpdate
from services.catalog_service import RateService, RoomService
from services.housekeeping_service import HousekeepingService
from services.reservation_service import ReservationService
from utils.dependencies import (
    require_admin,
    require_housekeeping,
    require_staff,
    resolve_branch_id,
    resolve_tenant_id,
)
from utils.http_errors import raise_service_error


router = APIRouter(prefix="/rooms", tags=["Rooms"])


# ========== CATÁLOGO ==========

@router.post("", status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    ok, msg, room = RoomService.create_room(
        db, resolve_tenant_id(current_user, tenant_id), resolve_branch_id(current_user, branch_id), current_user.id, payload
    )
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "room": RoomRead.model_validate(room)}


@router.get("", response_model=List[RoomRead])
def list_rooms(
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    include_archived: bool = Query(False),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_housekeeping),
):
    return RoomService.list_rooms_for_branch(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        include_archived=include_archived,
    )


@router.get("/available", response_model=List[RoomRead])
def list_available_rooms(
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return RoomService.list_available_rooms(
        db, resolve_tenant_id(current_user, tenant_id), resolve_branch_id(current_user, branch_id)
    )


@router.patch("/{room_id}")
def update_room(
    payload: RoomUpdate,
    room_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    ok, msg, room = RoomService.update_room(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        room_id,
        current_user.id,
        payload,
    )
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "room": RoomRead.model_validate(room)}


@router.delete("/{room_id}")
def archive_room(
    room_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    ok, msg, room = RoomService.archive_room(
        db, resolve_tenant_id(current_user, tenant_id), resolve_branch_id(current_user, branch_id), room_id, current_user.id
    )
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "room": RoomRead.model_validate(room)}


@router.get("/{room_id}/rates", response_model=List[RateRead])
def list_room_rates(
    room_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return RateService.active_rates_for_room(
        db, resolve_tenant_id(current_user, tenant_id), resolve_branch_id(current_user, branch_id), room_id
    )


@router.get("/{room_id}/active-transaction", response_model=Optional[TransactionRead])
def get_active_transaction(
    room_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return ReservationService.get_active_transaction_for_room(
        db, resolve_tenant_id(current_user, tenant_id), resolve_branch_id(current_user, branch_id), room_id
    )


# ========== LIMPIEZA ==========

@router.put("/{room_id}/cleaning-status")
def update_cleaning_status(
    payload: CleaningStatusUpdate,
    room_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_housekeeping),
):
    ok, msg, data = HousekeepingService.update_room_cleaning_status(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        room_id,
        payload.cleaning_status,
        current_user.id,
        payload.notes,
    )
    if not ok:
        raise_service_error(msg)
    return {
        "success": True,
        "message": msg,
        "room": RoomRead.model_validate(data["room"]),
        "log": CleaningLogRead.model_validate(data["log"]),
    }


@router.get("/{room_id}/cleaning-logs", response_model=List[CleaningLogRead])
def list_cleaning_logs(
    room_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_housekeeping),
):
    return HousekeepingService.list_cleaning_logs(
        db, resolve_tenant_id(current_user, tenant_id), resolve_branch_id(current_user, branch_id), room_id, limit=limit
    )
