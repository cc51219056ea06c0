"""
Endpoints de objetos perdidos
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from database import conexion
from models.enums import LostAndFoundStatus
from models.user import User
from schemas.support import LostAndFoundCreate, LostAndFoundRead, LostAndFoundStatusUpdate
from services.notification_service import LostAndFoundService
from utils.dependencies import require_admin, require_housekeeping, resolve_branch_id, resolve_tenant_id
from utils.http_errors import raise_service_error


router = APIRouter(prefix="/lost-and-found", tags=["Lost and Found"])


@router.post("", status_code=status.HTTP_201_CREATED)
def add_item(
    payload: LostAndFoundCreate,
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_housekeeping),
):
    ok, msg, item = LostAndFoundService.add_item(
        db, resolve_tenant_id(current_user, tenant_id), resolve_branch_id(current_user, branch_id), current_user.id, payload
    )
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "item": LostAndFoundRead.model_validate(item)}


@router.get("", response_model=List[LostAndFoundRead])
def list_branch_items(
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    item_status: Optional[LostAndFoundStatus] = Query(None, alias="status"),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_housekeeping),
):
    return LostAndFoundService.list_for_branch(
        db, resolve_tenant_id(current_user, tenant_id), resolve_branch_id(current_user, branch_id), status=item_status
    )


@router.get("/tenant", response_model=List[LostAndFoundRead])
def list_tenant_items(
    tenant_id: Optional[int] = Query(None),
    item_status: Optional[LostAndFoundStatus] = Query(None, alias="status"),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    return LostAndFoundService.list_for_tenant(db, resolve_tenant_id(current_user, tenant_id), status=item_status)


@router.put("/{item_id}/status")
def update_item_status(
    payload: LostAndFoundStatusUpdate,
    item_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_housekeeping),
):
    ok, msg, item = LostAndFoundService.update_status(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        item_id,
        current_user.id,
        payload,
    )
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "item": LostAndFoundRead.model_validate(item)}
