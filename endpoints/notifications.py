"""
Endpoints de notificaciones: los admins publican, las sucursales leen
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from database import conexion
from models.user import User
from schemas.support import NotificationCreate, NotificationRead
from services.notification_service import NotificationService
from utils.dependencies import require_admin, require_housekeeping, resolve_branch_id, resolve_tenant_id
from utils.http_errors import raise_service_error


router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate,
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    ok, msg, notification = NotificationService.create_notification(
        db, resolve_tenant_id(current_user, tenant_id), current_user.id, payload
    )
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "notification": NotificationRead.model_validate(notification)}


@router.get("", response_model=List[NotificationRead])
def list_tenant_notifications(
    tenant_id: Optional[int] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    return NotificationService.list_for_tenant(db, resolve_tenant_id(current_user, tenant_id), limit=limit, offset=offset)


@router.get("/branch", response_model=List[NotificationRead])
def list_branch_notifications(
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    unread_only: bool = Query(False),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_housekeeping),
):
    return NotificationService.list_for_branch(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        unread_only=unread_only,
    )


@router.post("/{notification_id}/read")
def mark_notification_read(
    notification_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_housekeeping),
):
    ok, msg, notification = NotificationService.mark_as_read(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        notification_id,
        current_user.id,
    )
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "notification": NotificationRead.model_validate(notification)}


@router.delete("/{notification_id}")
def delete_notification(
    notification_id: int = Path(..., gt=0),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    ok, msg = NotificationService.delete_notification(
        db, resolve_tenant_id(current_user, tenant_id), notification_id, current_user.id
    )
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg}
