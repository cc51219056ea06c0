"""
Endpoints del catálogo de tarifas
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from database import conexion
from models.user import User
from schemas.rooms import RateCreate, RateRead, RateUpdate
from services.catalog_service import RateService
from utils.dependencies import require_admin, require_staff, resolve_branch_id, resolve_tenant_id
from utils.http_errors import raise_service_error


router = APIRouter(prefix="/rates", tags=["Rates"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_rate(
    payload: RateCreate,
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    ok, msg, rate = RateService.create_rate(
        db, resolve_tenant_id(current_user, tenant_id), resolve_branch_id(current_user, branch_id), current_user.id, payload
    )
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "rate": RateRead.model_validate(rate)}


@router.get("", response_model=List[RateRead])
def list_rates(
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    include_archived: bool = Query(False),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_staff),
):
    return RateService.list_rates_for_branch(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        include_archived=include_archived,
    )


@router.patch("/{rate_id}")
def update_rate(
    payload: RateUpdate,
    rate_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    ok, msg, rate = RateService.update_rate(
        db,
        resolve_tenant_id(current_user, tenant_id),
        resolve_branch_id(current_user, branch_id),
        rate_id,
        current_user.id,
        payload,
    )
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "rate": RateRead.model_validate(rate)}


@router.delete("/{rate_id}")
def archive_rate(
    rate_id: int = Path(..., gt=0),
    branch_id: Optional[int] = Query(None),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    ok, msg, rate = RateService.archive_rate(
        db, resolve_tenant_id(current_user, tenant_id), resolve_branch_id(current_user, branch_id), rate_id, current_user.id
    )
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "rate": RateRead.model_validate(rate)}
