"""
Endpoints de administración: tenants (sysad), sucursales, usuarios, log de actividad y reportes
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session

from database import conexion
from models.enums import UserRole
from models.user import User
from schemas.admin import (
    ActivityLogRead,
    BranchCreate,
    BranchRead,
    BranchUpdate,
    PasswordReset,
    TenantCreate,
    TenantRead,
    TenantUpdate,
    UserCreate,
    UserRead,
    UserUpdate,
)
from services.activity_log_service import ActivityLogService
from services.admin_service import BranchService, TenantService, UserService
from services.report_service import ReportService
from utils.dependencies import require_admin, require_sysad, resolve_tenant_id
from utils.http_errors import raise_service_error


router = APIRouter(prefix="/admin", tags=["Administration"])


def _tenant_scope(user: User) -> Optional[int]:
    """None permite a sysad llegar a los usuarios de cualquier tenant"""
    return None if user.role == UserRole.SYSAD else user.tenant_id


# ========== TENANTS ==========

@router.post("/tenants", status_code=status.HTTP_201_CREATED)
def create_tenant(
    payload: TenantCreate,
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_sysad),
):
    ok, msg, tenant = TenantService.create_tenant(db, current_user.id, payload)
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "tenant": TenantRead.model_validate(tenant)}


@router.get("/tenants", response_model=List[TenantRead])
def list_tenants(
    include_archived: bool = Query(False),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_sysad),
):
    return TenantService.list_tenants(db, include_archived=include_archived)


@router.get("/tenants/{tenant_id}", response_model=TenantRead)
def get_tenant(
    tenant_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    tenant = TenantService.get_tenant(db, resolve_tenant_id(current_user, tenant_id))
    if not tenant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found.")
    return tenant


@router.patch("/tenants/{tenant_id}")
def update_tenant(
    payload: TenantUpdate,
    tenant_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_sysad),
):
    ok, msg, tenant = TenantService.update_tenant(db, tenant_id, current_user.id, payload)
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "tenant": TenantRead.model_validate(tenant)}


@router.delete("/tenants/{tenant_id}")
def archive_tenant(
    tenant_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_sysad),
):
    ok, msg, tenant = TenantService.archive_tenant(db, tenant_id, current_user.id)
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "tenant": TenantRead.model_validate(tenant)}


# ========== SUCURSALES ==========

@router.post("/branches", status_code=status.HTTP_201_CREATED)
def create_branch(
    payload: BranchCreate,
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    scope = resolve_tenant_id(current_user, tenant_id)
    ok, msg, branch = BranchService.create_branch(db, scope, current_user.id, payload)
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "branch": BranchRead.model_validate(branch)}


@router.get("/branches", response_model=List[BranchRead])
def list_branches(
    tenant_id: Optional[int] = Query(None),
    include_archived: bool = Query(False),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    scope = resolve_tenant_id(current_user, tenant_id)
    return BranchService.list_branches_for_tenant(db, scope, include_archived=include_archived)


@router.patch("/branches/{branch_id}")
def update_branch(
    payload: BranchUpdate,
    branch_id: int = Path(..., gt=0),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    scope = resolve_tenant_id(current_user, tenant_id)
    ok, msg, branch = BranchService.update_branch(db, scope, branch_id, current_user.id, payload)
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "branch": BranchRead.model_validate(branch)}


@router.delete("/branches/{branch_id}")
def archive_branch(
    branch_id: int = Path(..., gt=0),
    tenant_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    scope = resolve_tenant_id(current_user, tenant_id)
    ok, msg, branch = BranchService.archive_branch(db, scope, branch_id, current_user.id)
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "branch": BranchRead.model_validate(branch)}


# ========== USUARIOS ==========

@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    if current_user.role != UserRole.SYSAD:
        if payload.role == UserRole.SYSAD:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only sysad can create sysad users")
        resolve_tenant_id(current_user, payload.tenant_id)
    ok, msg, user = UserService.create_user(db, current_user.id, payload)
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "user": UserRead.model_validate(user)}


@router.get("/users", response_model=List[UserRead])
def list_users(
    tenant_id: Optional[int] = Query(None),
    include_archived: bool = Query(False),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    scope = tenant_id if current_user.role == UserRole.SYSAD else current_user.tenant_id
    return UserService.list_users(db, tenant_id=scope, include_archived=include_archived)


@router.patch("/users/{user_id}")
def update_user(
    payload: UserUpdate,
    user_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    if payload.role == UserRole.SYSAD and current_user.role != UserRole.SYSAD:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only sysad can grant the sysad role")
    ok, msg, user = UserService.update_user(db, user_id, current_user.id, payload, _tenant_scope(current_user))
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "user": UserRead.model_validate(user)}


@router.delete("/users/{user_id}")
def archive_user(
    user_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    ok, msg, user = UserService.archive_user(db, user_id, current_user.id, _tenant_scope(current_user))
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "user": UserRead.model_validate(user)}


@router.post("/users/{user_id}/reset-password")
def reset_password(
    payload: PasswordReset,
    user_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    ok, msg, _ = UserService.reset_password(db, user_id, current_user.id, payload.new_password, _tenant_scope(current_user))
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg}


# ========== LOG DE ACTIVIDAD ==========

@router.get("/activity-logs", response_model=List[ActivityLogRead])
def list_activity_logs(
    tenant_id: Optional[int] = Query(None),
    branch_id: Optional[int] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    scope = resolve_tenant_id(current_user, tenant_id)
    return ActivityLogService.list_for_tenant(db, scope, limit=limit, offset=offset, branch_id=branch_id)


# ========== REPORTES ==========

@router.get("/dashboard")
def dashboard_summary(
    tenant_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    scope = resolve_tenant_id(current_user, tenant_id)
    return ReportService.dashboard_summary(db, scope, start_date=start_date, end_date=end_date)


@router.get("/reports/sales")
def detailed_sales_report(
    start_date: date = Query(...),
    end_date: date = Query(...),
    tenant_id: Optional[int] = Query(None),
    branch_id: Optional[int] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    if end_date < start_date:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="end_date must not be before start_date")
    scope = resolve_tenant_id(current_user, tenant_id)
    return ReportService.detailed_sales_report(db, scope, start_date, end_date, branch_id=branch_id)


@router.get("/system-overview")
def system_overview(
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_sysad),
):
    return ReportService.system_overview(db)
