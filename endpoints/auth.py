"""
Endpoints de autenticación
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from config import RATE_LIMIT_LOGIN
from database import conexion
from models.enums import UserRole
from models.user import User
from schemas.admin import UserRead
from schemas.auth import ChangePasswordRequest, LoginLogRead, RefreshTokenRequest, Token
from services.auth_service import AuthService
from utils.dependencies import get_current_user, require_admin, resolve_tenant_id
from utils.http_errors import raise_service_error
from utils.rate_limiter import limiter


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=Token)
@limiter.limit(RATE_LIMIT_LOGIN)
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(conexion.get_db),
):
    """Devuelve un par de tokens access y refresh"""
    ok, msg, data = AuthService.login(
        db,
        form_data.username,
        form_data.password,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    if not ok:
        if msg.lower().startswith("database error"):
            raise_service_error(msg)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=msg,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return data["tokens"]


@router.post("/refresh", response_model=Token)
def refresh_token(payload: RefreshTokenRequest, db: Session = Depends(conexion.get_db)):
    ok, msg, data = AuthService.refresh(db, payload.refresh_token)
    if not ok:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=msg)
    return data["tokens"]


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user),
):
    ok, msg = AuthService.change_password(db, current_user, payload.current_password, payload.new_password)
    if not ok:
        if msg.lower().startswith("database error"):
            raise_service_error(msg)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=msg)
    return {"success": True, "message": msg}


@router.get("/login-logs", response_model=List[LoginLogRead])
def list_login_logs(
    tenant_id: Optional[int] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_admin),
):
    """Sysad ve todos los intentos salvo que indique un tenant; los admins ven su propio tenant"""
    scope = tenant_id if current_user.role == UserRole.SYSAD else resolve_tenant_id(current_user, tenant_id)
    return AuthService.list_login_attempts(db, tenant_id=scope, limit=limit, offset=offset)
