"""
Dependencias de autenticación y autorización
"""
from typing import List, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from database import conexion
from models.enums import EntityStatus, UserRole
from models.user import User
from schemas.auth import TokenData
from utils.auth import verify_token
from utils.logging_utils import log_event


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


# ========== DEPENDENCIAS DE AUTENTICACIÓN ==========

def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(conexion.get_db),
) -> User:
    """
    Obtiene el usuario detrás de un access token bearer.

    Raises:
        HTTPException 401 si el token es inválido o el usuario no existe, 403 si la cuenta no está activa
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = verify_token(token, token_type="access")
    token_data = TokenData(
        username=payload.get("sub"),
        user_id=payload.get("user_id"),
        role=payload.get("role"),
        tenant_id=payload.get("tenant_id"),
        branch_id=payload.get("branch_id"),
    )
    if token_data.username is None or token_data.user_id is None:
        raise credentials_exception

    user = db.query(User).filter(
        User.id == token_data.user_id,
        User.username == token_data.username,
    ).first()
    if user is None:
        raise credentials_exception

    if user.status != EntityStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is not active",
        )
    return user


# ========== DEPENDENCIAS DE AUTORIZACIÓN ==========

def require_roles(allowed_roles: List[UserRole]):
    """
    Factory de dependencias que restringe un endpoint a los roles dados.
    Sysad siempre tiene acceso.
    """
    def check_role(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != UserRole.SYSAD and current_user.role not in allowed_roles:
            log_event(
                "auth",
                current_user.username,
                "Access denied",
                f"role={current_user.role.value} allowed={[r.value for r in allowed_roles]}",
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Allowed roles: {', '.join(r.value for r in allowed_roles)}",
            )
        return current_user

    return check_role


require_sysad = require_roles([UserRole.SYSAD])
require_admin = require_roles([UserRole.ADMIN])
require_staff = require_roles([UserRole.ADMIN, UserRole.STAFF])
require_housekeeping = require_roles([UserRole.ADMIN, UserRole.STAFF, UserRole.HOUSEKEEPING])


# ========== ALCANCE DE TENANT / SUCURSAL ==========

def resolve_tenant_id(user: User, requested_tenant_id: Optional[int] = None) -> int:
    """Los usuarios de un tenant quedan fijos en su tenant; sysad debe indicar uno"""
    if user.role == UserRole.SYSAD:
        if requested_tenant_id is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="tenant_id is required")
        return requested_tenant_id
    if requested_tenant_id is not None and requested_tenant_id != user.tenant_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access to this tenant is not allowed")
    return user.tenant_id


def resolve_branch_id(user: User, requested_branch_id: Optional[int] = None) -> int:
    """
    Los usuarios de sucursal quedan fijos en su sucursal.
    Admins (y sysad) pueden operar en cualquier sucursal pero deben indicar cuál.
    """
    if user.role in (UserRole.STAFF, UserRole.HOUSEKEEPING):
        if requested_branch_id is not None and requested_branch_id != user.tenant_branch_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access to this branch is not allowed")
        return user.tenant_branch_id
    branch_id = requested_branch_id or user.tenant_branch_id
    if branch_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="branch_id is required")
    return branch_id
