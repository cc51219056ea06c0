"""
Login, refresh de tokens y log de intentos de login
"""
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from config import ACCESS_TOKEN_EXPIRE_MINUTES
from models.enums import EntityStatus, LoginStatus
from models.tenant import Tenant
from models.user import LoginLog, User
from utils.auth import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    token_claims_for,
    verify_password,
    verify_token,
)
from utils.logging_utils import log_event

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."


def _token_pair(user: User) -> dict:
    claims = token_claims_for(user)
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
        "token_type": "bearer",
        "expires_in": ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


def _record_attempt(
    db: Session,
    username: str,
    status: LoginStatus,
    user_id: Optional[int] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    error_details: Optional[str] = None,
) -> None:
    db.add(LoginLog(
        user_id=user_id,
        username_attempt=username,
        ip_address=ip_address,
        user_agent=user_agent,
        status=status,
        error_details=error_details,
    ))


class AuthService:

    @staticmethod
    def login(
        db: Session,
        username: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[bool, str, Optional[dict]]:
        """
        Verifica las credenciales y emite un par de tokens.
        Todo intento se registra en el log de login, incluidos los fallidos.

        Returns:
            (success, message, {"user": User, "tokens": dict})
        """
        try:
            user = db.query(User).filter(User.username == username).first()

            failure = None
            if not user or not verify_password(password, user.password_hash):
                failure = INVALID_CREDENTIALS_MESSAGE
            elif user.status != EntityStatus.ACTIVE:
                failure = "This account is not active."
            elif user.tenant_id is not None:
                tenant = db.query(Tenant).filter(Tenant.id == user.tenant_id).first()
                if not tenant or tenant.status != EntityStatus.ACTIVE:
                    failure = "This account's tenant is not active."

            if failure:
                _record_attempt(
                    db, username, LoginStatus.FAILED,
                    user_id=user.id if user else None,
                    ip_address=ip_address, user_agent=user_agent, error_details=failure,
                )
                db.commit()
                log_event("auth", username, "Failed login", failure)
                return False, failure, None

            user.last_log_in = datetime.utcnow()
            _record_attempt(
                db, username, LoginStatus.SUCCESS,
                user_id=user.id, ip_address=ip_address, user_agent=user_agent,
            )
            db.commit()
            db.refresh(user)
            log_event("auth", username, "Login", f"role={user.role.value}")
            return True, "Login successful.", {"user": user, "tokens": _token_pair(user)}
        except Exception as e:
            db.rollback()
            error_msg = f"Database error during login: {e}"
            log_event("auth", username, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def refresh(db: Session, refresh_token: str) -> Tuple[bool, str, Optional[dict]]:
        """verify_token lanza HTTPException 401 si el token en sí es inválido"""
        payload = verify_token(refresh_token, token_type="refresh")
        user = db.query(User).filter(
            User.id == payload.get("user_id"),
            User.username == payload.get("sub"),
        ).first()
        if not user or user.status != EntityStatus.ACTIVE:
            return False, "User not found or not active.", None
        log_event("auth", user.username, "Token refreshed")
        return True, "Token refreshed.", {"user": user, "tokens": _token_pair(user)}

    @staticmethod
    def change_password(db: Session, user: User, current_password: str, new_password: str) -> Tuple[bool, str]:
        if not verify_password(current_password, user.password_hash):
            return False, "Current password is incorrect."
        try:
            user.password_hash = get_password_hash(new_password)
            db.commit()
            log_event("auth", user.username, "Password changed")
            return True, "Password changed successfully."
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while changing password: {e}"
            log_event("auth", user.username, "Error", error_msg)
            return False, error_msg

    @staticmethod
    def list_login_attempts(
        db: Session, tenant_id: Optional[int] = None, limit: int = 50, offset: int = 0
    ) -> List[LoginLog]:
        """Más recientes primero; tenant_id restringe a intentos contra usuarios de ese tenant"""
        query = db.query(LoginLog)
        if tenant_id is not None:
            query = query.join(User, LoginLog.user_id == User.id).filter(User.tenant_id == tenant_id)
        return query.order_by(LoginLog.login_time.desc(), LoginLog.id.desc()).offset(offset).limit(limit).all()
