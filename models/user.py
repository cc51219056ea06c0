"""
Usuarios del sistema y log de intentos de login
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, Enum

from database.conexion import Base
from .enums import EntityStatus, LoginStatus, UserRole, enum_values


class User(Base):
    """Usuarios del sistema. tenant_id es NULL solo para cuentas sysad"""
    __tablename__ = "users"
    __table_args__ = (
        Index("idx_user_tenant", "tenant_id"),
        Index("idx_user_branch", "tenant_branch_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    role = Column(Enum(UserRole, name="user_role", values_callable=enum_values), nullable=False, default=UserRole.STAFF)

    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="SET NULL"), nullable=True)
    tenant_branch_id = Column(Integer, ForeignKey("tenant_branch.id", ondelete="SET NULL"), nullable=True)

    status = Column(
        Enum(EntityStatus, name="entity_status", values_callable=enum_values),
        default=EntityStatus.ACTIVE,
        nullable=False,
    )
    last_log_in = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_active(self) -> bool:
        return self.status == EntityStatus.ACTIVE

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"


class LoginLog(Base):
    """Un registro por intento de login, exitoso o no"""
    __tablename__ = "login_logs"
    __table_args__ = (
        Index("idx_login_log_time", "login_time"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    username_attempt = Column(String(100), nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    status = Column(Enum(LoginStatus, name="login_status", values_callable=enum_values), nullable=False)
    error_details = Column(Text, nullable=True)
    login_time = Column(DateTime, default=datetime.utcnow, nullable=False)
