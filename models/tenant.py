"""
Tenants (operadores hoteleros) y sus sucursales
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, Index, Enum
from sqlalchemy.orm import relationship

from database.conexion import Base
from config import DEFAULT_MAX_BRANCHES, DEFAULT_MAX_USERS
from .enums import EntityStatus, enum_values


class Tenant(Base):
    """Cuenta cliente de nivel superior, dueña de sucursales, usuarios, habitaciones y tarifas"""
    __tablename__ = "tenants"
    __table_args__ = (
        Index("idx_tenant_status", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    tenant_name = Column(String(255), nullable=False)
    tenant_address = Column(Text, nullable=True)
    tenant_email = Column(String(255), nullable=True)
    tenant_contact_info = Column(String(100), nullable=True)
    max_branch_count = Column(Integer, nullable=False, default=DEFAULT_MAX_BRANCHES)
    max_user_count = Column(Integer, nullable=False, default=DEFAULT_MAX_USERS)
    status = Column(
        Enum(EntityStatus, name="entity_status", values_callable=enum_values),
        default=EntityStatus.ACTIVE,
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    branches = relationship("Branch", back_populates="tenant")

    def __repr__(self):
        return f"<Tenant(id={self.id}, name='{self.tenant_name}')>"


class Branch(Base):
    """Una propiedad física perteneciente a un tenant"""
    __tablename__ = "tenant_branch"
    __table_args__ = (
        UniqueConstraint("tenant_id", "branch_code", name="uq_branch_tenant_code"),
        Index("idx_branch_tenant_status", "tenant_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    branch_name = Column(String(255), nullable=False)
    branch_code = Column(String(50), nullable=False)
    branch_address = Column(Text, nullable=True)
    contact_number = Column(String(100), nullable=True)
    email_address = Column(String(255), nullable=True)
    status = Column(
        Enum(EntityStatus, name="entity_status", values_callable=enum_values),
        default=EntityStatus.ACTIVE,
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tenant = relationship("Tenant", back_populates="branches")

    def __repr__(self):
        return f"<Branch(id={self.id}, tenant_id={self.tenant_id}, code='{self.branch_code}')>"
