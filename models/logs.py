"""
Logs de solo inserción: historial de limpieza y actividad del personal/admin
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, Index, Enum
from sqlalchemy.dialects.postgresql import JSONB

from database.conexion import Base
from .enums import CleaningStatus, enum_values


class RoomCleaningLog(Base):
    """Un registro por cada cambio de estado de limpieza de una habitación"""
    __tablename__ = "room_cleaning_logs"
    __table_args__ = (
        Index("idx_cleaning_log_room", "room_id", "created_at"),
    )

    id = Column(Integer, primary_key=True)
    room_id = Column(Integer, ForeignKey("hotel_room.id", ondelete="CASCADE"), nullable=False)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    branch_id = Column(Integer, ForeignKey("tenant_branch.id", ondelete="CASCADE"), nullable=False)
    status = Column(Enum(CleaningStatus, name="cleaning_status", values_callable=enum_values), nullable=False)
    notes = Column(Text, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ActivityLog(Base):
    """Auditoría de acciones administrativas y del personal"""
    __tablename__ = "activity_logs"
    __table_args__ = (
        Index("idx_activity_tenant_time", "tenant_id", "created_at"),
        Index("idx_activity_target", "target_entity_type", "target_entity_id"),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=True)
    branch_id = Column(Integer, ForeignKey("tenant_branch.id", ondelete="SET NULL"), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    username = Column(String(100), nullable=True)
    action_type = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    target_entity_type = Column(String(50), nullable=True)
    target_entity_id = Column(String(50), nullable=True)
    details = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
