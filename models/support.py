from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, Index, Enum
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.mutable import MutableList

from database.conexion import Base
from .enums import (
    LostAndFoundStatus,
    NotificationLinkStatus,
    NotificationStatus,
    TicketPriority,
    TicketStatus,
    enum_values,
)


class Notification(Base):
    """Mensaje de los admins del tenant a una sucursal (o a todas si target_branch_id es NULL)"""
    __tablename__ = "notification"
    __table_args__ = (
        Index("idx_notification_scope", "tenant_id", "target_branch_id"),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(
        Enum(NotificationStatus, name="notification_status", values_callable=enum_values),
        default=NotificationStatus.UNREAD,
        nullable=False,
    )
    target_branch_id = Column(Integer, ForeignKey("tenant_branch.id", ondelete="CASCADE"), nullable=True)
    creator_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True)
    transaction_link_status = Column(
        Enum(NotificationLinkStatus, name="notification_link_status", values_callable=enum_values),
        default=NotificationLinkStatus.NO_TRANSACTION_LINK,
        nullable=False,
    )
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class LostAndFoundItem(Base):
    __tablename__ = "lost_and_found_logs"
    __table_args__ = (
        Index("idx_lost_found_scope", "tenant_id", "branch_id", "status"),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    branch_id = Column(Integer, ForeignKey("tenant_branch.id", ondelete="CASCADE"), nullable=False)
    item_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    found_location = Column(String(255), nullable=True)
    reported_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    status = Column(
        Enum(LostAndFoundStatus, name="lost_and_found_status", values_callable=enum_values),
        default=LostAndFoundStatus.FOUND,
        nullable=False,
    )
    found_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    claimed_at = Column(DateTime, nullable=True)
    claimed_by_details = Column(Text, nullable=True)
    disposed_details = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Ticket(Base):
    """Ticket de soporte de usuarios del tenant hacia los administradores del sistema"""
    __tablename__ = "tickets"
    __table_args__ = (
        Index("idx_ticket_scope_status", "tenant_id", "status"),
    )

    id = Column(Integer, primary_key=True)
    ticket_code = Column(String(20), unique=True, nullable=False)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="SET NULL"), nullable=True)
    branch_id = Column(Integer, ForeignKey("tenant_branch.id", ondelete="SET NULL"), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    author = Column(String(255), nullable=True)
    subject = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(
        Enum(TicketStatus, name="ticket_status", values_callable=enum_values),
        default=TicketStatus.OPEN,
        nullable=False,
    )
    priority = Column(
        Enum(TicketPriority, name="ticket_priority", values_callable=enum_values),
        default=TicketPriority.MEDIUM,
        nullable=False,
    )
    assigned_agent_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    comments = Column(MutableList.as_mutable(JSON().with_variant(JSONB, "postgresql")), nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
