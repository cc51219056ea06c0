from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    Numeric,
    JSON,
    UniqueConstraint,
    Index,
    Enum,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from database.conexion import Base
from .enums import (
    AcceptanceStatus,
    CleaningStatus,
    EntityStatus,
    PaymentState,
    RoomAvailability,
    TransactionStatus,
    enum_values,
)

JSONType = JSON().with_variant(JSONB, "postgresql")


# ============================================================================
# CATÁLOGO DE TARIFAS
# ============================================================================

class Rate(Base):
    """Plan con nombre de precio + duración (ej. 3 horas, noche completa)"""
    __tablename__ = "hotel_rates"
    __table_args__ = (
        Index("idx_rate_scope", "tenant_id", "branch_id", "status"),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    branch_id = Column(Integer, ForeignKey("tenant_branch.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    hours = Column(Integer, nullable=False, default=0)  # 0 = solo por hora
    excess_hour_price = Column(Numeric(12, 2), nullable=True)
    description = Column(Text, nullable=True)
    status = Column(
        Enum(EntityStatus, name="entity_status", values_callable=enum_values),
        default=EntityStatus.ACTIVE,
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ============================================================================
# HABITACIONES
# ============================================================================

class Room(Base):
    """
    Habitación física. transaction_id apunta a la única transacción que la ocupa
    o la retiene, y es NULL siempre que is_available sea AVAILABLE.
    """
    __tablename__ = "hotel_room"
    __table_args__ = (
        UniqueConstraint("tenant_id", "branch_id", "room_code", name="uq_room_scope_code"),
        Index("idx_room_scope_availability", "tenant_id", "branch_id", "is_available"),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    branch_id = Column(Integer, ForeignKey("tenant_branch.id", ondelete="CASCADE"), nullable=False)

    room_name = Column(String(255), nullable=False)
    room_code = Column(String(50), nullable=False)
    floor = Column(Integer, nullable=True)
    room_type = Column(String(100), nullable=True)
    bed_type = Column(String(100), nullable=True)
    capacity = Column(Integer, nullable=True)
    hotel_rate_ids = Column(JSONType, nullable=False, default=list)  # lista ordenada de Rate.id

    is_available = Column(
        Enum(RoomAvailability, name="room_availability", values_callable=enum_values),
        default=RoomAvailability.AVAILABLE,
        nullable=False,
    )
    cleaning_status = Column(
        Enum(CleaningStatus, name="cleaning_status", values_callable=enum_values),
        default=CleaningStatus.CLEAN,
        nullable=False,
    )
    cleaning_notes = Column(Text, nullable=True)
    transaction_id = Column(
        Integer,
        ForeignKey("transactions.id", ondelete="SET NULL", use_alter=True, name="fk_room_active_transaction"),
        nullable=True,
    )

    status = Column(
        Enum(EntityStatus, name="entity_status", values_callable=enum_values),
        default=EntityStatus.ACTIVE,
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def release(self):
        """Libera la habitación de su transacción activa"""
        self.is_available = RoomAvailability.AVAILABLE
        self.transaction_id = None

    def hold_for(self, transaction_id: int, availability: RoomAvailability):
        self.is_available = availability
        self.transaction_id = transaction_id


# ============================================================================
# TRANSACCIONES (RESERVAS / ESTADÍAS)
# ============================================================================

class Transaction(Base):
    """Reserva / estadía de un huésped, la unidad que mueve el ciclo de reservas"""
    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_tx_scope_status", "tenant_id", "branch_id", "status"),
        Index("idx_tx_room", "hotel_room_id"),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    branch_id = Column(Integer, ForeignKey("tenant_branch.id", ondelete="CASCADE"), nullable=False)

    hotel_room_id = Column(Integer, ForeignKey("hotel_room.id", ondelete="SET NULL"), nullable=True)
    hotel_rate_id = Column(Integer, ForeignKey("hotel_rates.id", ondelete="SET NULL"), nullable=True)

    client_name = Column(String(255), nullable=False)
    client_payment_method = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)

    status = Column(
        Enum(TransactionStatus, name="transaction_status", values_callable=enum_values),
        nullable=False,
    )
    is_accepted = Column(
        Enum(AcceptanceStatus, name="acceptance_status", values_callable=enum_values),
        default=AcceptanceStatus.NOT_APPLICABLE,
        nullable=False,
    )
    is_paid = Column(
        Enum(PaymentState, name="payment_state", values_callable=enum_values),
        default=PaymentState.UNPAID,
        nullable=False,
    )
    is_admin_created = Column(Boolean, default=False, nullable=False)
    is_advance_reservation = Column(Boolean, default=False, nullable=False)

    reserved_check_in_datetime = Column(DateTime, nullable=True)
    reserved_check_out_datetime = Column(DateTime, nullable=True)
    check_in_time = Column(DateTime, nullable=True)
    check_out_time = Column(DateTime, nullable=True)
    hours_used = Column(Integer, nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=True)
    tender_amount = Column(Numeric(12, 2), nullable=True)

    created_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    accepted_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    declined_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    check_out_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    rate = relationship("Rate", foreign_keys=[hotel_rate_id])
    room = relationship("Room", foreign_keys=[hotel_room_id])

    def __repr__(self):
        return f"<Transaction(id={self.id}, status='{self.status}', room={self.hotel_room_id})>"
