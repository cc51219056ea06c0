"""
Ciclo de vida de reservas: cómo una transacción y su habitación avanzan juntas por
la reserva, la aceptación de la sucursal, la asignación de habitación, el check-in,
el checkout y la cancelación.

Cada operación es una unidad de trabajo sobre la sesión inyectada:
bloquear filas (habitación primero) -> validar estado -> modificar -> auditar -> commit.
Una precondición fallida hace rollback y devuelve (False, message, None).
"""
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from models.enums import (
    AcceptanceStatus,
    CleaningStatus,
    EntityStatus,
    NotificationLinkStatus,
    PaymentState,
    RoomAvailability,
    TransactionStatus,
    CLEANING_STATUS_TEXT,
    ROOM_AVAILABILITY_TEXT,
    TRANSACTION_STATUS_TEXT,
    UNASSIGNED_RESERVATION_STATUSES,
    status_text,
)
from models.hotel import Rate, Room, Transaction
from models.logs import RoomCleaningLog
from models.support import Notification
from schemas.reservations import BookingDetails
from services.activity_log_service import ActivityLogService
from utils.billing_engine import compute_checkout_bill
from utils.logging_utils import log_event
from utils.timezone import hotel_now_naive, to_naive_hotel_time

NOT_PENDING_MESSAGE = "Reservation not found, already processed, or not in a state pending branch acceptance."

ASSIGNABLE_STATUSES = (
    TransactionStatus.ADVANCE_PAID,
    TransactionStatus.ADVANCE_RESERVATION,
    TransactionStatus.PENDING_BRANCH_ACCEPTANCE,
)
RESERVED_CHECK_IN_STATUSES = (
    TransactionStatus.ADVANCE_PAID,
    TransactionStatus.ADVANCE_RESERVATION,
    TransactionStatus.RESERVATION_WITH_ROOM,
)
NON_CANCELLABLE_STATUSES = (
    TransactionStatus.CHECKED_IN,
    TransactionStatus.CHECKED_OUT,
    TransactionStatus.VOIDED_CANCELLED,
)

OperationResult = Tuple[bool, str, Optional[dict]]


# ===== FUNCIONES AUXILIARES =====

def resolve_reservation_status(is_advance_reservation: bool, is_paid: PaymentState) -> TransactionStatus:
    """
    Etapa del ciclo para una reserva sin habitación.
    El flag de reserva anticipada tiene prioridad sobre el pago; si no, una reserva PAID es ADVANCE_PAID.
    """
    if is_advance_reservation:
        return TransactionStatus.ADVANCE_RESERVATION
    if is_paid == PaymentState.PAID:
        return TransactionStatus.ADVANCE_PAID
    return TransactionStatus.ADVANCE_RESERVATION


def _lock_transaction(db: Session, tenant_id: int, branch_id: int, transaction_id: int) -> Optional[Transaction]:
    return (
        db.query(Transaction)
        .filter(
            Transaction.id == transaction_id,
            Transaction.tenant_id == tenant_id,
            Transaction.branch_id == branch_id,
        )
        .with_for_update()
        .populate_existing()
        .first()
    )


def _lock_room(db: Session, tenant_id: int, branch_id: int, room_id: int) -> Optional[Room]:
    return (
        db.query(Room)
        .filter(
            Room.id == room_id,
            Room.tenant_id == tenant_id,
            Room.branch_id == branch_id,
            Room.status == EntityStatus.ACTIVE,
        )
        .with_for_update()
        .populate_existing()
        .first()
    )


def _active_rate(db: Session, tenant_id: int, branch_id: int, rate_id: Optional[int]) -> Optional[Rate]:
    if not rate_id:
        return None
    return (
        db.query(Rate)
        .filter(
            Rate.id == rate_id,
            Rate.tenant_id == tenant_id,
            Rate.branch_id == branch_id,
            Rate.status == EntityStatus.ACTIVE,
        )
        .first()
    )


def _room_assignment_error(room: Room) -> Optional[str]:
    if room.is_available != RoomAvailability.AVAILABLE:
        return f"Selected room is not available. Current status: {status_text(ROOM_AVAILABILITY_TEXT, room.is_available)}"
    if room.cleaning_status != CleaningStatus.CLEAN:
        return (
            f"Selected room is not clean (Current status: {status_text(CLEANING_STATUS_TEXT, room.cleaning_status)}). "
            "Cannot assign."
        )
    return None


def _apply_booking_details(tx: Transaction, details: BookingDetails):
    """Copia huésped/tarifa/pago; fechas reservadas solo en reservas anticipadas, tender solo si está pagado"""
    paid = details.is_paid != PaymentState.UNPAID
    tx.client_name = details.client_name
    tx.hotel_rate_id = details.selected_rate_id
    tx.client_payment_method = details.client_payment_method
    tx.notes = details.notes
    tx.is_paid = details.is_paid
    tx.tender_amount = details.tender_amount if paid else None
    tx.is_advance_reservation = details.is_advance_reservation
    if details.is_advance_reservation:
        tx.reserved_check_in_datetime = to_naive_hotel_time(details.reserved_check_in_datetime)
        tx.reserved_check_out_datetime = to_naive_hotel_time(details.reserved_check_out_datetime)
    else:
        tx.reserved_check_in_datetime = None
        tx.reserved_check_out_datetime = None


def _fail(db: Session, message: str) -> OperationResult:
    db.rollback()
    return False, message, None


def _error(db: Session, area: str, user_id, operation: str, exc: Exception) -> OperationResult:
    db.rollback()
    error_msg = f"Database error during {operation}: {exc}"
    log_event(area, user_id, "Error", error_msg)
    return False, error_msg, None


# ===== SERVICIO =====

class ReservationService:
    """Operaciones del ciclo de vida de reservas y habitaciones"""

    # ---------- creación ----------

    @staticmethod
    def create_walk_in(
        db: Session,
        tenant_id: int,
        branch_id: int,
        room_id: int,
        staff_user_id: int,
        details: BookingDetails,
    ) -> OperationResult:
        """
        Walk-in: el huésped ocupa la habitación de inmediato.

        Returns:
            (success, message, {"transaction": Transaction, "room": Room})
        """
        try:
            room = _lock_room(db, tenant_id, branch_id, room_id)
            if not room:
                return _fail(db, "Room not found or is not active.")
            room_error = _room_assignment_error(room)
            if room_error:
                return _fail(db, room_error)

            rate = _active_rate(db, tenant_id, branch_id, details.selected_rate_id)
            if not rate:
                return _fail(db, "Selected rate not found or is not active.")

            paid = details.is_paid != PaymentState.UNPAID
            tx = Transaction(
                tenant_id=tenant_id,
                branch_id=branch_id,
                hotel_room_id=room.id,
                status=TransactionStatus.CHECKED_IN,
                is_accepted=AcceptanceStatus.ACCEPTED,
                is_admin_created=False,
                check_in_time=hotel_now_naive(),
                created_by_user_id=staff_user_id,
            )
            _apply_booking_details(tx, details)
            tx.is_paid = PaymentState.PAID if paid else PaymentState.UNPAID
            tx.total_amount = rate.price if paid else None
            db.add(tx)
            db.flush()

            room.hold_for(tx.id, RoomAvailability.OCCUPIED)

            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=staff_user_id,
                action_type="STAFF_WALK_IN_CHECK_IN",
                description=f"Walk-in guest '{tx.client_name}' checked in to room '{room.room_name}'.",
                target_entity_type="Transaction",
                target_entity_id=tx.id,
                details={"room_id": room.id, "rate_id": rate.id, "is_paid": tx.is_paid.value},
            )
            db.commit()
            db.refresh(tx)
            db.refresh(room)

            log_event("reservations", staff_user_id, "Walk-in check-in", f"transaction_id={tx.id}, room_id={room.id}")
            return True, f"Guest {tx.client_name} checked in successfully.", {"transaction": tx, "room": room}

        except Exception as e:
            return _error(db, "reservations", staff_user_id, "check-in", e)

    @staticmethod
    def create_room_reservation(
        db: Session,
        tenant_id: int,
        branch_id: int,
        room_id: int,
        staff_user_id: int,
        details: BookingDetails,
    ) -> OperationResult:
        """Reserva con la habitación elegida de antemano: queda retenida como RESERVED"""
        try:
            room = _lock_room(db, tenant_id, branch_id, room_id)
            if not room:
                return _fail(db, "Room not found or is not active.")
            room_error = _room_assignment_error(room)
            if room_error:
                return _fail(db, room_error)

            rate = _active_rate(db, tenant_id, branch_id, details.selected_rate_id)
            if not rate:
                return _fail(db, "Selected rate not found or is not active.")

            tx = Transaction(
                tenant_id=tenant_id,
                branch_id=branch_id,
                hotel_room_id=room.id,
                status=TransactionStatus.RESERVATION_WITH_ROOM,
                is_accepted=AcceptanceStatus.ACCEPTED,
                is_admin_created=False,
                created_by_user_id=staff_user_id,
            )
            _apply_booking_details(tx, details)
            db.add(tx)
            db.flush()

            room.hold_for(tx.id, RoomAvailability.RESERVED)

            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=staff_user_id,
                action_type="STAFF_CREATED_ROOM_RESERVATION",
                description=f"Room '{room.room_name}' reserved for '{tx.client_name}'.",
                target_entity_type="Transaction",
                target_entity_id=tx.id,
                details={"room_id": room.id, "rate_id": rate.id},
            )
            db.commit()
            db.refresh(tx)
            db.refresh(room)

            log_event("reservations", staff_user_id, "Reserve room", f"transaction_id={tx.id}, room_id={room.id}")
            return True, f"Room {room.room_name} reserved successfully for {tx.client_name}.", {"transaction": tx, "room": room}

        except Exception as e:
            return _error(db, "reservations", staff_user_id, "reservation creation", e)

    @staticmethod
    def create_unassigned_reservation(
        db: Session,
        tenant_id: int,
        branch_id: int,
        user_id: int,
        details: BookingDetails,
        is_admin_created: bool = False,
    ) -> OperationResult:
        """
        Reserva sin habitación.
        Las creadas por un admin esperan a la sucursal (PENDING_BRANCH_ACCEPTANCE) y
        publican una notificación vinculada para esa sucursal.
        """
        try:
            rate = _active_rate(db, tenant_id, branch_id, details.selected_rate_id)
            if not rate:
                return _fail(db, "Selected rate not found or is not active.")

            tx = Transaction(
                tenant_id=tenant_id,
                branch_id=branch_id,
                hotel_room_id=None,
                is_admin_created=is_admin_created,
                created_by_user_id=user_id,
            )
            _apply_booking_details(tx, details)
            if is_admin_created:
                tx.status = TransactionStatus.PENDING_BRANCH_ACCEPTANCE
                tx.is_accepted = AcceptanceStatus.PENDING
            else:
                tx.status = resolve_reservation_status(details.is_advance_reservation, details.is_paid)
                tx.is_accepted = AcceptanceStatus.ACCEPTED
            db.add(tx)
            db.flush()

            if is_admin_created:
                db.add(Notification(
                    tenant_id=tenant_id,
                    target_branch_id=branch_id,
                    creator_user_id=user_id,
                    message=f"New reservation for '{tx.client_name}' is waiting for branch acceptance.",
                    transaction_id=tx.id,
                    transaction_link_status=NotificationLinkStatus.TRANSACTION_LINKED,
                ))

            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=user_id,
                action_type="ADMIN_CREATED_RESERVATION" if is_admin_created else "STAFF_CREATED_UNASSIGNED_RESERVATION",
                description=f"Unassigned reservation created for '{tx.client_name}'.",
                target_entity_type="Transaction",
                target_entity_id=tx.id,
                details={"status": tx.status.value, "rate_id": rate.id},
            )
            db.commit()
            db.refresh(tx)

            log_event("reservations", user_id, "Create unassigned reservation", f"transaction_id={tx.id}, status={tx.status.value}")
            return True, "Unassigned reservation created successfully.", {"transaction": tx}

        except Exception as e:
            return _error(db, "reservations", user_id, "reservation creation", e)

    # ---------- aceptación de la sucursal ----------

    @staticmethod
    def accept_reservation(
        db: Session,
        tenant_id: int,
        branch_id: int,
        transaction_id: int,
        staff_user_id: int,
        details: BookingDetails,
    ) -> OperationResult:
        """El personal de la sucursal acepta una reserva creada por un admin, confirmando tarifa y pago"""
        try:
            tx = _lock_transaction(db, tenant_id, branch_id, transaction_id)
            if (
                not tx
                or tx.status != TransactionStatus.PENDING_BRANCH_ACCEPTANCE
                or tx.is_accepted != AcceptanceStatus.PENDING
            ):
                return _fail(db, NOT_PENDING_MESSAGE)

            rate = _active_rate(db, tenant_id, branch_id, details.selected_rate_id)
            if not rate:
                return _fail(db, "Selected rate not found or is not active.")

            _apply_booking_details(tx, details)
            tx.status = resolve_reservation_status(details.is_advance_reservation, details.is_paid)
            tx.is_accepted = AcceptanceStatus.ACCEPTED
            tx.accepted_by_user_id = staff_user_id

            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=staff_user_id,
                action_type="STAFF_ACCEPTED_ADMIN_RESERVATION",
                description=f"Staff accepted admin-created reservation for '{tx.client_name}' (Transaction ID: {tx.id}).",
                target_entity_type="Transaction",
                target_entity_id=tx.id,
                details={"new_status": tx.status.value, "rate_id": rate.id, "is_paid": tx.is_paid.value},
            )
            db.commit()
            db.refresh(tx)

            log_event("reservations", staff_user_id, "Accept reservation", f"transaction_id={tx.id}, status={tx.status.value}")
            return True, f"Reservation for '{tx.client_name}' accepted by branch.", {"transaction": tx}

        except Exception as e:
            return _error(db, "reservations", staff_user_id, "reservation acceptance", e)

    @staticmethod
    def decline_reservation(
        db: Session,
        tenant_id: int,
        branch_id: int,
        transaction_id: int,
        staff_user_id: int,
    ) -> OperationResult:
        try:
            tx = _lock_transaction(db, tenant_id, branch_id, transaction_id)
            if not tx or tx.status != TransactionStatus.PENDING_BRANCH_ACCEPTANCE:
                return _fail(db, NOT_PENDING_MESSAGE)

            tx.status = TransactionStatus.VOIDED_CANCELLED
            tx.is_accepted = AcceptanceStatus.NOT_ACCEPTED
            tx.declined_by_user_id = staff_user_id

            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=staff_user_id,
                action_type="STAFF_DECLINED_ADMIN_RESERVATION",
                description=f"Staff declined admin-created reservation for '{tx.client_name}' (Transaction ID: {tx.id}).",
                target_entity_type="Transaction",
                target_entity_id=tx.id,
            )
            db.commit()
            db.refresh(tx)

            log_event("reservations", staff_user_id, "Decline reservation", f"transaction_id={tx.id}")
            return True, "Reservation declined successfully.", {"transaction": tx}

        except Exception as e:
            return _error(db, "reservations", staff_user_id, "reservation decline", e)

    # ---------- check-in ----------

    @staticmethod
    def assign_room_and_check_in(
        db: Session,
        tenant_id: int,
        branch_id: int,
        transaction_id: int,
        room_id: int,
        staff_user_id: int,
    ) -> OperationResult:
        """
        Ubica una reserva sin habitación en una habitación limpia y disponible y hace el check-in.
        La fila de la habitación se bloquea antes que la de la transacción.
        """
        try:
            room = _lock_room(db, tenant_id, branch_id, room_id)
            tx = _lock_transaction(db, tenant_id, branch_id, transaction_id)

            if (
                not tx
                or tx.hotel_room_id is not None
                or tx.status not in ASSIGNABLE_STATUSES
                or (
                    tx.status == TransactionStatus.PENDING_BRANCH_ACCEPTANCE
                    and tx.is_accepted != AcceptanceStatus.ACCEPTED
                )
            ):
                current = status_text(TRANSACTION_STATUS_TEXT, tx.status) if tx else "not found"
                return _fail(
                    db,
                    f"Reservation (ID: {transaction_id}) not found, already assigned, or not in a valid state "
                    f"for assignment (current status: {current}).",
                )

            if not room:
                return _fail(db, "Selected room not found or is not active.")
            room_error = _room_assignment_error(room)
            if room_error:
                return _fail(db, room_error)

            if not tx.hotel_rate_id:
                return _fail(db, "Reservation does not have an associated rate. Cannot proceed with check-in.")
            rate = _active_rate(db, tenant_id, branch_id, tx.hotel_rate_id)
            if not rate:
                return _fail(db, "Selected rate for reservation not found or inactive. Cannot proceed with check-in.")

            tx.hotel_room_id = room.id
            tx.status = TransactionStatus.CHECKED_IN
            tx.check_in_time = tx.reserved_check_in_datetime or hotel_now_naive()
            if tx.total_amount is None:
                tx.total_amount = rate.price

            room.hold_for(tx.id, RoomAvailability.OCCUPIED)

            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=staff_user_id,
                action_type="STAFF_ASSIGNED_ROOM_AND_CHECKED_IN",
                description=f"Room '{room.room_name}' assigned and client '{tx.client_name}' checked in.",
                target_entity_type="Transaction",
                target_entity_id=tx.id,
                details={"room_id": room.id, "check_in_time": tx.check_in_time.isoformat()},
            )
            db.commit()
            db.refresh(tx)
            db.refresh(room)

            log_event("reservations", staff_user_id, "Assign room and check in", f"transaction_id={tx.id}, room_id={room.id}")
            return (
                True,
                f"Room '{room.room_name}' assigned and client '{tx.client_name}' checked in.",
                {"transaction": tx, "room": room},
            )

        except Exception as e:
            return _error(db, "reservations", staff_user_id, "room assignment and check-in", e)

    @staticmethod
    def check_in_reserved_guest(
        db: Session,
        tenant_id: int,
        branch_id: int,
        transaction_id: int,
        room_id: int,
        staff_user_id: int,
    ) -> OperationResult:
        """Check-in de una reserva que ya retiene esta habitación"""
        try:
            room = _lock_room(db, tenant_id, branch_id, room_id)
            tx = _lock_transaction(db, tenant_id, branch_id, transaction_id)

            if not tx or tx.hotel_room_id != room_id or tx.status not in RESERVED_CHECK_IN_STATUSES:
                return _fail(db, "Reservation not found or not in a state that can be checked in.")
            if not room:
                return _fail(db, "Room not found or is not active.")
            if room.transaction_id not in (None, tx.id) or room.is_available == RoomAvailability.OCCUPIED:
                return _fail(
                    db,
                    f"Room is held by another booking. Current status: {status_text(ROOM_AVAILABILITY_TEXT, room.is_available)}",
                )

            tx.status = TransactionStatus.CHECKED_IN
            tx.check_in_time = tx.reserved_check_in_datetime or hotel_now_naive()
            room.hold_for(tx.id, RoomAvailability.OCCUPIED)

            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=staff_user_id,
                action_type="STAFF_CHECKED_IN_RESERVED_GUEST",
                description=f"Reserved guest '{tx.client_name}' checked in to room '{room.room_name}'.",
                target_entity_type="Transaction",
                target_entity_id=tx.id,
                details={"room_id": room.id},
            )
            db.commit()
            db.refresh(tx)
            db.refresh(room)

            log_event("reservations", staff_user_id, "Check in reserved guest", f"transaction_id={tx.id}, room_id={room.id}")
            return True, f"Guest {tx.client_name} checked in successfully.", {"transaction": tx, "room": room}

        except Exception as e:
            return _error(db, "reservations", staff_user_id, "reserved check-in", e)

    # ---------- actualización de datos ----------

    @staticmethod
    def update_unassigned_reservation(
        db: Session,
        tenant_id: int,
        branch_id: int,
        transaction_id: int,
        staff_user_id: int,
        details: BookingDetails,
    ) -> OperationResult:
        try:
            tx = _lock_transaction(db, tenant_id, branch_id, transaction_id)
            if not tx or tx.hotel_room_id is not None:
                return _fail(db, "Reservation not found, already assigned a room, or does not belong to this branch/tenant.")
            if tx.status not in (TransactionStatus.ADVANCE_PAID, TransactionStatus.ADVANCE_RESERVATION):
                return _fail(
                    db,
                    f"Reservation cannot be updated from its current state ({status_text(TRANSACTION_STATUS_TEXT, tx.status)}).",
                )

            rate = _active_rate(db, tenant_id, branch_id, details.selected_rate_id)
            if not rate:
                return _fail(db, "Selected rate not found or is not active.")

            _apply_booking_details(tx, details)
            tx.status = resolve_reservation_status(details.is_advance_reservation, details.is_paid)

            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=staff_user_id,
                action_type="STAFF_UPDATED_UNASSIGNED_RESERVATION",
                description=f"Unassigned reservation for '{tx.client_name}' updated (Transaction ID: {tx.id}).",
                target_entity_type="Transaction",
                target_entity_id=tx.id,
                details={"updated_fields": sorted(details.model_fields_set), "status": tx.status.value},
            )
            db.commit()
            db.refresh(tx)

            log_event("reservations", staff_user_id, "Update unassigned reservation", f"transaction_id={tx.id}")
            return True, "Unassigned reservation details updated successfully.", {"transaction": tx}

        except Exception as e:
            return _error(db, "reservations", staff_user_id, "reservation update", e)

    @staticmethod
    def update_reserved_transaction_details(
        db: Session,
        tenant_id: int,
        branch_id: int,
        transaction_id: int,
        staff_user_id: int,
        details: BookingDetails,
    ) -> OperationResult:
        """Edita una reserva con habitación asignada; su estado en el ciclo no cambia"""
        try:
            tx = _lock_transaction(db, tenant_id, branch_id, transaction_id)
            if not tx:
                return _fail(db, "Transaction not found.")
            if tx.status != TransactionStatus.RESERVATION_WITH_ROOM:
                return _fail(
                    db,
                    "Transaction is not in a state that allows detailed updates "
                    f"(current status: {status_text(TRANSACTION_STATUS_TEXT, tx.status)}). It must be an active room reservation.",
                )

            rate = _active_rate(db, tenant_id, branch_id, details.selected_rate_id)
            if not rate:
                return _fail(db, "Selected rate not found or is not active.")

            _apply_booking_details(tx, details)

            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=staff_user_id,
                action_type="STAFF_UPDATED_RESERVATION_DETAILS",
                description=f"Reservation details for '{tx.client_name}' updated (Transaction ID: {tx.id}).",
                target_entity_type="Transaction",
                target_entity_id=tx.id,
                details={"updated_fields": sorted(details.model_fields_set)},
            )
            db.commit()
            db.refresh(tx)

            log_event("reservations", staff_user_id, "Update reservation details", f"transaction_id={tx.id}")
            return True, "Reservation details updated successfully.", {"transaction": tx}

        except Exception as e:
            return _error(db, "reservations", staff_user_id, "reservation update", e)

    @staticmethod
    def update_transaction_notes(
        db: Session,
        tenant_id: int,
        branch_id: int,
        transaction_id: int,
        staff_user_id: int,
        notes: Optional[str],
    ) -> OperationResult:
        """Las notas se pueden editar en cualquier estado, incluidos los terminales"""
        try:
            tx = _lock_transaction(db, tenant_id, branch_id, transaction_id)
            if not tx:
                return _fail(db, "Transaction not found or update failed.")

            tx.notes = notes
            db.commit()
            db.refresh(tx)

            log_event("reservations", staff_user_id, "Update notes", f"transaction_id={tx.id}")
            return True, "Transaction notes updated successfully.", {"transaction": tx}

        except Exception as e:
            return _error(db, "reservations", staff_user_id, "notes update", e)

    # ---------- cancelación ----------

    @staticmethod
    def cancel_reservation(
        db: Session,
        tenant_id: int,
        branch_id: int,
        transaction_id: int,
        staff_user_id: int,
    ) -> OperationResult:
        """Anula una reserva sin check-in, liberando la habitación que retenga"""
        try:
            tx = (
                db.query(Transaction)
                .filter(
                    Transaction.id == transaction_id,
                    Transaction.tenant_id == tenant_id,
                    Transaction.branch_id == branch_id,
                )
                .first()
            )
            if not tx:
                return _fail(db, "Transaction not found.")

            if tx.status in NON_CANCELLABLE_STATUSES:
                return _fail(db, f"Cannot cancel transaction in status: {status_text(TRANSACTION_STATUS_TEXT, tx.status)}.")

            room = None
            if tx.hotel_room_id is not None:
                room = _lock_room(db, tenant_id, branch_id, tx.hotel_room_id)
            tx = _lock_transaction(db, tenant_id, branch_id, transaction_id)

            if tx.status in NON_CANCELLABLE_STATUSES:
                return _fail(db, f"Cannot cancel transaction in status: {status_text(TRANSACTION_STATUS_TEXT, tx.status)}.")
            if tx.hotel_room_id != (room.id if room is not None else None):
                return _fail(db, "Transaction was modified by another operation. Please reload and try again.")

            tx.status = TransactionStatus.VOIDED_CANCELLED
            if room is not None and room.transaction_id == tx.id:
                room.release()

            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=staff_user_id,
                action_type="STAFF_CANCELLED_RESERVATION",
                description=f"Reservation for '{tx.client_name}' cancelled (Transaction ID: {tx.id}).",
                target_entity_type="Transaction",
                target_entity_id=tx.id,
                details={"released_room_id": room.id if room is not None else None},
            )
            db.commit()
            db.refresh(tx)
            if room is not None:
                db.refresh(room)

            log_event("reservations", staff_user_id, "Cancel reservation", f"transaction_id={tx.id}")
            return True, "Reservation cancelled successfully.", {"transaction": tx, "room": room}

        except Exception as e:
            return _error(db, "reservations", staff_user_id, "cancellation", e)

    # ---------- checkout ----------

    @staticmethod
    def check_out(
        db: Session,
        tenant_id: int,
        branch_id: int,
        transaction_id: int,
        room_id: int,
        staff_user_id: int,
        tender_amount,
        client_payment_method: Optional[str] = None,
    ) -> OperationResult:
        """
        Cobra la estadía, cierra la transacción y libera la habitación para inspección.
        CHECKED_IN se vuelve a verificar con la fila bloqueada: un segundo checkout
        concurrente falla en lugar de cobrar dos veces.
        """
        try:
            room = _lock_room(db, tenant_id, branch_id, room_id)
            tx = _lock_transaction(db, tenant_id, branch_id, transaction_id)

            if not tx or tx.hotel_room_id != room_id:
                return _fail(db, "Transaction not found for checkout.")
            if tx.status != TransactionStatus.CHECKED_IN:
                return _fail(
                    db,
                    f"Transaction is not in 'Checked-In' state (current status: {status_text(TRANSACTION_STATUS_TEXT, tx.status)}). "
                    "Cannot check out.",
                )
            if not room:
                return _fail(db, "Room not found or is not active.")

            rate = (
                db.query(Rate)
                .filter(Rate.id == tx.hotel_rate_id, Rate.tenant_id == tenant_id, Rate.branch_id == branch_id)
                .first()
            )
            if not rate:
                return _fail(db, "Rate for this transaction not found. Cannot compute the bill.")

            check_out_time = hotel_now_naive()
            bill = compute_checkout_bill(
                tx.check_in_time or check_out_time,
                check_out_time,
                rate.price,
                rate.hours,
                rate.excess_hour_price,
            )

            tx.status = TransactionStatus.CHECKED_OUT
            tx.check_out_time = check_out_time
            tx.hours_used = bill["hours_used"]
            tx.total_amount = bill["total_amount"]
            tx.tender_amount = tender_amount
            tx.is_paid = PaymentState.PAID
            tx.check_out_by_user_id = staff_user_id
            if client_payment_method:
                tx.client_payment_method = client_payment_method

            note = f"Room set to 'Needs Inspection' after checkout by user ID {staff_user_id}."
            room.release()
            room.cleaning_status = CleaningStatus.INSPECTION
            room.cleaning_notes = note
            db.add(RoomCleaningLog(
                room_id=room.id,
                tenant_id=tenant_id,
                branch_id=branch_id,
                status=CleaningStatus.INSPECTION,
                notes=note,
                user_id=staff_user_id,
            ))

            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=staff_user_id,
                action_type="STAFF_CHECKED_OUT_GUEST",
                description=f"Guest '{tx.client_name}' checked out of room '{room.room_name}'.",
                target_entity_type="Transaction",
                target_entity_id=tx.id,
                details={
                    "hours_used": bill["hours_used"],
                    "total_amount": str(bill["total_amount"]),
                    "tender_amount": str(tender_amount),
                },
            )
            db.commit()
            db.refresh(tx)
            db.refresh(room)

            log_event(
                "checkout",
                staff_user_id,
                "Check out guest",
                f"transaction_id={tx.id}, hours_used={tx.hours_used}, total={tx.total_amount}",
            )
            return (
                True,
                "Guest checked out successfully. Room is now available and marked for inspection.",
                {"transaction": tx, "room": room},
            )

        except Exception as e:
            return _error(db, "checkout", staff_user_id, "checkout", e)

    # ---------- lecturas ----------

    @staticmethod
    def list_unassigned_reservations(db: Session, tenant_id: int, branch_id: int) -> List[Transaction]:
        return (
            db.query(Transaction)
            .filter(
                Transaction.tenant_id == tenant_id,
                Transaction.branch_id == branch_id,
                Transaction.hotel_room_id.is_(None),
                Transaction.status.in_(UNASSIGNED_RESERVATION_STATUSES),
            )
            .order_by(Transaction.reserved_check_in_datetime.asc(), Transaction.created_at.asc())
            .all()
        )

    @staticmethod
    def get_active_transaction_for_room(db: Session, tenant_id: int, branch_id: int, room_id: int) -> Optional[Transaction]:
        room = (
            db.query(Room)
            .filter(Room.id == room_id, Room.tenant_id == tenant_id, Room.branch_id == branch_id)
            .first()
        )
        if not room or room.transaction_id is None:
            return None
        return (
            db.query(Transaction)
            .filter(
                Transaction.id == room.transaction_id,
                Transaction.tenant_id == tenant_id,
                Transaction.branch_id == branch_id,
            )
            .first()
        )

    @staticmethod
    def get_transaction_details(db: Session, tenant_id: int, branch_id: int, transaction_id: int) -> Optional[Transaction]:
        return (
            db.query(Transaction)
            .filter(
                Transaction.id == transaction_id,
                Transaction.tenant_id == tenant_id,
                Transaction.branch_id == branch_id,
            )
            .first()
        )
