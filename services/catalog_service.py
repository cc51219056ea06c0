"""
Administración del catálogo de habitaciones y tarifas
"""
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.enums import CleaningStatus, EntityStatus, RoomAvailability
from models.hotel import Rate, Room
from schemas.rooms import RateCreate, RateUpdate, RoomCreate, RoomUpdate
from services.activity_log_service import ActivityLogService
from utils.logging_utils import log_event

DUPLICATE_ROOM_CODE_MESSAGE = "This room code is already in use for this branch."


def _scoped_rate_ids(db: Session, tenant_id: int, branch_id: int, rate_ids: List[int]) -> List[int]:
    """Ids de tarifas de la lista que existen y están activas en esta sucursal, en el orden original"""
    if not rate_ids:
        return []
    found = {
        r.id
        for r in db.query(Rate.id).filter(
            Rate.id.in_(rate_ids),
            Rate.tenant_id == tenant_id,
            Rate.branch_id == branch_id,
            Rate.status == EntityStatus.ACTIVE,
        )
    }
    return [rid for rid in rate_ids if rid in found]


class RateService:

    @staticmethod
    def create_rate(db: Session, tenant_id: int, branch_id: int, user_id: int, payload: RateCreate) -> Tuple[bool, str, Optional[Rate]]:
        try:
            rate = Rate(tenant_id=tenant_id, branch_id=branch_id, **payload.model_dump())
            db.add(rate)
            db.flush()
            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=user_id,
                action_type="ADMIN_CREATED_RATE",
                description=f"Rate '{rate.name}' created.",
                target_entity_type="Rate",
                target_entity_id=rate.id,
            )
            db.commit()
            db.refresh(rate)
            log_event("rates", user_id, "Create rate", f"rate_id={rate.id}")
            return True, "Rate created successfully.", rate
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while creating rate: {e}"
            log_event("rates", user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def update_rate(
        db: Session, tenant_id: int, branch_id: int, rate_id: int, user_id: int, payload: RateUpdate
    ) -> Tuple[bool, str, Optional[Rate]]:
        try:
            rate = db.query(Rate).filter(
                Rate.id == rate_id, Rate.tenant_id == tenant_id, Rate.branch_id == branch_id
            ).first()
            if not rate:
                db.rollback()
                return False, "Rate not found.", None

            for field, value in payload.model_dump(exclude_unset=True).items():
                setattr(rate, field, value)
            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=user_id,
                action_type="ADMIN_UPDATED_RATE",
                description=f"Rate '{rate.name}' updated.",
                target_entity_type="Rate",
                target_entity_id=rate.id,
                details={"updated_fields": sorted(payload.model_fields_set)},
            )
            db.commit()
            db.refresh(rate)
            log_event("rates", user_id, "Update rate", f"rate_id={rate.id}")
            return True, "Rate updated successfully.", rate
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while updating rate: {e}"
            log_event("rates", user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def archive_rate(db: Session, tenant_id: int, branch_id: int, rate_id: int, user_id: int) -> Tuple[bool, str, Optional[Rate]]:
        return RateService.update_rate(db, tenant_id, branch_id, rate_id, user_id, RateUpdate(status=EntityStatus.ARCHIVED))

    @staticmethod
    def list_rates_for_branch(db: Session, tenant_id: int, branch_id: int, include_archived: bool = False) -> List[Rate]:
        query = db.query(Rate).filter(Rate.tenant_id == tenant_id, Rate.branch_id == branch_id)
        if not include_archived:
            query = query.filter(Rate.status == EntityStatus.ACTIVE)
        return query.order_by(Rate.name.asc()).all()

    @staticmethod
    def active_rates_for_room(db: Session, tenant_id: int, branch_id: int, room_id: int) -> List[Rate]:
        """Tarifas de la habitación en su propio orden, omitiendo las archivadas"""
        room = db.query(Room).filter(
            Room.id == room_id, Room.tenant_id == tenant_id, Room.branch_id == branch_id
        ).first()
        if not room or not room.hotel_rate_ids:
            return []
        rates = {
            r.id: r
            for r in db.query(Rate).filter(
                Rate.id.in_(room.hotel_rate_ids),
                Rate.tenant_id == tenant_id,
                Rate.branch_id == branch_id,
                Rate.status == EntityStatus.ACTIVE,
            )
        }
        return [rates[rid] for rid in room.hotel_rate_ids if rid in rates]


class RoomService:

    @staticmethod
    def create_room(db: Session, tenant_id: int, branch_id: int, user_id: int, payload: RoomCreate) -> Tuple[bool, str, Optional[Room]]:
        try:
            exists = db.query(Room.id).filter(
                Room.tenant_id == tenant_id,
                Room.branch_id == branch_id,
                Room.room_code == payload.room_code,
            ).first()
            if exists:
                return False, DUPLICATE_ROOM_CODE_MESSAGE, None

            data = payload.model_dump()
            data["hotel_rate_ids"] = _scoped_rate_ids(db, tenant_id, branch_id, payload.hotel_rate_ids)
            room = Room(
                tenant_id=tenant_id,
                branch_id=branch_id,
                is_available=RoomAvailability.AVAILABLE,
                cleaning_status=CleaningStatus.CLEAN,
                **data,
            )
            db.add(room)
            db.flush()
            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=user_id,
                action_type="ADMIN_CREATED_ROOM",
                description=f"Room '{room.room_name}' ({room.room_code}) created.",
                target_entity_type="Room",
                target_entity_id=room.id,
            )
            db.commit()
            db.refresh(room)
            log_event("rooms", user_id, "Create room", f"room_id={room.id}, code={room.room_code}")
            return True, "Room created successfully.", room
        except IntegrityError:
            db.rollback()
            return False, DUPLICATE_ROOM_CODE_MESSAGE, None
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while creating room: {e}"
            log_event("rooms", user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def update_room(
        db: Session, tenant_id: int, branch_id: int, room_id: int, user_id: int, payload: RoomUpdate
    ) -> Tuple[bool, str, Optional[Room]]:
        """Solo campos de catálogo; disponibilidad y limpieza pertenecen al ciclo de reservas y a housekeeping"""
        try:
            room = db.query(Room).filter(
                Room.id == room_id, Room.tenant_id == tenant_id, Room.branch_id == branch_id
            ).first()
            if not room:
                db.rollback()
                return False, "Room not found.", None

            data = payload.model_dump(exclude_unset=True)
            if "hotel_rate_ids" in data:
                data["hotel_rate_ids"] = _scoped_rate_ids(db, tenant_id, branch_id, data["hotel_rate_ids"] or [])
            for field, value in data.items():
                setattr(room, field, value)

            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=user_id,
                action_type="ADMIN_UPDATED_ROOM",
                description=f"Room '{room.room_name}' updated.",
                target_entity_type="Room",
                target_entity_id=room.id,
                details={"updated_fields": sorted(data)},
            )
            db.commit()
            db.refresh(room)
            log_event("rooms", user_id, "Update room", f"room_id={room.id}")
            return True, "Room updated successfully.", room
        except IntegrityError:
            db.rollback()
            return False, DUPLICATE_ROOM_CODE_MESSAGE, None
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while updating room: {e}"
            log_event("rooms", user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def archive_room(db: Session, tenant_id: int, branch_id: int, room_id: int, user_id: int) -> Tuple[bool, str, Optional[Room]]:
        try:
            room = (
                db.query(Room)
                .filter(Room.id == room_id, Room.tenant_id == tenant_id, Room.branch_id == branch_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
            if not room:
                db.rollback()
                return False, "Room not found.", None
            if room.transaction_id is not None:
                db.rollback()
                return False, "Room has an active booking and cannot be archived.", None

            room.status = EntityStatus.ARCHIVED
            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=user_id,
                action_type="ADMIN_ARCHIVED_ROOM",
                description=f"Room '{room.room_name}' archived.",
                target_entity_type="Room",
                target_entity_id=room.id,
            )
            db.commit()
            db.refresh(room)
            log_event("rooms", user_id, "Archive room", f"room_id={room.id}")
            return True, "Room archived successfully.", room
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while archiving room: {e}"
            log_event("rooms", user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def list_rooms_for_branch(db: Session, tenant_id: int, branch_id: int, include_archived: bool = False) -> List[Room]:
        query = db.query(Room).filter(Room.tenant_id == tenant_id, Room.branch_id == branch_id)
        if not include_archived:
            query = query.filter(Room.status == EntityStatus.ACTIVE)
        return query.order_by(Room.floor.asc(), Room.room_code.asc()).all()

    @staticmethod
    def list_available_rooms(db: Session, tenant_id: int, branch_id: int) -> List[Room]:
        """Habitaciones donde se puede ubicar a un huésped ahora: activas, libres y limpias"""
        return (
            db.query(Room)
            .filter(
                Room.tenant_id == tenant_id,
                Room.branch_id == branch_id,
                Room.status == EntityStatus.ACTIVE,
                Room.is_available == RoomAvailability.AVAILABLE,
                Room.cleaning_status == CleaningStatus.CLEAN,
            )
            .order_by(Room.room_code.asc())
            .all()
        )
