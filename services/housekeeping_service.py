"""
Seguimiento de housekeeping: cambios de estado de limpieza y su historial
"""
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from models.enums import CleaningStatus, EntityStatus, CLEANING_STATUS_TEXT, status_text
from models.hotel import Room
from models.logs import RoomCleaningLog
from utils.logging_utils import log_event


class HousekeepingService:

    @staticmethod
    def update_room_cleaning_status(
        db: Session,
        tenant_id: int,
        branch_id: int,
        room_id: int,
        new_status,
        user_id: int,
        notes: Optional[str] = None,
    ) -> Tuple[bool, str, Optional[dict]]:
        """
        Cambia el estado de limpieza y agrega un registro al historial en el mismo commit.

        Returns:
            (success, message, {"room": Room, "log": RoomCleaningLog})
        """
        try:
            status = CleaningStatus(new_status)
        except ValueError:
            return False, f"Invalid cleaning status value: {new_status}", None

        try:
            room = (
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
            if not room:
                db.rollback()
                return False, "Room not found or is not active.", None

            room.cleaning_status = status
            room.cleaning_notes = notes

            entry = RoomCleaningLog(
                room_id=room.id,
                tenant_id=tenant_id,
                branch_id=branch_id,
                status=status,
                notes=notes,
                user_id=user_id,
            )
            db.add(entry)
            db.commit()
            db.refresh(room)
            db.refresh(entry)

            log_event("housekeeping", user_id, "Update cleaning status", f"room_id={room.id}, status={status.value}")
            return (
                True,
                f"Room '{room.room_name}' cleaning status set to {status_text(CLEANING_STATUS_TEXT, status)}.",
                {"room": room, "log": entry},
            )

        except Exception as e:
            db.rollback()
            error_msg = f"Database error during cleaning status update: {e}"
            log_event("housekeeping", user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def list_cleaning_logs(
        db: Session,
        tenant_id: int,
        branch_id: int,
        room_id: int,
        limit: int = 50,
    ) -> List[RoomCleaningLog]:
        return (
            db.query(RoomCleaningLog)
            .filter(
                RoomCleaningLog.room_id == room_id,
                RoomCleaningLog.tenant_id == tenant_id,
                RoomCleaningLog.branch_id == branch_id,
            )
            .order_by(RoomCleaningLog.created_at.desc(), RoomCleaningLog.id.desc())
            .limit(limit)
            .all()
        )
