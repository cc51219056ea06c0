"""
Notificaciones del tenant y registro de objetos perdidos por sucursal
"""
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.enums import EntityStatus, LostAndFoundStatus, NotificationStatus
from models.support import LostAndFoundItem, Notification
from models.tenant import Branch
from schemas.support import LostAndFoundCreate, LostAndFoundStatusUpdate, NotificationCreate
from services.activity_log_service import ActivityLogService
from utils.logging_utils import log_event
from utils.timezone import hotel_now_naive


class NotificationService:

    @staticmethod
    def create_notification(
        db: Session, tenant_id: int, user_id: int, payload: NotificationCreate
    ) -> Tuple[bool, str, Optional[Notification]]:
        try:
            if payload.target_branch_id is not None:
                branch = db.query(Branch).filter(
                    Branch.id == payload.target_branch_id,
                    Branch.tenant_id == tenant_id,
                    Branch.status == EntityStatus.ACTIVE,
                ).first()
                if not branch:
                    db.rollback()
                    return False, "Target branch not found or not active.", None

            notification = Notification(
                tenant_id=tenant_id,
                message=payload.message,
                target_branch_id=payload.target_branch_id,
                creator_user_id=user_id,
            )
            db.add(notification)
            db.flush()
            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=payload.target_branch_id,
                actor_user_id=user_id,
                action_type="ADMIN_CREATED_NOTIFICATION",
                description="Notification sent to " + (
                    f"branch {payload.target_branch_id}." if payload.target_branch_id else "all branches."
                ),
                target_entity_type="Notification",
                target_entity_id=notification.id,
            )
            db.commit()
            db.refresh(notification)
            log_event("notifications", user_id, "Create notification", f"notification_id={notification.id}")
            return True, "Notification created successfully.", notification
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while creating notification: {e}"
            log_event("notifications", user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def list_for_tenant(db: Session, tenant_id: int, limit: int = 50, offset: int = 0) -> List[Notification]:
        return (
            db.query(Notification)
            .filter(Notification.tenant_id == tenant_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    @staticmethod
    def list_for_branch(
        db: Session, tenant_id: int, branch_id: int, unread_only: bool = False
    ) -> List[Notification]:
        """Notificaciones dirigidas a esta sucursal más las de todo el tenant"""
        query = db.query(Notification).filter(
            Notification.tenant_id == tenant_id,
            or_(Notification.target_branch_id == branch_id, Notification.target_branch_id.is_(None)),
        )
        if unread_only:
            query = query.filter(Notification.status == NotificationStatus.UNREAD)
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()

    @staticmethod
    def mark_as_read(
        db: Session, tenant_id: int, branch_id: int, notification_id: int, user_id: int
    ) -> Tuple[bool, str, Optional[Notification]]:
        try:
            notification = db.query(Notification).filter(
                Notification.id == notification_id,
                Notification.tenant_id == tenant_id,
                or_(Notification.target_branch_id == branch_id, Notification.target_branch_id.is_(None)),
            ).first()
            if not notification:
                db.rollback()
                return False, "Notification not found.", None
            if notification.status == NotificationStatus.READ:
                return True, "Notification already read.", notification

            notification.status = NotificationStatus.READ
            notification.read_at = datetime.utcnow()
            db.commit()
            db.refresh(notification)
            log_event("notifications", user_id, "Mark read", f"notification_id={notification.id}")
            return True, "Notification marked as read.", notification
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while updating notification: {e}"
            log_event("notifications", user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def delete_notification(db: Session, tenant_id: int, notification_id: int, user_id: int) -> Tuple[bool, str]:
        try:
            notification = db.query(Notification).filter(
                Notification.id == notification_id, Notification.tenant_id == tenant_id
            ).first()
            if not notification:
                db.rollback()
                return False, "Notification not found."

            db.delete(notification)
            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=notification.target_branch_id,
                actor_user_id=user_id,
                action_type="ADMIN_DELETED_NOTIFICATION",
                description=f"Notification {notification_id} deleted.",
                target_entity_type="Notification",
                target_entity_id=notification_id,
            )
            db.commit()
            log_event("notifications", user_id, "Delete notification", f"notification_id={notification_id}")
            return True, "Notification deleted successfully."
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while deleting notification: {e}"
            log_event("notifications", user_id, "Error", error_msg)
            return False, error_msg


class LostAndFoundService:

    @staticmethod
    def add_item(
        db: Session, tenant_id: int, branch_id: int, user_id: int, payload: LostAndFoundCreate
    ) -> Tuple[bool, str, Optional[LostAndFoundItem]]:
        try:
            item = LostAndFoundItem(
                tenant_id=tenant_id,
                branch_id=branch_id,
                reported_by_user_id=user_id,
                status=LostAndFoundStatus.FOUND,
                found_at=hotel_now_naive(),
                **payload.model_dump(),
            )
            db.add(item)
            db.flush()
            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=user_id,
                action_type="STAFF_LOGGED_LOST_ITEM",
                description=f"Item '{item.item_name}' logged as found.",
                target_entity_type="LostAndFoundItem",
                target_entity_id=item.id,
            )
            db.commit()
            db.refresh(item)
            log_event("lost_found", user_id, "Add item", f"item_id={item.id}")
            return True, "Item logged successfully.", item
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while logging item: {e}"
            log_event("lost_found", user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def update_status(
        db: Session, tenant_id: int, branch_id: int, item_id: int, user_id: int, payload: LostAndFoundStatusUpdate
    ) -> Tuple[bool, str, Optional[LostAndFoundItem]]:
        try:
            item = db.query(LostAndFoundItem).filter(
                LostAndFoundItem.id == item_id,
                LostAndFoundItem.tenant_id == tenant_id,
                LostAndFoundItem.branch_id == branch_id,
            ).first()
            if not item:
                db.rollback()
                return False, "Item not found.", None

            item.status = payload.status
            if payload.status == LostAndFoundStatus.CLAIMED:
                item.claimed_at = hotel_now_naive()
                item.claimed_by_details = payload.claimed_by_details
            elif payload.status == LostAndFoundStatus.DISPOSED:
                item.disposed_details = payload.disposed_details

            ActivityLogService.record(
                db,
                tenant_id=tenant_id,
                branch_id=branch_id,
                actor_user_id=user_id,
                action_type="STAFF_UPDATED_LOST_ITEM",
                description=f"Item '{item.item_name}' marked {payload.status.value}.",
                target_entity_type="LostAndFoundItem",
                target_entity_id=item.id,
            )
            db.commit()
            db.refresh(item)
            log_event("lost_found", user_id, "Update item", f"item_id={item.id}, status={payload.status.value}")
            return True, "Item updated successfully.", item
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while updating item: {e}"
            log_event("lost_found", user_id, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def list_for_branch(
        db: Session, tenant_id: int, branch_id: int, status: Optional[LostAndFoundStatus] = None
    ) -> List[LostAndFoundItem]:
        query = db.query(LostAndFoundItem).filter(
            LostAndFoundItem.tenant_id == tenant_id, LostAndFoundItem.branch_id == branch_id
        )
        if status is not None:
            query = query.filter(LostAndFoundItem.status == status)
        return query.order_by(LostAndFoundItem.found_at.desc(), LostAndFoundItem.id.desc()).all()

    @staticmethod
    def list_for_tenant(db: Session, tenant_id: int, status: Optional[LostAndFoundStatus] = None) -> List[LostAndFoundItem]:
        query = db.query(LostAndFoundItem).filter(LostAndFoundItem.tenant_id == tenant_id)
        if status is not None:
            query = query.filter(LostAndFoundItem.status == status)
        return query.order_by(LostAndFoundItem.found_at.desc(), LostAndFoundItem.id.desc()).all()
