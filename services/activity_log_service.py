"""
Escritura del log de actividad (auditoría)
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from models.logs import ActivityLog
from models.user import User


class ActivityLogService:
    """Auditoría de solo inserción. Los registros viajan en la transacción del llamador."""

    @staticmethod
    def record(
        db: Session,
        *,
        tenant_id: Optional[int],
        actor_user_id: Optional[int],
        action_type: str,
        description: str,
        branch_id: Optional[int] = None,
        target_entity_type: Optional[str] = None,
        target_entity_id=None,
        details: Optional[Dict[str, Any]] = None,
        username: Optional[str] = None,
    ) -> ActivityLog:
        """
        Agrega un registro de auditoría a la sesión sin hacer commit.
        El commit del llamador lo persiste junto con el cambio que describe;
        cualquier error acá se propaga y aborta ese cambio.
        """
        if username is None and actor_user_id:
            username = db.query(User.username).filter(User.id == actor_user_id).scalar()

        entry = ActivityLog(
            tenant_id=tenant_id,
            branch_id=branch_id,
            user_id=actor_user_id,
            username=username,
            action_type=action_type,
            description=description,
            target_entity_type=target_entity_type,
            target_entity_id=str(target_entity_id) if target_entity_id is not None else None,
            details=details or {},
        )
        db.add(entry)
        db.flush()
        return entry

    @staticmethod
    def list_for_tenant(
        db: Session,
        tenant_id: int,
        limit: int = 50,
        offset: int = 0,
        branch_id: Optional[int] = None,
    ) -> List[ActivityLog]:
        query = db.query(ActivityLog).filter(ActivityLog.tenant_id == tenant_id)
        if branch_id is not None:
            query = query.filter(ActivityLog.branch_id == branch_id)
        return (
            query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
