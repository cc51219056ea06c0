"""
Tickets de soporte creados por usuarios de los tenants
"""
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.enums import TicketStatus, UserRole
from models.support import Ticket
from models.user import User
from schemas.support import TicketCreate, TicketUpdate
from utils.logging_utils import log_event
from utils.ticket_codes import increment_ticket_code


def _display_name(user: User) -> str:
    full_name = f"{user.first_name or ''} {user.last_name or ''}".strip()
    return full_name or user.username


def _next_ticket_code(db: Session) -> str:
    # Los códigos son de ancho fijo y en mayúsculas: el máximo lexicográfico es el último
    latest = db.query(Ticket.ticket_code).order_by(Ticket.ticket_code.desc()).first()
    return increment_ticket_code(latest[0] if latest else None)


class TicketService:

    @staticmethod
    def create_ticket(db: Session, user: User, payload: TicketCreate) -> Tuple[bool, str, Optional[Ticket]]:
        try:
            ticket = Ticket(
                ticket_code=_next_ticket_code(db),
                tenant_id=user.tenant_id,
                branch_id=user.tenant_branch_id,
                user_id=user.id,
                author=_display_name(user),
                subject=payload.subject,
                description=payload.description,
                priority=payload.priority,
                status=TicketStatus.OPEN,
                comments=[],
            )
            db.add(ticket)
            db.commit()
            db.refresh(ticket)
            log_event("tickets", user.username, "Create ticket", f"code={ticket.ticket_code}")
            return True, "Ticket created successfully.", ticket
        except IntegrityError:
            db.rollback()
            return False, "Ticket code collision, please retry.", None
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while creating ticket: {e}"
            log_event("tickets", user.username, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def get_ticket(db: Session, ticket_id: int, tenant_id: Optional[int] = None) -> Optional[Ticket]:
        """tenant_id restringe la búsqueda para usuarios del tenant; sysad pasa None"""
        query = db.query(Ticket).filter(Ticket.id == ticket_id)
        if tenant_id is not None:
            query = query.filter(Ticket.tenant_id == tenant_id)
        return query.first()

    @staticmethod
    def add_ticket_comment(
        db: Session, ticket_id: int, user: User, body: str, tenant_id: Optional[int] = None
    ) -> Tuple[bool, str, Optional[Ticket]]:
        try:
            ticket = TicketService.get_ticket(db, ticket_id, tenant_id)
            if not ticket:
                db.rollback()
                return False, "Ticket not found.", None
            if ticket.status == TicketStatus.CLOSED:
                db.rollback()
                return False, "Cannot comment on a closed ticket.", None

            ticket.comments.append({
                "author": _display_name(user),
                "body": body,
                "created_at": datetime.utcnow().isoformat(),
            })
            ticket.updated_at = datetime.utcnow()
            db.commit()
            db.refresh(ticket)
            log_event("tickets", user.username, "Comment", f"code={ticket.ticket_code}")
            return True, "Comment added successfully.", ticket
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while adding comment: {e}"
            log_event("tickets", user.username, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def update_ticket(
        db: Session, ticket_id: int, user: User, payload: TicketUpdate, tenant_id: Optional[int] = None
    ) -> Tuple[bool, str, Optional[Ticket]]:
        try:
            ticket = TicketService.get_ticket(db, ticket_id, tenant_id)
            if not ticket:
                db.rollback()
                return False, "Ticket not found.", None

            data = payload.model_dump(exclude_unset=True)
            if data.get("assigned_agent_id") is not None:
                agent = db.query(User).filter(
                    User.id == data["assigned_agent_id"], User.role == UserRole.SYSAD
                ).first()
                if not agent:
                    db.rollback()
                    return False, "Assigned agent must be a system administrator.", None
            for field, value in data.items():
                setattr(ticket, field, value)

            db.commit()
            db.refresh(ticket)
            log_event("tickets", user.username, "Update ticket", f"code={ticket.ticket_code}, fields={sorted(data)}")
            return True, "Ticket updated successfully.", ticket
        except Exception as e:
            db.rollback()
            error_msg = f"Database error while updating ticket: {e}"
            log_event("tickets", user.username, "Error", error_msg)
            return False, error_msg, None

    @staticmethod
    def list_tickets(
        db: Session,
        tenant_id: Optional[int] = None,
        status: Optional[TicketStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Ticket]:
        query = db.query(Ticket)
        if tenant_id is not None:
            query = query.filter(Ticket.tenant_id == tenant_id)
        if status is not None:
            query = query.filter(Ticket.status == status)
        return query.order_by(Ticket.created_at.desc(), Ticket.id.desc()).offset(offset).limit(limit).all()
