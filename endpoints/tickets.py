"""
Endpoints de tickets de soporte. Los usuarios de un tenant ven los tickets de su tenant; sysad ve todos
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session

from database import conexion
from models.enums import TicketStatus, UserRole
from models.user import User
from schemas.support import TicketCommentCreate, TicketCreate, TicketRead, TicketUpdate
from services.ticket_service import TicketService
from utils.dependencies import get_current_user, require_sysad
from utils.http_errors import raise_service_error


router = APIRouter(prefix="/tickets", tags=["Tickets"])


def _scope(user: User) -> Optional[int]:
    return None if user.role == UserRole.SYSAD else user.tenant_id


@router.post("", status_code=status.HTTP_201_CREATED)
def create_ticket(
    payload: TicketCreate,
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user),
):
    ok, msg, ticket = TicketService.create_ticket(db, current_user, payload)
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "ticket": TicketRead.model_validate(ticket)}


@router.get("", response_model=List[TicketRead])
def list_tickets(
    ticket_status: Optional[TicketStatus] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user),
):
    return TicketService.list_tickets(db, tenant_id=_scope(current_user), status=ticket_status, limit=limit, offset=offset)


@router.get("/{ticket_id}", response_model=TicketRead)
def get_ticket(
    ticket_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user),
):
    ticket = TicketService.get_ticket(db, ticket_id, _scope(current_user))
    if not ticket:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found.")
    return ticket


@router.post("/{ticket_id}/comments")
def add_comment(
    payload: TicketCommentCreate,
    ticket_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user),
):
    ok, msg, ticket = TicketService.add_ticket_comment(db, ticket_id, current_user, payload.body, _scope(current_user))
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "ticket": TicketRead.model_validate(ticket)}


@router.patch("/{ticket_id}")
def update_ticket(
    payload: TicketUpdate,
    ticket_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(require_sysad),
):
    ok, msg, ticket = TicketService.update_ticket(db, ticket_id, current_user, payload)
    if not ok:
        raise_service_error(msg)
    return {"success": True, "message": msg, "ticket": TicketRead.model_validate(ticket)}
