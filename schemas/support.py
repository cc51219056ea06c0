from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.enums import (
    LostAndFoundStatus,
    NotificationLinkStatus,
    NotificationStatus,
    TicketPriority,
    TicketStatus,
)


# ===== NOTIFICACIONES =====

class NotificationCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    target_branch_id: Optional[int] = Field(None, gt=0, description="Omit to notify every branch")


class NotificationRead(BaseModel):
    id: int
    tenant_id: int
    message: str
    status: NotificationStatus
    target_branch_id: Optional[int] = None
    creator_user_id: Optional[int] = None
    transaction_id: Optional[int] = None
    transaction_link_status: NotificationLinkStatus
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ===== OBJETOS PERDIDOS =====

class LostAndFoundCreate(BaseModel):
    item_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    found_location: Optional[str] = Field(None, max_length=255)


class LostAndFoundStatusUpdate(BaseModel):
    status: LostAndFoundStatus
    claimed_by_details: Optional[str] = Field(None, max_length=2000)
    disposed_details: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def details_for_status(self):
        if self.status == LostAndFoundStatus.CLAIMED and not (self.claimed_by_details and self.claimed_by_details.strip()):
            raise ValueError("claimed_by_details is required when an item is claimed")
        if self.status == LostAndFoundStatus.DISPOSED and not (self.disposed_details and self.disposed_details.strip()):
            raise ValueError("disposed_details is required when an item is disposed")
        return self


class LostAndFoundRead(BaseModel):
    id: int
    tenant_id: int
    branch_id: int
    item_name: str
    description: Optional[str] = None
    found_location: Optional[str] = None
    reported_by_user_id: Optional[int] = None
    status: LostAndFoundStatus
    found_at: datetime
    claimed_at: Optional[datetime] = None
    claimed_by_details: Optional[str] = None
    disposed_details: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ===== TICKETS =====

class TicketCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=5000)
    priority: TicketPriority = TicketPriority.MEDIUM


class TicketUpdate(BaseModel):
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assigned_agent_id: Optional[int] = Field(None, gt=0)

    @model_validator(mode="before")
    def require_some_field(cls, data):
        if isinstance(data, dict) and data:
            return data
        raise ValueError("At least one field is required for an update")


class TicketCommentCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=5000)


class TicketComment(BaseModel):
    author: Optional[str] = None
    body: str
    created_at: str


class TicketRead(BaseModel):
    id: int
    ticket_code: str
    tenant_id: Optional[int] = None
    branch_id: Optional[int] = None
    user_id: Optional[int] = None
    author: Optional[str] = None
    subject: str
    description: str
    status: TicketStatus
    priority: TicketPriority
    assigned_agent_id: Optional[int] = None
    comments: List[TicketComment] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
