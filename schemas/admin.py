from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, EmailStr, Field, ConfigDict, model_validator

from models.enums import EntityStatus, UserRole


# ===== TENANTS =====

class TenantCreate(BaseModel):
    tenant_name: str = Field(..., min_length=1, max_length=255)
    tenant_address: Optional[str] = Field(None, max_length=1000)
    tenant_email: Optional[EmailStr] = None
    tenant_contact_info: Optional[str] = Field(None, max_length=100)
    max_branch_count: Optional[int] = Field(None, ge=1)
    max_user_count: Optional[int] = Field(None, ge=1)


class TenantUpdate(BaseModel):
    tenant_name: Optional[str] = Field(None, min_length=1, max_length=255)
    tenant_address: Optional[str] = Field(None, max_length=1000)
    tenant_email: Optional[EmailStr] = None
    tenant_contact_info: Optional[str] = Field(None, max_length=100)
    max_branch_count: Optional[int] = Field(None, ge=1)
    max_user_count: Optional[int] = Field(None, ge=1)
    status: Optional[EntityStatus] = None


class TenantRead(BaseModel):
    id: int
    tenant_name: str
    tenant_address: Optional[str] = None
    tenant_email: Optional[str] = None
    tenant_contact_info: Optional[str] = None
    max_branch_count: int
    max_user_count: int
    status: EntityStatus
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ===== SUCURSALES =====

class BranchCreate(BaseModel):
    branch_name: str = Field(..., min_length=1, max_length=255)
    branch_code: str = Field(..., min_length=1, max_length=50)
    branch_address: Optional[str] = Field(None, max_length=1000)
    contact_number: Optional[str] = Field(None, max_length=100)
    email_address: Optional[EmailStr] = None


class BranchUpdate(BaseModel):
    branch_name: Optional[str] = Field(None, min_length=1, max_length=255)
    branch_address: Optional[str] = Field(None, max_length=1000)
    contact_number: Optional[str] = Field(None, max_length=100)
    email_address: Optional[EmailStr] = None
    status: Optional[EntityStatus] = None


class BranchRead(BaseModel):
    id: int
    tenant_id: int
    branch_name: str
    branch_code: str
    branch_address: Optional[str] = None
    contact_number: Optional[str] = None
    email_address: Optional[str] = None
    status: EntityStatus
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ===== USUARIOS =====

class UserCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6, max_length=72)
    email: Optional[EmailStr] = None
    role: UserRole = UserRole.STAFF
    tenant_id: Optional[int] = Field(None, gt=0)
    tenant_branch_id: Optional[int] = Field(None, gt=0)

    @model_validator(mode="after")
    def tenant_required_for_tenant_roles(self):
        if self.role != UserRole.SYSAD and self.tenant_id is None:
            raise ValueError("tenant_id is required for admin, staff and housekeeping users")
        if self.role in (UserRole.STAFF, UserRole.HOUSEKEEPING) and self.tenant_branch_id is None:
            raise ValueError("tenant_branch_id is required for branch users")
        return self


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    tenant_branch_id: Optional[int] = Field(None, gt=0)
    status: Optional[EntityStatus] = None


class PasswordReset(BaseModel):
    new_password: str = Field(..., min_length=6, max_length=72)


class UserRead(BaseModel):
    id: int
    first_name: str
    last_name: str
    username: str
    email: Optional[str] = None
    role: UserRole
    tenant_id: Optional[int] = None
    tenant_branch_id: Optional[int] = None
    status: EntityStatus
    last_log_in: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ActivityLogRead(BaseModel):
    id: int
    tenant_id: Optional[int] = None
    branch_id: Optional[int] = None
    user_id: Optional[int] = None
    username: Optional[str] = None
    action_type: str
    description: Optional[str] = None
    target_entity_type: Optional[str] = None
    target_entity_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
