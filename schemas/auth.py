"""
Schemas Pydantic para autenticación
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.enums import LoginStatus, UserRole


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class TokenData(BaseModel):
    username: Optional[str] = None
    user_id: Optional[int] = None
    role: Optional[UserRole] = None
    tenant_id: Optional[int] = None
    branch_id: Optional[int] = None


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=72)


class LoginLogRead(BaseModel):
    id: int
    user_id: Optional[int] = None
    username_attempt: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    status: LoginStatus
    error_details: Optional[str] = None
    login_time: datetime

    model_config = ConfigDict(from_attributes=True)
