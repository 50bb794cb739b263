from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, model_validator

from shiftplan.core.enums import UserRole


class SignUpRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole = UserRole.ASSOCIATE
    manager_email: Optional[EmailStr] = None  # Required for associates

    @model_validator(mode="after")
    def validate_manager_email(self) -> "SignUpRequest":
        if self.role == UserRole.ASSOCIATE and not self.manager_email:
            raise ValueError("manager_email is required for associates")
        return self


class SignUpResponse(BaseModel):
    success: bool
    message: str
    user_id: UUID


class SignInRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    issued_at: datetime


class Session(BaseModel):
    """An authenticated session as decoded from the bearer token."""

    session_id: UUID
    user_id: UUID


class SessionContext(BaseModel):
    """Role Resolver output. role is None when no profile row could be read."""

    user_id: Optional[UUID] = None
    role: Optional[UserRole] = None
    manager_id: Optional[UUID] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER


class ManagerOption(BaseModel):
    id: UUID
    full_name: str
    email: EmailStr


class ManagerListResponse(BaseModel):
    managers: List[ManagerOption]
