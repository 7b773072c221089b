from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional, Literal


RoleType = Literal["super_admin", "partner_user"]


class AuthUser(BaseModel):
    """The signed-in principal as seen by endpoints."""

    id: str
    email: EmailStr
    role: RoleType
    partner_code: Optional[str] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == "super_admin"

    @classmethod
    def from_db_user(cls, user) -> "AuthUser":
        return cls(
            id=str(user.id),
            email=user.email,
            role=user.role,
            partner_code=user.partner_code,
        )


class SessionInfo(BaseModel):
    """An issued session token and when it stops being valid."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(SessionInfo):
    user: AuthUser


class UserCreate(BaseModel):
    """Out-of-band user provisioning (see scripts/create_user.py)."""

    email: EmailStr
    password: str = Field(..., min_length=8)
    role: RoleType = "partner_user"
    partner_code: Optional[str] = None
