"""
Pydantic schemas for authentication endpoints.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator

from fitness_gh.core.enums import UserType


def _check_password_bytes(v: str) -> str:
    password_bytes = v.encode("utf-8")
    if len(password_bytes) > 72:
        raise ValueError("Password too long (bcrypt limit 72 bytes)")
    if len(password_bytes) < 8:
        raise ValueError("Password must be at least 8 characters")
    return v


class RegisterRequest(BaseModel):
    """Request schema for account registration."""
    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., min_length=8, description="Password (min 8 characters)")
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.]+$")
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, min_length=7, max_length=32)
    user_type: UserType = Field(default=UserType.MEMBER, description="Kind of account")
    gym_name: Optional[str] = Field(None, min_length=2, max_length=200, description="Creates a gym for GYM_OWNER accounts")

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """bcrypt only looks at the first 72 bytes."""
        return _check_password_bytes(v)

    @field_validator("user_type")
    @classmethod
    def no_self_service_admins(cls, v: UserType) -> UserType:
        if v == UserType.SUPER_ADMIN:
            raise ValueError("SUPER_ADMIN accounts cannot be self-registered")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "email": "ama.mensah@example.com",
                "password": "SecurePass123",
                "username": "ama_m",
                "first_name": "Ama",
                "last_name": "Mensah",
                "phone": "+233201234567",
                "user_type": "MEMBER",
            }
        }


class LoginRequest(BaseModel):
    """Request schema for login."""
    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., description="Account password")


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., description="Current password")
    new_password: str = Field(..., min_length=8, description="New password")

    @field_validator("new_password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        return _check_password_bytes(v)


class SendOtpRequest(BaseModel):
    email: EmailStr


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., pattern=r"^\d{6}$", description="6 digit code from the email")


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AccountResponse(BaseModel):
    id: int
    email: EmailStr
    phone: Optional[str] = None
    user_type: UserType
    email_verified: bool
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
