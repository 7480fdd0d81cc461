"""User and authentication Pydantic schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from campus_connect.models.enums import UserRole


class RegisterRequest(BaseModel):
    """Schema for creating an account. New accounts are always students."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    full_name: str | None = Field(None, max_length=255)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    """Response returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type (always 'bearer')")


class ProfileResponse(BaseModel):
    """Public view of a profile. ``is_admin`` is derived from ``role``."""

    id: uuid.UUID
    email: str
    full_name: str | None
    role: UserRole
    is_admin: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("role", mode="before")
    @classmethod
    def default_role(cls, v: UserRole | str | None) -> UserRole | str:
        """Profiles without a stored role are students."""
        return UserRole.STUDENT if v is None else v


class RoleUpdateRequest(BaseModel):
    role: UserRole = Field(..., description="New platform role for the target user")
