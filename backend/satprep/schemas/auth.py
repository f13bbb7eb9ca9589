"""
Pydantic schemas for authentication endpoints.
"""
from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from satprep.core.validators import (
    EmailValidator,
    PasswordValidator,
    StringSanitizer,
)
from satprep.schemas.base import CamelModel, SuccessResponse


def _check_password(password: str) -> str:
    is_valid, error = PasswordValidator.validate(password)
    if not is_valid:
        raise ValueError(error)
    return password


def _check_name(name: str) -> str:
    name = StringSanitizer.sanitize_name(name)
    if not name:
        raise ValueError("Name is required.")
    return name


class UserRegister(CamelModel):
    """Schema for user registration request."""

    name: str = Field(..., max_length=100, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(
        ...,
        description=f"User password (at least {PasswordValidator.MIN_LENGTH} characters)",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return EmailValidator.normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)


class UserLogin(CamelModel):
    """Schema for user login request.

    ``email`` also accepts a username.
    """

    email: str = Field(..., min_length=1, description="Email address or username")
    password: str = Field(..., min_length=1, description="User password")


class GoogleAuthRequest(CamelModel):
    """Schema for Google sign-in and account linking."""

    access_token: str = Field(..., min_length=1, description="Google OAuth access token")


class UserProfileUpdate(CamelModel):
    """Schema for updating the display name."""

    name: str = Field(..., max_length=100, description="New display name")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_name(v)


class ChangePasswordRequest(CamelModel):
    """Schema for changing the account password."""

    current_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(..., description="New password")

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return _check_password(v)


class UserResponse(CamelModel):
    """Public view of a user account."""

    id: int
    username: str
    name: str
    email: Optional[str] = None
    google_linked: bool = False
    created_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        """Build the public view from a User row."""
        return cls(
            id=user.id,
            username=user.username,
            name=user.name,
            email=user.email,
            google_linked=user.google_id is not None,
            created_at=user.created_at,
        )


class AuthResponse(SuccessResponse):
    """Token issued at registration or sign-in."""

    token: str = Field(..., description="Bearer token (7-day lifetime)")
    user: UserResponse


class UserEnvelope(SuccessResponse):
    """Single user payload."""

    user: UserResponse
