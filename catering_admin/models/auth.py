"""Auth request and response models with validation.

Field names are snake_case in Python and camelCase on the wire; request
bodies accept either spelling.
"""

import re
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from catering_admin.models.user import AdminUser, Role

_USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+$")
# At most 20 characters, the width of the mobile column
_MOBILE_PATTERN = re.compile(r"^\+?[0-9][0-9 -]{5,17}[0-9]$")


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_username(v: str) -> str:
    if not _USERNAME_PATTERN.match(v):
        raise ValueError(
            "Username must contain only alphanumeric characters, "
            "dots, underscores, or hyphens"
        )
    return v


def _lower_email(v: str) -> str:
    return v.lower()


def _check_mobile(v: str) -> str:
    v = v.strip()
    if not _MOBILE_PATTERN.match(v):
        raise ValueError("Please provide a valid mobile number")
    return v


def _check_password(v: str) -> str:
    if not v.strip():
        raise ValueError("Password cannot be empty or whitespace only")
    return v


class ProfileFields(CamelModel):
    """Optional profile attributes shared by registration and updates."""

    profile_pic: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=500)
    country: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    city: Optional[str] = Field(default=None, max_length=100)


class RegisterRequest(ProfileFields):
    """New admin account registration.

    Attributes:
        name: Display name
        email: Unique email, normalised to lower-case
        username: Unique login name
        mobile: Unique mobile number
        password: Plain-text password (8-72 chars)
        confirm_password: Must equal ``password``
        role: Requested role, defaults to sub-admin
    """

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=100)
    mobile: str = Field(..., max_length=20)
    password: str = Field(..., min_length=8, max_length=72)
    confirm_password: str
    role: Role = Role.SUB_ADMIN

    normalize_username = field_validator("username")(_check_username)
    normalize_email = field_validator("email")(_lower_email)
    normalize_mobile = field_validator("mobile")(_check_mobile)
    password_not_empty = field_validator("password")(_check_password)


class LoginRequest(CamelModel):
    """Login with any one of email, username or mobile."""

    email_or_username_or_mobile: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=72)


class RefreshRequest(CamelModel):
    """Request to exchange a refresh token for a new token pair."""

    refresh_token: str = Field(..., min_length=1)


class UpdateUserRequest(ProfileFields):
    """Admin edit of an existing account.

    All fields are optional; only provided fields are updated.
    """

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    username: Optional[str] = Field(default=None, min_length=3, max_length=100)
    mobile: Optional[str] = Field(default=None, max_length=20)
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(default=None, min_length=8, max_length=72)

    @field_validator("username")
    @classmethod
    def username_valid_chars(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_username(v)

    @field_validator("email")
    @classmethod
    def email_lowercase(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _lower_email(v)

    @field_validator("mobile")
    @classmethod
    def mobile_valid(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_mobile(v)

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_password(v)


class UpdateRoleRequest(CamelModel):
    """Change an account's role."""

    role: Role


class AdminUserSummary(CamelModel):
    """Public representation of an admin account (no secrets)."""

    id: UUID
    name: str
    email: str
    username: str
    mobile: str
    role: Role
    is_active: bool
    last_login: Optional[datetime] = None
    profile_pic: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: AdminUser) -> "AdminUserSummary":
        """Strip secrets from a stored account."""
        return cls.model_validate(
            user.model_dump(exclude={"password_hash", "refresh_token"})
        )


class UserData(CamelModel):
    admin_user: AdminUserSummary


class ApiResponse(CamelModel):
    """Common JSON envelope."""

    success: bool = True
    message: Optional[str] = None


class AuthResponse(ApiResponse):
    """Envelope carrying a token pair and, where relevant, the account."""

    token: str
    refresh_token: str
    data: Optional[UserData] = None


class UserResponse(ApiResponse):
    data: UserData


class UserListResponse(ApiResponse):
    data: List[AdminUserSummary]


class SessionResponse(ApiResponse):
    """Result of an optional-auth session check."""

    authenticated: bool
    data: Optional[UserData] = None
