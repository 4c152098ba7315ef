"""Admin account and token models."""

from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class Role(str, Enum):
    """Admin privilege levels."""

    ADMIN = "admin"
    SUB_ADMIN = "sub-admin"
    MANAGER = "manager"


class AdminUser(BaseModel):
    """An admin account as stored, secrets included.

    Never returned to clients directly; see ``AdminUserSummary``.
    """

    id: UUID
    name: str
    email: str
    username: str
    mobile: str
    password_hash: str
    role: Role = Role.SUB_ADMIN
    is_active: bool = True
    refresh_token: Optional[str] = None
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


class TokenPair(BaseModel):
    """A freshly minted access/refresh token pair."""

    access_token: str
    refresh_token: str
