"""Models package exports."""

from catering_admin.models.auth import (
    AdminUserSummary,
    ApiResponse,
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    SessionResponse,
    UpdateRoleRequest,
    UpdateUserRequest,
    UserData,
    UserListResponse,
    UserResponse,
)
from catering_admin.models.user import AdminUser, Role, TokenPair

__all__ = [
    "AdminUser",
    "AdminUserSummary",
    "ApiResponse",
    "AuthResponse",
    "LoginRequest",
    "RefreshRequest",
    "RegisterRequest",
    "Role",
    "SessionResponse",
    "TokenPair",
    "UpdateRoleRequest",
    "UpdateUserRequest",
    "UserData",
    "UserListResponse",
    "UserResponse",
]
