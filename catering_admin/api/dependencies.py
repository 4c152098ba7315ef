"""FastAPI dependencies for authentication and authorization."""

from typing import Callable, Optional

from fastapi import Depends, Request

from catering_admin.config import get_settings
from catering_admin.models.user import AdminUser, Role
from catering_admin.services.session_manager import SessionManager
from catering_admin.services.user_service import AdminUserService
from catering_admin.services.user_store import AdminUserStore, PostgresAdminUserStore


def get_user_store() -> AdminUserStore:
    """Account storage backing the auth layer."""
    return PostgresAdminUserStore()


def get_session_manager(
    store: AdminUserStore = Depends(get_user_store),
) -> SessionManager:
    """Session manager built from the configured signing secrets."""
    return SessionManager(get_settings().token_config(), store)


def get_user_service(
    store: AdminUserStore = Depends(get_user_store),
    sessions: SessionManager = Depends(get_session_manager),
) -> AdminUserService:
    return AdminUserService(store, sessions, bcrypt_rounds=get_settings().bcrypt_rounds)


async def get_current_user(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
) -> AdminUser:
    """Resolve the Bearer token to an active account.

    The account is also attached to ``request.state.user`` for downstream
    handlers.

    Raises:
        UnauthorizedError: Missing/invalid token, unknown or inactive account
    """
    user = await sessions.authenticate(request.headers.get("Authorization"))
    request.state.user = user
    return user


async def get_optional_user(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
) -> Optional[AdminUser]:
    """Resolve the Bearer token if there is a valid one; never fails."""
    user = await sessions.optional_authenticate(request.headers.get("Authorization"))
    request.state.user = user
    return user


def require_roles(*roles: Role | str) -> Callable:
    """Build a dependency admitting only accounts with one of ``roles``.

    Role strings are parsed immediately, so a misspelt role fails at import
    time rather than silently locking everyone out.

    Raises:
        ValueError: If a role is not a valid Role
        ForbiddenError: (from the dependency) if the account's role is not allowed
    """
    allowed = tuple(Role(role) for role in roles)
    if not allowed:
        raise ValueError("require_roles needs at least one role")

    async def _require_roles(
        current_user: AdminUser = Depends(get_current_user),
        sessions: SessionManager = Depends(get_session_manager),
    ) -> AdminUser:
        return sessions.authorize(current_user, allowed)

    return _require_roles


require_admin = require_roles(Role.ADMIN)
require_staff_admin = require_roles(Role.ADMIN, Role.SUB_ADMIN)
