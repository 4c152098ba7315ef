"""Admin account management endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends
import structlog

from catering_admin.api.dependencies import (
    get_user_service,
    require_admin,
    require_staff_admin,
)
from catering_admin.models.auth import (
    AdminUserSummary,
    ApiResponse,
    UpdateRoleRequest,
    UpdateUserRequest,
    UserData,
    UserListResponse,
    UserResponse,
)
from catering_admin.models.user import AdminUser
from catering_admin.services.user_service import AdminUserService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Admin users"])


@router.get("/users", response_model_exclude_none=True)
async def list_users(
    admin: AdminUser = Depends(require_staff_admin),
    users: AdminUserService = Depends(get_user_service),
) -> UserListResponse:
    """List all accounts, newest first (admin or sub-admin)."""
    accounts = await users.list_users()
    return UserListResponse(data=[AdminUserSummary.from_user(u) for u in accounts])


@router.get("/users/{user_id}", response_model_exclude_none=True)
async def get_user(
    user_id: UUID,
    admin: AdminUser = Depends(require_admin),
    users: AdminUserService = Depends(get_user_service),
) -> UserResponse:
    """Get one account (admin only).

    Raises:
        NotFoundError 404: If the account does not exist
    """
    user = await users.get_user(user_id)
    return UserResponse(data=UserData(admin_user=AdminUserSummary.from_user(user)))


@router.put("/users/{user_id}", response_model_exclude_none=True)
async def update_user(
    user_id: UUID,
    request: UpdateUserRequest,
    admin: AdminUser = Depends(require_admin),
    users: AdminUserService = Depends(get_user_service),
) -> UserResponse:
    """Edit an account (admin only).

    Raises:
        NotFoundError 404: If the account does not exist
        DuplicateUserError 409: If the new email, username or mobile is taken
    """
    user = await users.update_user(user_id, request)

    logger.info(
        "admin_updated_user",
        admin_id=str(admin.id),
        target_user_id=str(user_id),
    )

    return UserResponse(
        data=UserData(admin_user=AdminUserSummary.from_user(user)),
        message="User updated successfully",
    )


@router.delete("/users/{user_id}", response_model_exclude_none=True)
async def delete_user(
    user_id: UUID,
    admin: AdminUser = Depends(require_admin),
    users: AdminUserService = Depends(get_user_service),
) -> ApiResponse:
    """Delete an account (admin only).

    Admins cannot delete themselves to prevent lockout.

    Raises:
        BadRequestError 400: If the admin targets their own account
        NotFoundError 404: If the account does not exist
    """
    await users.delete_user(user_id, acting_user=admin)
    return ApiResponse(message="User deleted successfully")


@router.patch("/update-role/{user_id}", response_model_exclude_none=True)
async def update_role(
    user_id: UUID,
    request: UpdateRoleRequest,
    admin: AdminUser = Depends(require_admin),
    users: AdminUserService = Depends(get_user_service),
) -> UserResponse:
    """Change an account's role (admin only)."""
    user = await users.update_role(user_id, request.role)

    logger.info(
        "admin_updated_role",
        admin_id=str(admin.id),
        target_user_id=str(user_id),
        role=user.role.value,
    )

    return UserResponse(data=UserData(admin_user=AdminUserSummary.from_user(user)))
