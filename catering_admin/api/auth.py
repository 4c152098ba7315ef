"""Authentication API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from catering_admin.api.dependencies import (
    get_current_user,
    get_optional_user,
    get_session_manager,
    get_user_service,
)
from catering_admin.models.auth import (
    AdminUserSummary,
    ApiResponse,
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    SessionResponse,
    UserData,
    UserResponse,
)
from catering_admin.models.user import AdminUser, TokenPair
from catering_admin.services.session_manager import SessionManager
from catering_admin.services.user_service import AdminUserService

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _user_data(user: AdminUser) -> UserData:
    return UserData(admin_user=AdminUserSummary.from_user(user))


def _auth_response(user: AdminUser, pair: TokenPair) -> AuthResponse:
    """Envelope with a fresh token pair and the account it belongs to."""
    return AuthResponse(
        token=pair.access_token,
        refresh_token=pair.refresh_token,
        data=_user_data(user),
    )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model_exclude_none=True,
)
async def register(
    request: RegisterRequest,
    users: AdminUserService = Depends(get_user_service),
) -> AuthResponse:
    """Register a new admin account.

    Returns:
        AuthResponse with tokens and the created account

    Raises:
        BadRequestError 400: Passwords do not match
        DuplicateUserError 409: Email, username or mobile already in use
    """
    user, pair = await users.register(request)
    return _auth_response(user, pair)


@router.post("/login", response_model_exclude_none=True)
async def login(
    request: LoginRequest,
    users: AdminUserService = Depends(get_user_service),
) -> AuthResponse:
    """Login with email, username or mobile plus password.

    Raises:
        InvalidCredentialsError 401: Unknown account or wrong password
        UserInactiveError 401: Account is deactivated
    """
    user, pair = await users.login(request.email_or_username_or_mobile, request.password)
    return _auth_response(user, pair)


@router.post("/refresh-token", response_model_exclude_none=True)
async def refresh_token(
    request: RefreshRequest,
    sessions: SessionManager = Depends(get_session_manager),
) -> AuthResponse:
    """Exchange a refresh token for a new pair.

    Performs rotation: the presented token stops working once a new pair
    has been issued.

    Raises:
        InvalidRefreshTokenError 401: Token invalid, expired, or already rotated
    """
    _, pair = await sessions.refresh(request.refresh_token)
    return AuthResponse(token=pair.access_token, refresh_token=pair.refresh_token)


@router.get("/session", response_model_exclude_none=True)
async def session_status(
    current_user: Optional[AdminUser] = Depends(get_optional_user),
) -> SessionResponse:
    """Report whether the request carries a valid session.

    Never fails on a bad or missing token; used by the admin frontend to
    decide between the dashboard and the login page.
    """
    if current_user is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(authenticated=True, data=_user_data(current_user))


@router.get("/me", response_model_exclude_none=True)
async def get_me(current_user: AdminUser = Depends(get_current_user)) -> UserResponse:
    """Get the authenticated account."""
    return UserResponse(data=_user_data(current_user))


@router.post("/logout", response_model_exclude_none=True)
async def logout(
    current_user: AdminUser = Depends(get_current_user),
    users: AdminUserService = Depends(get_user_service),
) -> ApiResponse:
    """End the current session; the stored refresh token is discarded."""
    await users.logout(current_user)
    return ApiResponse(message="Logged out successfully")
