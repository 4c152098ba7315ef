"""Error taxonomy shared by services and the HTTP boundary.

Every error carries the HTTP status and the public message the API returns.
Messages are what clients see; internal details go to the logs only.
"""

from typing import Dict, Optional


class AppError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    message: str = "Internal server error"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class BadRequestError(AppError):
    status_code = 400
    message = "Bad request"


class NotFoundError(AppError):
    status_code = 404
    message = "User not found"


class DuplicateUserError(AppError):
    status_code = 409
    message = "User with this email, username, or mobile already exists"


class UnauthorizedError(AppError):
    """Request could not be tied to an active admin account."""

    status_code = 401
    message = "Not authorized to access this route"
    headers = {"WWW-Authenticate": "Bearer"}


class MissingTokenError(UnauthorizedError):
    message = "Not authorized to access this route"


class InvalidTokenError(UnauthorizedError):
    message = "Token is invalid or expired"


class UserNotFoundError(UnauthorizedError):
    message = "User no longer exists"


class UserInactiveError(UnauthorizedError):
    message = "Your account has been deactivated"


class InvalidRefreshTokenError(UnauthorizedError):
    message = "Invalid refresh token"


class InvalidCredentialsError(UnauthorizedError):
    message = "Invalid credentials"


class ForbiddenError(AppError):
    """Authenticated user lacks the role a route requires."""

    status_code = 403
    message = "Not authorized to access this route"

    def __init__(self, role: Optional[str] = None):
        super().__init__(
            f"Role '{role}' is not authorized to access this route" if role else None
        )
