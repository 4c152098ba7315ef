"""Admin account management: registration, login and admin edits."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

import bcrypt
import structlog

from catering_admin.errors import (
    BadRequestError,
    DuplicateUserError,
    InvalidCredentialsError,
    NotFoundError,
    UserInactiveError,
)
from catering_admin.models.auth import RegisterRequest, UpdateUserRequest
from catering_admin.models.user import AdminUser, Role, TokenPair
from catering_admin.services.session_manager import SessionManager
from catering_admin.services.user_store import AdminUserStore

logger = structlog.get_logger(__name__)

_PROFILE_FIELDS = (
    "profile_pic",
    "date_of_birth",
    "gender",
    "address",
    "country",
    "state",
    "city",
)


class AdminUserService:
    """Service for admin account operations."""

    def __init__(
        self,
        store: AdminUserStore,
        sessions: SessionManager,
        bcrypt_rounds: int = 12,
    ):
        self.store = store
        self.sessions = sessions
        self.bcrypt_rounds = bcrypt_rounds

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain-text password to hash

        Returns:
            Bcrypt hash string
        """
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Verify a password against a bcrypt hash."""
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))

    async def register(self, request: RegisterRequest) -> tuple[AdminUser, TokenPair]:
        """Create an account and start its first session.

        Args:
            request: Validated registration details

        Returns:
            Tuple of (created AdminUser, TokenPair)

        Raises:
            BadRequestError: If the passwords do not match
            DuplicateUserError: If email, username or mobile is taken
        """
        if request.password != request.confirm_password:
            raise BadRequestError("Passwords do not match")

        existing = await self.store.find_one(
            email=request.email,
            username=request.username,
            mobile=request.mobile,
        )
        if existing is not None:
            raise DuplicateUserError()

        now = datetime.now(timezone.utc)
        user = AdminUser(
            id=uuid4(),
            name=request.name,
            email=request.email,
            username=request.username,
            mobile=request.mobile,
            password_hash=self.hash_password(request.password),
            role=request.role,
            is_active=True,
            created_at=now,
            updated_at=now,
            **{field: getattr(request, field) for field in _PROFILE_FIELDS},
        )

        user = await self.store.insert(user)
        user, pair = await self.sessions.start_session(user)

        logger.info(
            "admin_user_registered",
            user_id=str(user.id),
            username=user.username,
            role=user.role.value,
        )
        return user, pair

    async def login(self, identifier: str, password: str) -> tuple[AdminUser, TokenPair]:
        """Check credentials and start a session.

        Args:
            identifier: Email, username or mobile number
            password: Plain-text password

        Returns:
            Tuple of (AdminUser, TokenPair)

        Raises:
            InvalidCredentialsError: Unknown account or wrong password
            UserInactiveError: Account is deactivated
        """
        identifier = identifier.strip()
        user = await self.store.find_one(
            email=identifier.lower(),
            username=identifier,
            mobile=identifier,
        )

        if user is None or not self.verify_password(password, user.password_hash):
            logger.info("login_failed")
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.info("login_rejected_inactive", user_id=str(user.id))
            raise UserInactiveError()

        user, pair = await self.sessions.start_session(
            user, last_login=datetime.now(timezone.utc)
        )

        logger.info("user_logged_in", user_id=str(user.id), username=user.username)
        return user, pair

    async def logout(self, user: AdminUser) -> None:
        """End the account's session."""
        await self.sessions.end_session(user)
        logger.info("user_logged_out", user_id=str(user.id))

    async def get_user(self, user_id: UUID) -> AdminUser:
        """Get an account or raise NotFoundError."""
        user = await self.store.find_by_id(user_id)
        if user is None:
            raise NotFoundError()
        return user

    async def list_users(self) -> list[AdminUser]:
        return await self.store.list_users()

    async def update_user(self, user_id: UUID, request: UpdateUserRequest) -> AdminUser:
        """Apply an admin edit to an account.

        Only fields present in the request are changed. Deactivating an
        account also drops its refresh token.

        Raises:
            NotFoundError: If the account does not exist
            DuplicateUserError: If a new email, username or mobile is taken
        """
        await self.get_user(user_id)

        if request.email or request.username or request.mobile:
            clash = await self.store.find_one(
                email=request.email,
                username=request.username,
                mobile=request.mobile,
                exclude_id=user_id,
            )
            if clash is not None:
                raise DuplicateUserError()

        changes = request.model_dump(exclude_unset=True, exclude={"password"})
        # Required columns cannot be cleared
        for field in ("name", "email", "username", "mobile", "role", "is_active"):
            if field in changes and changes[field] is None:
                del changes[field]

        if request.password is not None:
            changes["password_hash"] = self.hash_password(request.password)

        if changes.get("is_active") is False:
            changes["refresh_token"] = None

        user = await self.store.update(user_id, changes)
        if user is None:
            raise NotFoundError()

        logger.info(
            "admin_user_updated",
            user_id=str(user_id),
            fields_updated=sorted(k for k in changes if k != "password_hash"),
            credentials_reset="password_hash" in changes,
        )
        return user

    async def update_role(self, user_id: UUID, role: Role) -> AdminUser:
        """Change an account's role.

        Raises:
            NotFoundError: If the account does not exist
        """
        user = await self.store.update(user_id, {"role": Role(role)})
        if user is None:
            raise NotFoundError()
        logger.info("admin_user_role_updated", user_id=str(user_id), role=user.role.value)
        return user

    async def delete_user(self, user_id: UUID, acting_user: Optional[AdminUser]) -> None:
        """Delete an account. Admins cannot delete their own account.

        Raises:
            BadRequestError: If ``acting_user`` targets themselves
            NotFoundError: If the account does not exist
        """
        if acting_user is not None and acting_user.id == user_id:
            raise BadRequestError("You cannot delete your own account")

        if not await self.store.delete(user_id):
            raise NotFoundError()

        logger.info(
            "admin_user_deleted_by_admin",
            user_id=str(user_id),
            admin_id=str(acting_user.id) if acting_user else None,
        )
