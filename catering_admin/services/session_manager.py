"""Credential and session management for admin accounts.

Issues and verifies signed access/refresh JWTs, resolves bearer tokens to
active accounts, enforces role checks, and rotates refresh tokens. The
refresh token currently valid for an account is persisted on the account
itself, so there is exactly one live session per account.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional
from uuid import UUID, uuid4

import jwt
import structlog

from catering_admin.config import TokenConfig
from catering_admin.errors import (
    ForbiddenError,
    InvalidRefreshTokenError,
    InvalidTokenError,
    MissingTokenError,
    UnauthorizedError,
    UserInactiveError,
    UserNotFoundError,
)
from catering_admin.models.user import AdminUser, Role, TokenPair
from catering_admin.services.user_store import AdminUserStore

logger = structlog.get_logger(__name__)

BEARER_PREFIX = "Bearer "


class SessionManager:
    """Mints, verifies and rotates admin session tokens."""

    def __init__(self, config: TokenConfig, store: AdminUserStore):
        self.config = config
        self.store = store

    # ------------------------------------------------------------------
    # Token issuance / verification
    # ------------------------------------------------------------------

    def _sign(self, user_id: UUID, secret: str, ttl) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "id": str(user_id),
            "iat": now,
            "exp": now + ttl,
            # Two pairs minted in the same second must still differ
            "jti": uuid4().hex,
        }
        return jwt.encode(payload, secret, algorithm=self.config.algorithm)

    def _decode(self, token: str, secret: str) -> UUID:
        """Return the subject id of a token, raising jwt.InvalidTokenError on failure."""
        payload = jwt.decode(
            token,
            secret,
            algorithms=[self.config.algorithm],
            options={"require": ["exp", "id"]},
        )
        try:
            return UUID(str(payload["id"]))
        except ValueError as e:
            raise jwt.InvalidTokenError("Malformed subject id") from e

    def issue_token_pair(self, user_id: UUID) -> TokenPair:
        """Sign a new access/refresh pair for an account.

        The caller is responsible for persisting the refresh token; see
        ``start_session``.

        Args:
            user_id: Account UUID embedded as the ``id`` claim

        Returns:
            TokenPair signed with the access and refresh secrets respectively
        """
        pair = TokenPair(
            access_token=self._sign(
                user_id, self.config.access_secret, self.config.access_ttl
            ),
            refresh_token=self._sign(
                user_id, self.config.refresh_secret, self.config.refresh_ttl
            ),
        )
        logger.debug(
            "token_pair_issued",
            user_id=str(user_id),
            access_ttl_seconds=int(self.config.access_ttl.total_seconds()),
            refresh_ttl_seconds=int(self.config.refresh_ttl.total_seconds()),
        )
        return pair

    def verify_access(self, token: str) -> UUID:
        """Verify an access token's signature and expiry.

        Args:
            token: Encoded JWT

        Returns:
            The account UUID from the ``id`` claim

        Raises:
            InvalidTokenError: On bad signature, malformed token, or expiry
        """
        try:
            return self._decode(token, self.config.access_secret)
        except jwt.ExpiredSignatureError:
            logger.info("access_token_expired")
            raise InvalidTokenError()
        except jwt.InvalidTokenError as e:
            logger.info("access_token_invalid", reason=str(e))
            raise InvalidTokenError()

    def verify_refresh(self, token: str) -> UUID:
        """Verify a refresh token's signature and expiry.

        Raises:
            InvalidRefreshTokenError: On bad signature, malformed token, or expiry
        """
        try:
            return self._decode(token, self.config.refresh_secret)
        except jwt.InvalidTokenError as e:
            logger.info("refresh_token_invalid", reason=str(e))
            raise InvalidRefreshTokenError()

    # ------------------------------------------------------------------
    # Request guards
    # ------------------------------------------------------------------

    @staticmethod
    def extract_bearer_token(authorization: Optional[str]) -> str:
        """Pull the token out of an ``Authorization: Bearer <token>`` header.

        Raises:
            MissingTokenError: If the header is absent, lacks the ``Bearer ``
                prefix, or carries no token
        """
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            raise MissingTokenError()

        token = authorization[len(BEARER_PREFIX):].strip()
        if not token:
            raise MissingTokenError()
        return token

    async def authenticate(self, authorization: Optional[str]) -> AdminUser:
        """Resolve an Authorization header to an active account.

        Args:
            authorization: Raw ``Authorization`` header value, if any

        Returns:
            The authenticated AdminUser

        Raises:
            MissingTokenError: No usable bearer token
            InvalidTokenError: Token fails verification
            UserNotFoundError: Account no longer exists
            UserInactiveError: Account is deactivated
        """
        token = self.extract_bearer_token(authorization)
        user_id = self.verify_access(token)

        user = await self.store.find_by_id(user_id)
        if user is None:
            logger.warning("authenticated_user_missing", user_id=str(user_id))
            raise UserNotFoundError()

        if not user.is_active:
            logger.warning("authenticated_user_inactive", user_id=str(user_id))
            raise UserInactiveError()

        return user

    def authorize(self, user: AdminUser, allowed_roles: Iterable[Role]) -> AdminUser:
        """Require the account's role to be one of ``allowed_roles``.

        Raises:
            ForbiddenError: If the role is not permitted
        """
        allowed = frozenset(Role(role) for role in allowed_roles)
        if user.role not in allowed:
            logger.warning(
                "role_not_authorized",
                user_id=str(user.id),
                role=user.role.value,
                allowed_roles=sorted(r.value for r in allowed),
            )
            raise ForbiddenError(user.role.value)
        return user

    async def optional_authenticate(
        self, authorization: Optional[str]
    ) -> Optional[AdminUser]:
        """Like ``authenticate`` but never fails.

        Returns:
            The active AdminUser, or None for a missing, invalid or stale token
            and for any lookup failure
        """
        if not authorization:
            return None

        try:
            return await self.authenticate(authorization)
        except UnauthorizedError as e:
            logger.debug("optional_auth_skipped", reason=type(e).__name__)
        except Exception as e:
            logger.warning("optional_auth_failed", error=str(e))
        return None

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def start_session(
        self, user: AdminUser, *, last_login: Optional[datetime] = None
    ) -> tuple[AdminUser, TokenPair]:
        """Issue a pair and persist its refresh token on the account.

        Any refresh token issued earlier for the account stops working.

        Args:
            user: Account to start the session for
            last_login: Login time to record alongside the token

        Returns:
            Tuple of (stored AdminUser, TokenPair)

        Raises:
            UserNotFoundError: The account was deleted meanwhile
            UserInactiveError: The account was deactivated meanwhile
        """
        pair = self.issue_token_pair(user.id)
        stored = await self.store.set_refresh_token(
            user.id, pair.refresh_token, last_login=last_login
        )
        if stored is None:
            await self._raise_unavailable(user.id)

        logger.info("session_started", user_id=str(user.id))
        return stored, pair

    async def end_session(self, user: AdminUser) -> Optional[AdminUser]:
        """Forget the account's refresh token so it can no longer be exchanged.

        Returns:
            The stored AdminUser, or None if the account no longer exists
        """
        stored = await self.store.set_refresh_token(user.id, None)
        logger.info("session_ended", user_id=str(user.id), found=stored is not None)
        return stored

    async def refresh(self, refresh_token: str) -> tuple[AdminUser, TokenPair]:
        """Exchange a refresh token for a new pair, rotating the stored token.

        The swap is a compare-and-set on the stored token: of two concurrent
        refreshes with the same token only one succeeds, and a token cleared
        by logout or deactivation in the meantime is not replaced.

        Args:
            refresh_token: The refresh token presented by the client

        Returns:
            Tuple of (AdminUser, new TokenPair)

        Raises:
            InvalidRefreshTokenError: Token fails verification, the account is
                gone, or the token is not the one currently stored
            UserInactiveError: The account has been deactivated
        """
        user_id = self.verify_refresh(refresh_token)

        user = await self.store.find_by_id(user_id)
        if user is None:
            logger.warning("refresh_token_user_missing", user_id=str(user_id))
            raise InvalidRefreshTokenError()

        if user.refresh_token is None or user.refresh_token != refresh_token:
            logger.warning("refresh_token_rejected", user_id=str(user_id))
            raise InvalidRefreshTokenError()

        if not user.is_active:
            logger.warning("refresh_token_user_inactive", user_id=str(user_id))
            raise UserInactiveError()

        pair = self.issue_token_pair(user_id)
        stored = await self.store.rotate_refresh_token(
            user_id, refresh_token, pair.refresh_token
        )
        if stored is None:
            logger.warning("refresh_token_rotation_lost", user_id=str(user_id))
            raise InvalidRefreshTokenError()

        logger.info("refresh_token_rotated", user_id=str(user_id))
        return stored, pair

    async def _raise_unavailable(self, user_id: UUID) -> None:
        if await self.store.find_by_id(user_id) is None:
            logger.warning("session_user_missing", user_id=str(user_id))
            raise UserNotFoundError()
        logger.warning("session_user_inactive", user_id=str(user_id))
        raise UserInactiveError()
