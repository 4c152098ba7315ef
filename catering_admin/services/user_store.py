"""Persistence for admin accounts.

The session manager and user service depend only on the ``AdminUserStore``
protocol; ``PostgresAdminUserStore`` is the asyncpg-backed implementation.

Writes touch only the columns they change; an account is never rewritten from
a copy read earlier.
"""

from datetime import datetime
from typing import Any, Optional, Protocol
from uuid import UUID

import asyncpg
import structlog

from catering_admin.database import get_pool
from catering_admin.errors import DuplicateUserError
from catering_admin.models.user import AdminUser, Role

logger = structlog.get_logger(__name__)

ADMIN_USER_COLUMNS = (
    "id",
    "name",
    "email",
    "username",
    "mobile",
    "password_hash",
    "role",
    "is_active",
    "refresh_token",
    "last_login",
    "profile_pic",
    "date_of_birth",
    "gender",
    "address",
    "country",
    "state",
    "city",
    "created_at",
    "updated_at",
)

# Columns an admin edit may change
UPDATABLE_COLUMNS = frozenset(ADMIN_USER_COLUMNS) - {"id", "created_at", "updated_at"}

_SELECT_COLUMNS = ", ".join(ADMIN_USER_COLUMNS)


class AdminUserStore(Protocol):
    """Capability the auth layer needs from account storage."""

    async def find_by_id(self, user_id: UUID) -> Optional[AdminUser]:
        ...

    async def find_one(
        self,
        *,
        email: Optional[str] = None,
        username: Optional[str] = None,
        mobile: Optional[str] = None,
        exclude_id: Optional[UUID] = None,
    ) -> Optional[AdminUser]:
        ...

    async def insert(self, user: AdminUser) -> AdminUser:
        ...

    async def update(self, user_id: UUID, changes: dict[str, Any]) -> Optional[AdminUser]:
        ...

    async def set_refresh_token(
        self,
        user_id: UUID,
        refresh_token: Optional[str],
        *,
        last_login: Optional[datetime] = None,
    ) -> Optional[AdminUser]:
        ...

    async def rotate_refresh_token(
        self, user_id: UUID, current: str, new: str
    ) -> Optional[AdminUser]:
        ...

    async def list_users(self) -> list[AdminUser]:
        ...

    async def delete(self, user_id: UUID) -> bool:
        ...


def _row_to_user(row) -> AdminUser:
    return AdminUser(**{column: row[column] for column in ADMIN_USER_COLUMNS})


def _db_value(value: Any) -> Any:
    return value.value if isinstance(value, Role) else value


class PostgresAdminUserStore:
    """Admin accounts in the ``admin_users`` table."""

    async def find_by_id(self, user_id: UUID) -> Optional[AdminUser]:
        """Get an account by UUID.

        Args:
            user_id: Account UUID

        Returns:
            AdminUser or None if not found
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {_SELECT_COLUMNS} FROM admin_users WHERE id = $1",
                user_id,
            )

        return None if row is None else _row_to_user(row)

    async def find_one(
        self,
        *,
        email: Optional[str] = None,
        username: Optional[str] = None,
        mobile: Optional[str] = None,
        exclude_id: Optional[UUID] = None,
    ) -> Optional[AdminUser]:
        """Get the first account matching ANY of the given identity fields.

        Args:
            email: Email to match (case-insensitive)
            username: Username to match
            mobile: Mobile number to match
            exclude_id: Account to ignore, used when checking edits for collisions

        Returns:
            AdminUser or None if nothing matches or no field was given
        """
        # Build OR clause dynamically for provided fields
        or_clauses = []
        params: list = []
        param_idx = 1

        if email is not None:
            or_clauses.append(f"LOWER(email) = LOWER(${param_idx})")
            params.append(email)
            param_idx += 1

        if username is not None:
            or_clauses.append(f"username = ${param_idx}")
            params.append(username)
            param_idx += 1

        if mobile is not None:
            or_clauses.append(f"mobile = ${param_idx}")
            params.append(mobile)
            param_idx += 1

        if not or_clauses:
            return None

        where = f"({' OR '.join(or_clauses)})"
        if exclude_id is not None:
            where += f" AND id <> ${param_idx}"
            params.append(exclude_id)

        query = f"""
            SELECT {_SELECT_COLUMNS}
            FROM admin_users
            WHERE {where}
            ORDER BY created_at ASC
            LIMIT 1
        """

        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(query, *params)

        return None if row is None else _row_to_user(row)

    async def insert(self, user: AdminUser) -> AdminUser:
        """Create a new account.

        Raises:
            DuplicateUserError: If email, username or mobile collides with another account
        """
        values = [_db_value(getattr(user, column)) for column in ADMIN_USER_COLUMNS]
        placeholders = ", ".join(f"${i}" for i in range(1, len(values) + 1))

        pool = await get_pool()

        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO admin_users ({_SELECT_COLUMNS})
                    VALUES ({placeholders})
                    RETURNING {_SELECT_COLUMNS}
                    """,
                    *values,
                )
        except asyncpg.exceptions.UniqueViolationError as e:
            logger.warning(
                "admin_user_unique_violation",
                user_id=str(user.id),
                constraint=getattr(e, "constraint_name", None),
            )
            raise DuplicateUserError() from e

        logger.info("admin_user_inserted", user_id=str(user.id))
        return _row_to_user(row)

    async def update(self, user_id: UUID, changes: dict[str, Any]) -> Optional[AdminUser]:
        """Change only the given columns of an existing account.

        Args:
            user_id: Account UUID
            changes: Column name to new value; must be in ``UPDATABLE_COLUMNS``

        Returns:
            Updated AdminUser, or None if the account does not exist

        Raises:
            ValueError: If a column cannot be updated
            DuplicateUserError: If a new email, username or mobile is taken
        """
        unknown = set(changes) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update columns: {sorted(unknown)}")

        set_clauses = []
        params: list = [user_id]
        param_idx = 2

        for column, value in changes.items():
            set_clauses.append(f"{column} = ${param_idx}")
            params.append(_db_value(value))
            param_idx += 1

        set_clauses.append("updated_at = NOW()")

        query = f"""
            UPDATE admin_users
            SET {', '.join(set_clauses)}
            WHERE id = $1
            RETURNING {_SELECT_COLUMNS}
        """

        pool = await get_pool()

        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(query, *params)
        except asyncpg.exceptions.UniqueViolationError as e:
            logger.warning(
                "admin_user_unique_violation",
                user_id=str(user_id),
                constraint=getattr(e, "constraint_name", None),
            )
            raise DuplicateUserError() from e

        return None if row is None else _row_to_user(row)

    async def set_refresh_token(
        self,
        user_id: UUID,
        refresh_token: Optional[str],
        *,
        last_login: Optional[datetime] = None,
    ) -> Optional[AdminUser]:
        """Store (or clear, with None) an account's refresh token.

        A new token is only stored on an active account. Clearing always
        applies.

        Returns:
            Updated AdminUser, or None if no matching account exists
        """
        set_clauses = ["refresh_token = $2", "updated_at = NOW()"]
        params: list = [user_id, refresh_token]
        if last_login is not None:
            set_clauses.append("last_login = $3")
            params.append(last_login)

        where = "id = $1"
        if refresh_token is not None:
            where += " AND is_active"

        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE admin_users
                SET {', '.join(set_clauses)}
                WHERE {where}
                RETURNING {_SELECT_COLUMNS}
                """,
                *params,
            )

        return None if row is None else _row_to_user(row)

    async def rotate_refresh_token(
        self, user_id: UUID, current: str, new: str
    ) -> Optional[AdminUser]:
        """Replace ``current`` with ``new`` only if ``current`` is still stored.

        Returns:
            Updated AdminUser, or None if the token was already replaced or
            cleared, or the account is gone or inactive
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE admin_users
                SET refresh_token = $3, updated_at = NOW()
                WHERE id = $1 AND refresh_token = $2 AND is_active
                RETURNING {_SELECT_COLUMNS}
                """,
                user_id,
                current,
                new,
            )

        return None if row is None else _row_to_user(row)

    async def list_users(self) -> list[AdminUser]:
        """Return all accounts, newest first."""
        pool = await get_pool()

        async with pool.acquire() as conn:
            rows = await conn.fetch(
                f"SELECT {_SELECT_COLUMNS} FROM admin_users ORDER BY created_at DESC"
            )

        return [_row_to_user(row) for row in rows]

    async def delete(self, user_id: UUID) -> bool:
        """Hard-delete an account.

        Returns:
            True if the account was deleted, False if not found
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            result = await conn.execute(
                "DELETE FROM admin_users WHERE id = $1",
                user_id,
            )

        deleted = result == "DELETE 1"

        if deleted:
            logger.info("admin_user_deleted", user_id=str(user_id))
        else:
            logger.warning("admin_user_delete_not_found", user_id=str(user_id))

        return deleted
