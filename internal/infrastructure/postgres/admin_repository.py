"""
PostgreSQL Admin Repository.
"""

from typing import Optional
from uuid import UUID

import asyncpg
from asyncpg import Pool

from internal.domain.admin import Admin
from internal.domain.errors import AdminAlreadyExistsError


ADMIN_COLUMNS = """
    id, email, password_hash, role, first_name, last_name, login_attempts,
    locked_until, last_login, last_activity, is_active, created_at, updated_at
"""


class PostgresAdminRepository:
    """PostgreSQL implementation of the Admin Repository."""

    def __init__(self, pool: Pool) -> None:
        self._pool = pool

    async def get_by_id(self, admin_id: UUID) -> Optional[Admin]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {ADMIN_COLUMNS} FROM admins WHERE id = $1",
                admin_id,
            )

            if not row:
                return None

            return self._row_to_entity(row)

    async def get_by_email(self, email: str) -> Optional[Admin]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {ADMIN_COLUMNS} FROM admins WHERE email = $1",
                email.strip().lower(),
            )

            if not row:
                return None

            return self._row_to_entity(row)

    async def count(self) -> int:
        async with self._pool.acquire() as conn:
            return await conn.fetchval("SELECT COUNT(*) FROM admins") or 0

    async def create(self, admin: Admin) -> Admin:
        """
        Create an admin account.

        Raises:
            AdminAlreadyExistsError: If the email is already registered.
        """
        async with self._pool.acquire() as conn:
            try:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO admins (
                        id, email, password_hash, role, first_name, last_name,
                        login_attempts, locked_until, last_login, last_activity,
                        is_active, created_at, updated_at
                    )
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13)
                    RETURNING {ADMIN_COLUMNS}
                    """,
                    admin.id,
                    admin.email,
                    admin.password_hash,
                    admin.role,
                    admin.first_name,
                    admin.last_name,
                    admin.login_attempts,
                    admin.locked_until,
                    admin.last_login,
                    admin.last_activity,
                    admin.is_active,
                    admin.created_at,
                    admin.updated_at,
                )
            except asyncpg.UniqueViolationError as e:
                raise AdminAlreadyExistsError(admin.email) from e

            return self._row_to_entity(row)

    async def save_login_state(self, admin: Admin) -> None:
        """
        Persist lockout and activity state after a login attempt.

        Args:
            admin: Admin whose counters were updated in memory.
        """
        async with self._pool.acquire() as conn:
            await conn.execute(
                """
                UPDATE admins
                SET login_attempts = $2,
                    locked_until = $3,
                    last_login = $4,
                    last_activity = $5,
                    updated_at = NOW()
                WHERE id = $1
                """,
                admin.id,
                admin.login_attempts,
                admin.locked_until,
                admin.last_login,
                admin.last_activity,
            )

    def _row_to_entity(self, row: asyncpg.Record) -> Admin:
        return Admin(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            role=row["role"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            login_attempts=row["login_attempts"],
            locked_until=row["locked_until"],
            last_login=row["last_login"],
            last_activity=row["last_activity"],
            is_active=row["is_active"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
