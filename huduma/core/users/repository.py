"""
User repository.
"""

from __future__ import annotations

from typing import Any, Optional

from huduma.common.constants import TypeMsg, UserType
from huduma.common.logger import log_info
from huduma.core.users.models import User
from huduma.infra.database import DatabaseManager

USER_COLUMNS = """
    id, phone_number, first_name, last_name, email, profile_image_url,
    user_type, location, is_verified, created_at, updated_at
"""


class UserRepository:
    """Users table access."""

    def __init__(self, db: DatabaseManager) -> None:
        """
        Args:
            db: Database manager (dependency injection)
        """
        self._db = db

    async def get_by_id(self, user_id: str) -> Optional[User]:
        row = await self._db.fetchrow(
            f"SELECT {USER_COLUMNS} FROM users WHERE id = $1",
            user_id,
        )
        return self._row_to_user(row) if row else None

    async def get_by_phone(self, phone_number: str) -> Optional[User]:
        row = await self._db.fetchrow(
            f"SELECT {USER_COLUMNS} FROM users WHERE phone_number = $1",
            phone_number,
        )
        return self._row_to_user(row) if row else None

    async def create(self, user: User) -> User:
        """
        Inserts a user.

        Args:
            user: User with a pre-generated id

        Returns:
            The stored user
        """
        row = await self._db.fetchrow(
            f"""
            INSERT INTO users (
                id, phone_number, first_name, last_name, email, profile_image_url,
                user_type, location, is_verified, created_at, updated_at
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
            RETURNING {USER_COLUMNS}
            """,
            user.id,
            user.phone_number,
            user.first_name,
            user.last_name,
            user.email,
            user.profile_image_url,
            user.user_type.value,
            user.location,
            user.is_verified,
            user.created_at,
            user.updated_at,
        )

        await log_info(f"User {user.id} created", type_msg=TypeMsg.DEBUG)

        return self._row_to_user(row)

    @staticmethod
    def _row_to_user(row: Any) -> User:
        """Maps a database row onto User."""
        return User(
            id=row["id"],
            phone_number=row["phone_number"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
            profile_image_url=row["profile_image_url"],
            user_type=UserType(row["user_type"]),
            location=row["location"],
            is_verified=row["is_verified"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
