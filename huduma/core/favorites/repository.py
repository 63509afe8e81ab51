"""
Favorites repository.
"""

from __future__ import annotations

from typing import Any

from huduma.common.constants import UserType
from huduma.core.favorites.models import Favorite, FavoriteWithProvider
from huduma.core.users.models import UserSummary
from huduma.infra.database import DatabaseManager, affected_rows


class FavoriteRepository:
    """Favorites table access."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def list_for_customer(self, customer_id: str) -> list[FavoriteWithProvider]:
        rows = await self._db.fetch(
            """
            SELECT f.id, f.customer_id, f.provider_id, f.created_at,
                   u.first_name, u.last_name, u.profile_image_url, u.user_type
            FROM favorites f
            JOIN users u ON u.id = f.provider_id
            WHERE f.customer_id = $1
            ORDER BY f.created_at DESC
            """,
            customer_id,
        )
        return [
            FavoriteWithProvider(
                **self._row_to_favorite(row).model_dump(),
                provider=UserSummary(
                    id=row["provider_id"],
                    first_name=row["first_name"],
                    last_name=row["last_name"],
                    profile_image_url=row["profile_image_url"],
                    user_type=UserType(row["user_type"]),
                ),
            )
            for row in rows
        ]

    async def add(self, favorite: Favorite) -> Favorite:
        """
        Inserts the pair, or returns the existing row if it is already there.
        """
        row = await self._db.fetchrow(
            """
            WITH inserted AS (
                INSERT INTO favorites (id, customer_id, provider_id, created_at)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT (customer_id, provider_id) DO NOTHING
                RETURNING id, customer_id, provider_id, created_at
            )
            SELECT id, customer_id, provider_id, created_at FROM inserted
            UNION ALL
            SELECT id, customer_id, provider_id, created_at
            FROM favorites
            WHERE customer_id = $2 AND provider_id = $3
            LIMIT 1
            """,
            favorite.id,
            favorite.customer_id,
            favorite.provider_id,
            favorite.created_at,
        )
        return self._row_to_favorite(row)

    async def remove(self, customer_id: str, provider_id: str) -> int:
        status = await self._db.execute(
            "DELETE FROM favorites WHERE customer_id = $1 AND provider_id = $2",
            customer_id,
            provider_id,
        )
        return affected_rows(status)

    @staticmethod
    def _row_to_favorite(row: Any) -> Favorite:
        return Favorite(
            id=row["id"],
            customer_id=row["customer_id"],
            provider_id=row["provider_id"],
            created_at=row["created_at"],
        )
