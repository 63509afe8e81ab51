"""
Review repository.
"""

from __future__ import annotations

from typing import Any, Optional

from huduma.common.constants import UserType
from huduma.core.reviews.models import RatingSummary, Review, ReviewWithCustomer
from huduma.core.users.models import UserSummary
from huduma.infra.database import DatabaseManager

REVIEW_COLUMNS = "id, job_id, customer_id, provider_id, rating, comment, created_at"


class ReviewRepository:
    """Reviews table access."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def create(self, review: Review) -> Review:
        row = await self._db.fetchrow(
            f"""
            INSERT INTO reviews (id, job_id, customer_id, provider_id, rating, comment, created_at)
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING {REVIEW_COLUMNS}
            """,
            review.id,
            review.job_id,
            review.customer_id,
            review.provider_id,
            review.rating,
            review.comment,
            review.created_at,
        )
        return self._row_to_review(row)

    async def get_by_job(self, job_id: str) -> Optional[Review]:
        row = await self._db.fetchrow(
            f"SELECT {REVIEW_COLUMNS} FROM reviews WHERE job_id = $1",
            job_id,
        )
        return self._row_to_review(row) if row else None

    async def list_for_provider(self, provider_id: str) -> list[ReviewWithCustomer]:
        """Newest first, with the reviewing customer."""
        rows = await self._db.fetch(
            """
            SELECT rv.id, rv.job_id, rv.customer_id, rv.provider_id, rv.rating,
                   rv.comment, rv.created_at,
                   u.first_name, u.last_name, u.profile_image_url, u.user_type
            FROM reviews rv
            JOIN users u ON u.id = rv.customer_id
            WHERE rv.provider_id = $1
            ORDER BY rv.created_at DESC
            """,
            provider_id,
        )
        return [
            ReviewWithCustomer(
                **self._row_to_review(row).model_dump(),
                customer=UserSummary(
                    id=row["customer_id"],
                    first_name=row["first_name"],
                    last_name=row["last_name"],
                    profile_image_url=row["profile_image_url"],
                    user_type=UserType(row["user_type"]),
                ),
            )
            for row in rows
        ]

    async def rating_summary(self, provider_id: str) -> RatingSummary:
        row = await self._db.fetchrow(
            """
            SELECT COALESCE(AVG(rating), 0) AS average_rating, COUNT(*) AS review_count
            FROM reviews
            WHERE provider_id = $1
            """,
            provider_id,
        )
        return RatingSummary(
            provider_id=provider_id,
            average_rating=round(float(row["average_rating"]), 2),
            review_count=row["review_count"],
        )

    @staticmethod
    def _row_to_review(row: Any) -> Review:
        return Review(
            id=row["id"],
            job_id=row["job_id"],
            customer_id=row["customer_id"],
            provider_id=row["provider_id"],
            rating=row["rating"],
            comment=row["comment"],
            created_at=row["created_at"],
        )
