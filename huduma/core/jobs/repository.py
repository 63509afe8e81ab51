"""
Job repository.
"""

from __future__ import annotations

from typing import Any, Optional

from huduma.common.constants import JobStatus, PaymentStatus, TypeMsg, UserType
from huduma.common.logger import log_info
from huduma.core.jobs.models import Job
from huduma.infra.database import DatabaseManager

JOB_COLUMNS = """
    id, customer_id, provider_id, category_id, title, description, location,
    preferred_date, preferred_time, budget_min, budget_max, final_price,
    status, payment_status, created_at, updated_at
"""

# Columns a partial update may touch
UPDATABLE_COLUMNS = frozenset({
    "provider_id",
    "status",
    "payment_status",
    "final_price",
    "preferred_date",
    "preferred_time",
    "title",
    "description",
})


class JobRepository:
    """Jobs table access."""

    def __init__(self, db: DatabaseManager) -> None:
        """
        Args:
            db: Database manager (dependency injection)
        """
        self._db = db

    async def get_by_id(self, job_id: str) -> Optional[Job]:
        """
        Fetches a job by id.

        Args:
            job_id: Job UUID

        Returns:
            Job or None
        """
        row = await self._db.fetchrow(
            f"SELECT {JOB_COLUMNS} FROM jobs WHERE id = $1",
            job_id,
        )
        return self._row_to_job(row) if row else None

    async def list_for_user(self, user_id: str, user_type: UserType) -> list[Job]:
        """
        Jobs where the user takes the given role, newest first.
        """
        column = "customer_id" if user_type == UserType.CUSTOMER else "provider_id"
        rows = await self._db.fetch(
            f"""
            SELECT {JOB_COLUMNS}
            FROM jobs
            WHERE {column} = $1
            ORDER BY created_at DESC
            """,
            user_id,
        )
        return [self._row_to_job(row) for row in rows]

    async def create(self, job: Job) -> Job:
        """
        Inserts a job.

        Args:
            job: Job with a pre-generated id

        Returns:
            The stored job
        """
        row = await self._db.fetchrow(
            f"""
            INSERT INTO jobs (
                id, customer_id, provider_id, category_id, title, description, location,
                preferred_date, preferred_time, budget_min, budget_max, final_price,
                status, payment_status, created_at, updated_at
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, $16)
            RETURNING {JOB_COLUMNS}
            """,
            job.id,
            job.customer_id,
            job.provider_id,
            job.category_id,
            job.title,
            job.description,
            job.location,
            job.preferred_date,
            job.preferred_time,
            job.budget_min,
            job.budget_max,
            job.final_price,
            job.status.value,
            job.payment_status.value,
            job.created_at,
            job.updated_at,
        )

        await log_info(f"Job {job.id} created for customer {job.customer_id}", type_msg=TypeMsg.DEBUG)

        return self._row_to_job(row)

    async def update(self, job_id: str, changes: dict[str, Any]) -> Optional[Job]:
        """
        Applies a partial update and bumps updated_at.

        Args:
            job_id: Job UUID
            changes: Column -> new value (only UPDATABLE_COLUMNS)

        Returns:
            The updated job or None if it does not exist
        """
        unknown = set(changes) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Columns not updatable: {sorted(unknown)}")

        assignments = []
        values: list[Any] = []
        for index, (column, value) in enumerate(changes.items(), start=2):
            assignments.append(f"{column} = ${index}")
            values.append(value)
        assignments.append("updated_at = NOW()")

        row = await self._db.fetchrow(
            f"""
            UPDATE jobs
            SET {", ".join(assignments)}
            WHERE id = $1
            RETURNING {JOB_COLUMNS}
            """,
            job_id,
            *values,
        )
        return self._row_to_job(row) if row else None

    @staticmethod
    def _row_to_job(row: Any) -> Job:
        """Maps a database row onto Job."""
        return Job(
            id=row["id"],
            customer_id=row["customer_id"],
            provider_id=row["provider_id"],
            category_id=row["category_id"],
            title=row["title"],
            description=row["description"],
            location=row["location"],
            preferred_date=row["preferred_date"],
            preferred_time=row["preferred_time"],
            budget_min=_to_float(row["budget_min"]),
            budget_max=_to_float(row["budget_max"]),
            final_price=_to_float(row["final_price"]),
            status=JobStatus(row["status"]),
            payment_status=PaymentStatus(row["payment_status"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


def _to_float(value: Any) -> Optional[float]:
    """NUMERIC comes back from asyncpg as Decimal."""
    return float(value) if value is not None else None
