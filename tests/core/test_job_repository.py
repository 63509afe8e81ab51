# tests/core/test_job_repository.py
"""
Tests for JobRepository.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from huduma.common.constants import JobStatus, PaymentStatus, UserType
from huduma.core.jobs.models import Job
from huduma.core.jobs.repository import JobRepository

NOW = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def _job_row(**overrides):
    row = {
        "id": "job-1",
        "customer_id": "cust-1",
        "provider_id": "prov-1",
        "category_id": "plumbing",
        "title": "Fix sink",
        "description": "Leaking pipe",
        "location": "Kilimani",
        "preferred_date": None,
        "preferred_time": "morning",
        "budget_min": Decimal("1500.00"),
        "budget_max": Decimal("3000.00"),
        "final_price": None,
        "status": "pending",
        "payment_status": "pending",
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


class TestJobRepository:

    @pytest.mark.asyncio
    async def test_get_by_id_maps_row(self, mock_db) -> None:
        mock_db.fetchrow.return_value = _job_row()
        repo = JobRepository(mock_db)

        job = await repo.get_by_id("job-1")

        assert job is not None
        assert job.budget_min == 1500.0
        assert isinstance(job.budget_max, float)
        assert job.final_price is None
        assert job.status == JobStatus.PENDING

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, mock_db) -> None:
        repo = JobRepository(mock_db)

        assert await repo.get_by_id("nope") is None

    @pytest.mark.asyncio
    async def test_create_stores_enum_values(self, mock_db) -> None:
        mock_db.fetchrow.return_value = _job_row()
        repo = JobRepository(mock_db)
        job = Job(
            id="job-1",
            customer_id="cust-1",
            provider_id="prov-1",
            category_id="plumbing",
            title="Fix sink",
            description="Leaking pipe",
            location="Kilimani",
        )

        await repo.create(job)

        args = mock_db.fetchrow.call_args.args
        assert "pending" in args
        assert not any(isinstance(a, (JobStatus, PaymentStatus)) for a in args)

    @pytest.mark.asyncio
    async def test_update_builds_set_clause(self, mock_db) -> None:
        mock_db.fetchrow.return_value = _job_row(status="accepted", payment_status="paid")
        repo = JobRepository(mock_db)

        job = await repo.update("job-1", {"status": "accepted", "payment_status": "paid"})

        query, *values = mock_db.fetchrow.call_args.args
        assert "status = $2" in query
        assert "payment_status = $3" in query
        assert "updated_at = NOW()" in query
        assert values == ["job-1", "accepted", "paid"]
        assert job.payment_status == PaymentStatus.PAID

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_columns(self, mock_db) -> None:
        repo = JobRepository(mock_db)

        with pytest.raises(ValueError):
            await repo.update("job-1", {"customer_id": "someone-else"})

        mock_db.fetchrow.assert_not_called()

    @pytest.mark.asyncio
    async def test_list_for_provider_filters_provider_column(self, mock_db) -> None:
        mock_db.fetch.return_value = [_job_row()]
        repo = JobRepository(mock_db)

        jobs = await repo.list_for_user("prov-1", UserType.PROVIDER)

        assert "WHERE provider_id = $1" in mock_db.fetch.call_args.args[0]
        assert len(jobs) == 1
