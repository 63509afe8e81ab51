# tests/core/test_reviews_service.py
"""
Tests for ReviewService.
"""

from __future__ import annotations

import pytest

from huduma.common.constants import JobStatus, UserType
from huduma.common.errors import NotFoundError, ValidationError
from huduma.core.reviews.models import ReviewCreateDTO
from huduma.core.reviews.service import ReviewService


@pytest.fixture
def service(reviews_repo, jobs_repo) -> ReviewService:
    return ReviewService(reviews_repo, jobs_repo)


@pytest.fixture
def completed_job(jobs_repo, customer, provider):
    return jobs_repo.add(customer.id, provider.id, JobStatus.COMPLETED)


def _dto(job, rating: int = 5, comment: str | None = "Quick and tidy work") -> ReviewCreateDTO:
    return ReviewCreateDTO(
        job_id=job.id,
        customer_id=job.customer_id,
        provider_id=job.provider_id,
        rating=rating,
        comment=comment,
    )


class TestCreateReview:

    @pytest.mark.asyncio
    async def test_completed_job(self, service, reviews_repo, completed_job) -> None:
        review = await service.create_review(_dto(completed_job))

        assert review.rating == 5
        assert review.id in reviews_repo.reviews

    @pytest.mark.asyncio
    async def test_job_not_completed(self, service, job) -> None:
        with pytest.raises(ValidationError):
            await service.create_review(_dto(job))

    @pytest.mark.asyncio
    async def test_unknown_job(self, service, completed_job) -> None:
        dto = _dto(completed_job).model_copy(update={"job_id": "missing"})

        with pytest.raises(NotFoundError):
            await service.create_review(dto)

    @pytest.mark.asyncio
    async def test_wrong_customer(self, service, users_repo, completed_job) -> None:
        stranger = users_repo.add(UserType.CUSTOMER, first_name="Wanjiku")
        dto = _dto(completed_job).model_copy(update={"customer_id": stranger.id})

        with pytest.raises(ValidationError):
            await service.create_review(dto)

    @pytest.mark.asyncio
    async def test_one_review_per_job(self, service, completed_job) -> None:
        await service.create_review(_dto(completed_job))

        with pytest.raises(ValidationError):
            await service.create_review(_dto(completed_job, rating=1))

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_range(self, completed_job, rating: int) -> None:
        with pytest.raises(ValueError):
            _dto(completed_job, rating=rating)


class TestListForProvider:

    @pytest.mark.asyncio
    async def test_summary(self, service, jobs_repo, customer, provider) -> None:
        for rating in (5, 4):
            done = jobs_repo.add(customer.id, provider.id, JobStatus.COMPLETED)
            await service.create_review(_dto(done, rating=rating))

        result = await service.list_for_provider(provider.id)

        assert result.summary.review_count == 2
        assert result.summary.average_rating == 4.5
        assert all(r.customer.id == customer.id for r in result.reviews)

    @pytest.mark.asyncio
    async def test_no_reviews(self, service, provider) -> None:
        result = await service.list_for_provider(provider.id)

        assert result.reviews == []
        assert result.summary.review_count == 0
        assert result.summary.average_rating == 0.0
