"""
Review service.
"""

from __future__ import annotations

from huduma.common.constants import JobStatus, TypeMsg
from huduma.common.errors import NotFoundError, ValidationError
from huduma.common.logger import log_info
from huduma.core.jobs.repository import JobRepository
from huduma.core.reviews.models import ProviderReviews, Review, ReviewCreateDTO
from huduma.core.reviews.repository import ReviewRepository


class ReviewService:
    """One review per completed job, written by that job's customer."""

    def __init__(self, repository: ReviewRepository, jobs: JobRepository) -> None:
        self._repo = repository
        self._jobs = jobs

    async def create_review(self, dto: ReviewCreateDTO) -> Review:
        """
        Raises:
            NotFoundError: job does not exist
            ValidationError: job not completed, parties do not match the job,
                job already reviewed
        """
        job = await self._jobs.get_by_id(dto.job_id)
        if job is None:
            raise NotFoundError.for_entity("Job", dto.job_id)

        if job.status != JobStatus.COMPLETED:
            raise ValidationError(
                "Only completed jobs can be reviewed",
                {"job_id": job.id, "status": job.status.value},
            )
        if dto.customer_id != job.customer_id or dto.provider_id != job.provider_id:
            raise ValidationError(
                "Review must come from the job's customer about the job's provider",
                {"job_id": job.id},
            )
        if await self._repo.get_by_job(job.id) is not None:
            raise ValidationError("Job already reviewed", {"job_id": job.id})

        review = await self._repo.create(Review(**dto.model_dump()))

        await log_info(
            f"Provider {review.provider_id} rated {review.rating} for job {review.job_id}",
            type_msg=TypeMsg.INFO,
        )
        return review

    async def list_for_provider(self, provider_id: str) -> ProviderReviews:
        reviews = await self._repo.list_for_provider(provider_id)
        summary = await self._repo.rating_summary(provider_id)
        return ProviderReviews(summary=summary, reviews=reviews)
